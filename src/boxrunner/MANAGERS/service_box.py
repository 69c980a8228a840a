# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Service boxes: containers a pipeline box depends on and links to.
"""
import re
from abc import ABC, abstractmethod
from typing import List

from ..MODELS.engine_types import ContainerConfig, ContainerHandle, HostConfig
from ..UTILS.context import PipelineContext
from ..UTILS.environment import Environment
from .base_box import BaseBox, engine_env


class ServiceBox(ABC):
    """
    What a box needs from each of its services.
    """

    @abstractmethod
    def get_name(self) -> str:
        pass

    @abstractmethod
    def get_id(self) -> str:
        """The container id, or '' if the service never started."""

    @abstractmethod
    def link(self) -> str:
        """The ``container:alias`` link exposing this service."""

    @abstractmethod
    def run(self, context: PipelineContext, env: Environment, links: List[str]) -> ContainerHandle:
        """
        Create and start the service container.

        :param links: Links to the services started before this one.
        """


class ContainerServiceBox(BaseBox, ServiceBox):
    """
    A service backed by its own engine container.

    The link alias is the configured ``name`` or else the repository's
    short name. ``instance`` tells apart services sharing an alias.
    """

    def __init__(self, config, options, engine_options, client, instance: str = ""):
        super().__init__(config, options, engine_options, client)
        if config.name:
            self.short_name = config.name
        self.instance = instance

    @property
    def container_name(self) -> str:
        name = f"{self.options.container_name}-service-{self.short_name}"
        if self.instance:
            name = f"{name}-{self.instance}"
        return re.sub(r"[^a-zA-Z0-9_.-]", "-", name)

    def run(self, context: PipelineContext, env: Environment, links: List[str]) -> ContainerHandle:
        context.check()
        self.logger.debug("Starting service container %s", self.container_name)

        cmd = self.split_command(self.cmd, "cmd") if self.cmd else None
        entrypoint = self.split_command(self.entrypoint, "entrypoint") if self.entrypoint else None

        config = ContainerConfig(
            image=env.interpolate(self.name),
            cmd=cmd,
            entrypoint=entrypoint,
            env=engine_env(self.config.env, env),
            network_disabled=self.engine_options.network_disabled,
            dns=self.engine_options.dns,
        )
        host_config = HostConfig(links=list(links), dns=self.engine_options.dns)

        container = self.client.create_container(self.container_name, config, host_config)
        self.container = container
        self.client.start_container(container.id)
        return container
