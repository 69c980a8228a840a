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
State and operations shared by the primary box and service boxes.
"""
import logging
import shlex
import threading
from typing import List, Optional

from ..ENGINE.engine_client import ContainerEngine
from ..errors import AccessDenied, BoxNotStarted, ConfigurationError, ContainerNotRunning, EngineError
from ..MODELS.box_config import BoxConfig
from ..MODELS.engine_types import AuthConfig, ContainerHandle, ImageHandle
from ..MODELS.pipeline_options import EngineOptions, PipelineOptions
from ..REGISTRY.image_reference import ImageReference
from ..UTILS.context import PipelineContext
from ..UTILS.environment import Environment
from ..UTILS.status_pipe import StatusPipe
from .status_emitter import emit_status

logger = logging.getLogger(__name__)


class BoxLogger(logging.LoggerAdapter):
    """Prefixes messages with the box name."""

    def process(self, msg, kwargs):
        return f"[{self.extra['box']}] {msg}", kwargs


def engine_env(box_env: dict, env: Environment) -> List[str]:
    """
    Renders declared box variables as ``KEY=value`` with upper-cased keys
    and interpolated values.
    """
    return [f"{key.upper()}={env.interpolate(value)}" for key, value in box_env.items()]


class BaseBox:
    """
    Identity, image fetching and container bookkeeping of one box.

    A box is owned by a single pipeline run; it holds no locks and callers
    must not drive one instance from several threads.
    """
    STOP_TIMEOUT = 1

    def __init__(self,
                 config: BoxConfig,
                 options: PipelineOptions,
                 engine_options: EngineOptions,
                 client: ContainerEngine):
        """
        :param config: Declared box configuration.
        :param options: Pipeline options of the run this box belongs to.
        :param engine_options: Engine settings (DNS, local shortcut, host).
        :param client: Engine shared with the other boxes of the run.
        :raises InvalidIdentifier: If the box id contains '@'.
        """
        self.reference = ImageReference.from_box_id(config.id, config.tag, config.registry)
        self.name = self.reference.name
        self.short_name = self.reference.short_name
        self.repository = self.reference.repository
        self.tag = self.reference.tag

        self.config = config
        self.options = options
        self.engine_options = engine_options
        self.client = client

        self.cmd = config.cmd
        self.entrypoint = config.entrypoint

        self.container: Optional[ContainerHandle] = None
        self.image: Optional[ImageHandle] = None
        self.status_thread: Optional[threading.Thread] = None

        self.logger = BoxLogger(logger, {"box": self.name, "short_name": self.short_name})

    def get_name(self) -> str:
        return self.name

    def get_tag(self) -> str:
        return self.tag

    def get_id(self) -> str:
        """The container id, or '' if no container was created."""
        if self.container is not None:
            return self.container.id
        return ""

    def require_container(self) -> ContainerHandle:
        if self.container is None:
            raise BoxNotStarted(f"Box {self.name} has no container")
        return self.container

    def link(self) -> str:
        """The ``container:alias`` link other containers use to reach this box."""
        return f"{self.require_container().name}:{self.short_name}"

    def split_command(self, value: str, field: str) -> List[str]:
        """
        Tokenizes a command string with shell quoting rules.

        :raises ConfigurationError: On unbalanced quotes or escapes.
        """
        try:
            return shlex.split(value)
        except ValueError as e:
            raise ConfigurationError(f"Invalid {field} for box {self.name}: {e}") from e

    def fetch(self, context: PipelineContext, env: Environment) -> ImageHandle:
        """
        Makes the box image available to the engine.

        With the local shortcut only the local image is inspected. Otherwise
        read access is checked against the registry, the image is pulled
        while progress streams to the context emitter, and the pulled image
        is inspected.

        :raises AccessDenied: If the registry refuses read access.
        """
        context.check()
        image_name = env.interpolate(self.name)

        if self.engine_options.local:
            self.image = self.client.inspect_image(image_name)
            return self.image

        registry = env.interpolate(self.config.registry)
        auth = AuthConfig(
            username=env.interpolate(self.config.username),
            password=env.interpolate(self.config.password),
            server_address=registry,
        )
        repository = env.interpolate(self.repository)

        try:
            allowed = self.client.check_access(auth, "read", repository, registry)
        except EngineError:
            self.logger.error("Error during check access")
            raise

        if not allowed:
            self.logger.error("Not allowed to interact with this repository: %s", self.repository)
            raise AccessDenied(self.repository)

        pipe = StatusPipe()
        self.status_thread = threading.Thread(target=emit_status, args=(context.emitter, pipe), daemon=True)
        self.status_thread.start()
        try:
            self.client.pull_image(repository, env.interpolate(self.tag), auth, pipe, context)
        finally:
            pipe.close()

        self.image = self.client.inspect_image(image_name)
        return self.image

    def stop_container(self, container_id: str, kind: str) -> None:
        """
        Stops a container without ever raising; failures become warnings.

        :param container_id: Container to stop.
        :param kind: 'Box' or 'Service', used in log messages.
        """
        self.logger.debug("Stopping %s container %s", kind.lower(), container_id)
        try:
            self.client.stop_container(container_id, self.STOP_TIMEOUT)
        except ContainerNotRunning:
            self.logger.warning("%s container has already stopped.", kind)
        except Exception as e:
            self.logger.warning("Wasn't able to stop %s container %s: %s", kind.lower(), container_id, e)
