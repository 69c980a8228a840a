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
Orchestration of one pipeline run: the box, its services, and teardown.
"""
import logging
from typing import Dict, List, Optional

from ..ENGINE.engine_client import ContainerEngine
from ..MODELS.engine_types import ContainerHandle, ExposedPortMap, ImageHandle
from ..MODELS.pipeline_config import PipelineConfig
from ..MODELS.pipeline_options import EngineOptions, PipelineOptions
from ..REGISTRY.image_reference import ImageReference
from ..UTILS.context import PipelineContext
from ..UTILS.environment import Environment
from .box import Box
from .service_box import ContainerServiceBox

logger = logging.getLogger(__name__)


class BoxOrchestrator:
    """
    Builds a box and its services from a pipeline file and drives them.
    """
    def __init__(self,
                 config: PipelineConfig,
                 options: PipelineOptions,
                 engine_options: EngineOptions,
                 client: ContainerEngine):
        """
        Initializes the orchestrator.

        :param config: Parsed pipeline file.
        :param options: Options of this run.
        :param engine_options: Engine settings shared by every box.
        :param client: Engine shared by every box.
        """
        self.config = config
        self.box = Box(config.box, options, engine_options, client)
        self.services: List[ContainerServiceBox] = []
        seen: Dict[str, int] = {}
        for service_config in config.services:
            service = ContainerServiceBox(service_config, options, engine_options, client)
            # later services with a repeated alias get a numbered container name
            seen[service.short_name] = seen.get(service.short_name, 0) + 1
            if seen[service.short_name] > 1:
                service.instance = str(seen[service.short_name])
            self.services.append(service)
            self.box.add_service(service)

    def up(self, context: PipelineContext, env: Environment) -> ContainerHandle:
        """
        Fetches every image, then starts the services and the box in order.
        """
        for service in self.services:
            logger.info("Fetching service image %s", service.get_name())
            service.fetch(context, env)
        logger.info("Fetching box image %s", self.box.get_name())
        self.box.fetch(context, env)
        return self.box.run(context, env)

    def ports(self) -> List[ExposedPortMap]:
        return self.box.exposed_port_maps()

    def down(self, commit: Optional[str] = None) -> Optional[ImageHandle]:
        """
        Stops all containers, optionally commits the box, and cleans up.

        :param commit: 'repository[:tag]' to commit the box container to.
        :return: The committed image, if any.
        """
        self.box.stop()
        image = None
        try:
            if commit:
                reference = ImageReference.from_box_id(commit)
                image = self.box.commit(reference.repository, reference.tag)
        except Exception:
            try:
                self.box.clean()
            except Exception as e:
                logger.warning("Cleanup after failed commit also failed: %s", e)
            raise
        self.box.clean()
        return image
