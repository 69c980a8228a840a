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
The pipeline box: provisions the primary container of a pipeline run,
starts its services first, and tears everything down afterward.
"""
from typing import BinaryIO, Iterable, List, Optional

from ..ENGINE.engine_client import ContainerEngine
from ..MODELS.box_config import BoxConfig
from ..MODELS.engine_types import ContainerConfig, ContainerHandle, ExposedPortMap, HostConfig, ImageHandle
from ..MODELS.pipeline_options import EngineOptions, PipelineOptions
from ..UTILS.context import PipelineContext
from ..UTILS.environment import Environment
from ..UTILS.port_translation import exposed_port_maps, exposed_ports, port_bindings
from .base_box import BaseBox, engine_env
from .bind_manager import BindManager
from .service_box import ServiceBox

INFRASTRUCTURE_VOLUMES = ["/var/run/docker.sock", "/usr/local/bin/docker"]


class Box(BaseBox):
    """
    Orchestrates the lifecycle of a pipeline's primary container.

    Services are kept in the order they were added; that order is the start
    order and the link order. Committed images are kept in commit order.
    """
    DEFAULT_CMD = "/bin/bash"
    COMMIT_AUTHOR = "boxrunner"
    COMMIT_MESSAGE = "Build completed"

    def __init__(self,
                 config: BoxConfig,
                 options: PipelineOptions,
                 engine_options: EngineOptions,
                 client: ContainerEngine,
                 volumes: Optional[List[str]] = None):
        """
        :param volumes: Infrastructure paths bound at the same container path.
            Defaults to the engine socket and CLI binary.
        :raises InvalidIdentifier: If the box id contains '@'.
        """
        super().__init__(config, options, engine_options, client)
        self.cmd = config.cmd or self.DEFAULT_CMD
        self.volumes = list(INFRASTRUCTURE_VOLUMES if volumes is None else volumes)
        self.bind_manager = BindManager(options, self.volumes)

        self.services: List[ServiceBox] = []
        self.images: List[ImageHandle] = []

    def add_service(self, service: ServiceBox) -> None:
        self.services.append(service)

    def links(self) -> List[str]:
        service_links = [service.link() for service in self.services]
        self.logger.debug("Creating links: %s", service_links)
        return service_links

    def binds(self) -> List[str]:
        return [bind.to_engine() for bind in self.bind_manager.binds()]

    def exposed_port_maps(self) -> List[ExposedPortMap]:
        """Published ports paired with the host address they are reachable on."""
        return exposed_port_maps(self.engine_options.host, self.options.publish_ports)

    def run_services(self, context: PipelineContext, env: Environment) -> None:
        """
        Starts the services one after another. Each service receives the
        links of the services started before it, so later services can
        reach earlier ones. The first failure aborts.
        """
        links: List[str] = []
        for service in self.services:
            context.check()
            self.logger.debug("Starting service: %s", service.get_name())
            service.run(context, env, list(links))
            links.append(service.link())

    def run(self, context: PipelineContext, env: Environment) -> ContainerHandle:
        """
        Runs the services, then creates and starts the box container.

        A container that was created but failed to start stays recorded so
        clean() can remove it.

        :return: The started container.
        """
        self.run_services(context, env)
        self.logger.debug("Starting base box: %s", self.name)
        context.check()

        entrypoint = None
        if self.entrypoint:
            entrypoint = self.split_command(self.entrypoint, "entrypoint")
        cmd = self.split_command(self.cmd, "cmd")

        published = self.options.publish_ports
        config = ContainerConfig(
            image=env.interpolate(self.name),
            cmd=cmd,
            entrypoint=entrypoint,
            env=engine_env(self.config.env, env),
            tty=False,
            open_stdin=True,
            attach_stdin=True,
            attach_stdout=True,
            attach_stderr=True,
            exposed_ports=exposed_ports(published),
            network_disabled=self.engine_options.network_disabled,
            dns=self.engine_options.dns,
        )
        host_config = HostConfig(
            binds=self.binds(),
            links=self.links(),
            port_bindings=port_bindings(published),
            dns=self.engine_options.dns,
        )

        container = self.client.create_container(self.options.container_name, config, host_config)
        self.logger.debug("Container: %s", container.id)
        self.container = container
        self.client.start_container(container.id)
        return container

    def restart(self) -> ContainerHandle:
        container = self.require_container()
        self.client.restart_container(container.id, self.STOP_TIMEOUT)
        return container

    def recover_interactive(self, cwd: str, environments: Iterable[Environment]) -> None:
        """
        Restarts the box and attaches an interactive shell to it.

        The shell first receives the exported variables of each environment
        (hidden ones included), then changes to cwd and clears the screen.
        """
        container = self.restart()

        lines = []
        for env in environments:
            lines.extend(env.export())
            if env.hidden is not None:
                lines.extend(env.hidden.export())
        lines.append(f"cd {cwd}")
        lines.append("clear")

        self.client.attach_interactive(container.id, self.split_command(self.cmd, "cmd"), lines)

    def stop(self) -> None:
        """
        Stops every service and then the box container.

        Never raises: containers that already stopped or fail to stop only
        produce warnings, and the remaining containers are still stopped.
        """
        for service in self.services:
            service_id = service.get_id()
            if not service_id:
                self.logger.debug("Service %s has no container to stop", service.get_name())
                continue
            self.stop_container(service_id, "Service")

        if self.container is not None:
            self.stop_container(self.container.id, "Box")

    def clean(self) -> None:
        """
        Force-removes the box and service containers with their anonymous
        volumes. The first removal failure is raised and the remaining
        containers are left alone.

        Unless the pipeline keeps its commits, committed images are then
        removed newest first; image removal failures are only logged.
        """
        containers = []
        if self.container is not None:
            containers.append(self.container.id)
        for service in self.services:
            container_id = service.get_id()
            if container_id:
                containers.append(container_id)

        for container_id in containers:
            self.logger.debug("Removing container: %s", container_id)
            self.client.remove_container(container_id, remove_volumes=True, force=True)

        if not self.options.should_commit:
            for image in reversed(self.images):
                self.logger.debug("Removing image: %s", image.id)
                try:
                    self.client.remove_image(image.id)
                except Exception as e:
                    self.logger.warning("Wasn't able to remove image %s: %s", image.id, e)

    def commit(self, name: str, tag: str, message: str = "") -> ImageHandle:
        """
        Snapshots the box container into a new image and remembers it.

        :raises BoxNotStarted: If the box has no container.
        """
        container = self.require_container()
        self.logger.debug("Commit container: %s %s", name, tag)
        image = self.client.commit_container(
            container.id, name, tag, message or self.COMMIT_MESSAGE, self.COMMIT_AUTHOR
        )
        self.images.append(image)
        return image

    def export_image(self, name: str, output_stream: BinaryIO) -> None:
        """
        Streams a tar export of the image to output_stream.
        """
        self.logger.info("Storing image %s", name)
        self.client.export_image(name, output_stream)
