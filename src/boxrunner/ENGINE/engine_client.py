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
Capability interface a container engine offers to boxes.
"""
from abc import ABC, abstractmethod
from typing import BinaryIO, List, Optional

from ..MODELS.engine_types import AuthConfig, ContainerConfig, ContainerHandle, HostConfig, ImageHandle
from ..UTILS.context import PipelineContext


class ContainerEngine(ABC):
    """
    Operations boxes need from a container engine.

    One instance is shared by reference between a box and its service boxes.
    Implementations raise EngineError (or NotFound / ContainerNotRunning) for
    every failure.
    """

    @abstractmethod
    def create_container(self, name: str, config: ContainerConfig, host_config: HostConfig) -> ContainerHandle:
        """Create, but do not start, a container."""

    @abstractmethod
    def start_container(self, container_id: str) -> None:
        pass

    @abstractmethod
    def stop_container(self, container_id: str, timeout: int) -> None:
        """
        Stop a container, killing it after ``timeout`` seconds.

        :raises ContainerNotRunning: If the container is already stopped.
        """

    @abstractmethod
    def restart_container(self, container_id: str, timeout: int) -> None:
        pass

    @abstractmethod
    def remove_container(self, container_id: str, remove_volumes: bool = False, force: bool = False) -> None:
        pass

    @abstractmethod
    def remove_image(self, image_id: str) -> None:
        pass

    @abstractmethod
    def pull_image(self, repository: str, tag: str, auth: AuthConfig, output_stream: BinaryIO,
                   context: Optional[PipelineContext] = None) -> None:
        """
        Pull an image, writing the raw JSON progress records to output_stream.
        """

    @abstractmethod
    def inspect_image(self, name: str) -> ImageHandle:
        pass

    @abstractmethod
    def commit_container(self, container_id: str, repository: str, tag: str,
                         message: str, author: str) -> ImageHandle:
        pass

    @abstractmethod
    def export_image(self, name: str, output_stream: BinaryIO) -> None:
        """Write a tar export of the image to output_stream."""

    @abstractmethod
    def check_access(self, auth: AuthConfig, access: str, repository: str, registry: str) -> bool:
        pass

    @abstractmethod
    def attach_interactive(self, container_id: str, cmd: List[str], env: List[str]) -> None:
        """Run cmd in the container with the terminal attached, feeding env lines first."""
