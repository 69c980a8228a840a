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
Models exchanged with the container engine.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel


class ContainerHandle(BaseModel):
    """
    A container created by the engine.
    """
    id: str
    name: str = ""


class ImageHandle(BaseModel):
    """
    An image known to the engine, as returned by inspect or commit.
    """
    id: str
    repo_tags: List[str] = []
    created: Optional[str] = None
    size: Optional[int] = None
    metadata: Dict[str, Any] = {}


class PortBinding(BaseModel):
    """
    Host side of a published port. No host_ip means all interfaces.
    """
    host_port: str
    host_ip: Optional[str] = None


class ExposedPortMap(BaseModel):
    """
    A published container port paired with the address users reach it on.
    """
    container_port: str
    host_uri: str


class BindSpec(BaseModel):
    """
    Host path to container path filesystem mapping.
    """
    host_path: str
    container_path: str
    mode: str = ""

    def to_engine(self) -> str:
        """Renders the ``host:container[:mode]`` form engines accept."""
        if self.mode:
            return f"{self.host_path}:{self.container_path}:{self.mode}"
        return f"{self.host_path}:{self.container_path}"


class AuthConfig(BaseModel):
    """
    Registry credentials.
    """
    username: str = ""
    password: str = ""
    server_address: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.username and not self.password


class ContainerConfig(BaseModel):
    """
    Creation settings for a container.
    """
    image: str
    cmd: Optional[List[str]] = None
    entrypoint: Optional[List[str]] = None
    env: List[str] = []

    # Streams
    tty: bool = False
    open_stdin: bool = True
    attach_stdin: bool = True
    attach_stdout: bool = True
    attach_stderr: bool = True

    # Networking
    exposed_ports: List[str] = []
    network_disabled: bool = False
    dns: List[str] = []


class HostConfig(BaseModel):
    """
    Host-side settings for a container: mounts, links and published ports.
    """
    binds: List[str] = []
    links: List[str] = []
    port_bindings: Dict[str, List[PortBinding]] = {}
    dns: List[str] = []


class PullStatus(BaseModel):
    """
    One progress record from an image pull stream.
    """
    status: str = ""
    id: str = ""
    progress: str = ""
    progress_detail: Dict[str, Any] = {}
    error: str = ""

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "PullStatus":
        """
        Builds a status from a raw engine record.

        :param record: Decoded JSON object from the pull stream.
        """
        error = record.get("error") or (record.get("errorDetail") or {}).get("message", "")
        return cls(
            status=record.get("status") or "",
            id=record.get("id") or "",
            progress=record.get("progress") or "",
            progress_detail=record.get("progressDetail") or {},
            error=error or "",
        )
