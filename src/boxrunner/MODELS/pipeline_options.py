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
Options records consumed by boxes: where the pipeline lives on the host and
in the guest, and how to reach the container engine.
"""
import os
import posixpath
from typing import List, Optional
from pydantic import BaseModel


class PipelineOptions(BaseModel):
    """
    Per-run pipeline settings.

    ``host_root`` is the host working directory whose top-level entries are
    bound into the container.
    """
    pipeline_id: str
    host_root: str = "."
    guest_root: str = "/pipeline"
    mnt_root: str = "/mnt"

    direct_mount: bool = False
    publish_ports: List[str] = []
    should_commit: bool = False

    @property
    def container_name(self) -> str:
        return f"pipeline-{self.pipeline_id}"

    def host_path(self, *parts: str) -> str:
        return os.path.join(os.path.abspath(self.host_root), *parts)

    def guest_path(self, *parts: str) -> str:
        return posixpath.join(self.guest_root, *parts)

    def mnt_path(self, *parts: str) -> str:
        return posixpath.join(self.mnt_root, *parts)


class EngineOptions(BaseModel):
    """
    Settings for the container engine connection.
    """
    host: str = ""
    dns: List[str] = []
    local: bool = False
    network_disabled: bool = False
    timeout: Optional[int] = None

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "EngineOptions":
        """
        Builds options from DOCKER_HOST, BOXRUNNER_DNS and BOXRUNNER_LOCAL.

        :param environ: Mapping to read from. Defaults to os.environ.
        """
        environ = os.environ if environ is None else environ
        dns = [d.strip() for d in environ.get("BOXRUNNER_DNS", "").split(",") if d.strip()]
        local = environ.get("BOXRUNNER_LOCAL", "").lower() in ("1", "true", "yes")
        return cls(host=environ.get("DOCKER_HOST", ""), dns=dns, local=local)
