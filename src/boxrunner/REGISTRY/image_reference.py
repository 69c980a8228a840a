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
Box image reference resolution.
Turns a box identifier like 'ubuntu' or 'quay.io/org/app:1.2' into the
repository, tag and names used by the engine and the registry.
"""

from dataclasses import dataclass
from typing import Tuple

from ..errors import InvalidIdentifier


@dataclass
class ImageReference:
    """
    Resolved box image reference.

    Examples:
        - ubuntu -> ubuntu:latest, short name 'ubuntu'
        - ubuntu:22.04 -> ubuntu:22.04
        - wercker/redis:2.8 with tag override 'edge' -> wercker/redis:edge,
          short name 'redis'
    """

    repository: str
    tag: str = "latest"
    registry: str = ""

    DEFAULT_REGISTRY = "docker.io"
    DEFAULT_TAG = "latest"

    @classmethod
    def from_box_id(cls, identifier: str, tag: str = "", registry: str = "") -> "ImageReference":
        """
        Resolve a box identifier.

        Args:
            identifier: 'repository[:tag]'. Digests ('@') are rejected.
            tag: Explicit tag; wins over a tag embedded in the identifier.
            registry: Registry host the repository lives on, if not the default.

        Returns:
            Resolved ImageReference.
        """
        if "@" in identifier:
            raise InvalidIdentifier(
                f"Invalid box name {identifier!r}, '@' is not allowed in repositories."
            )

        parts = identifier.split(":")
        repository = parts[0]
        resolved_tag = cls.DEFAULT_TAG
        if len(parts) > 1 and parts[1]:
            resolved_tag = parts[1]
        if tag:
            resolved_tag = tag

        return cls(repository=repository, tag=resolved_tag, registry=registry)

    @property
    def name(self) -> str:
        """Engine image name, 'repository:tag'."""
        return f"{self.repository}:{self.tag}"

    @property
    def short_name(self) -> str:
        """Last path segment of the repository, used as link alias."""
        return self.repository.split("/")[-1]

    def _split_registry(self) -> Tuple[str, str]:
        """Separate a registry host embedded in the repository, if any."""
        parts = self.repository.split("/")
        first = parts[0]
        if len(parts) > 1 and ("." in first or ":" in first or first == "localhost"):
            return first, "/".join(parts[1:])
        return "", self.repository

    @property
    def registry_host(self) -> str:
        """Registry hostname without scheme."""
        embedded, _ = self._split_registry()
        host = self.registry or embedded or self.DEFAULT_REGISTRY
        if "://" in host:
            host = host.split("://", 1)[1]
        return host.rstrip("/")

    @property
    def registry_repository(self) -> str:
        """Repository path as the registry API expects it."""
        _, path = self._split_registry()
        if self.registry_host == self.DEFAULT_REGISTRY and "/" not in path:
            return f"library/{path}"
        return path

    @property
    def registry_url(self) -> str:
        """Get the registry URL for API calls."""
        if self.registry_host == self.DEFAULT_REGISTRY:
            return "https://registry-1.docker.io"
        if "://" in self.registry:
            return self.registry.rstrip("/")
        return f"https://{self.registry_host}"

    def __str__(self) -> str:
        return self.name
