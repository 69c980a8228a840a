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
Key-value environment used to resolve image references, credentials and
declared box variables.
"""
import os
import shlex
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from dotenv import dotenv_values

from .string_interpolation import EnvironmentInterpolator


class Environment:
    """
    Ordered set of environment variables with an optional hidden part.

    Hidden variables take part in interpolation but are exported
    separately so callers can keep them out of logs.
    """
    def __init__(self, items: Optional[Iterable[Tuple[str, str]]] = None,
                 hidden: Optional["Environment"] = None):
        self._vars: Dict[str, str] = {}
        self.hidden = hidden
        if items:
            for key, value in items:
                self.add(key, value)

    @classmethod
    def from_os(cls) -> "Environment":
        """Snapshot of the current process environment."""
        return cls(os.environ.items())

    @classmethod
    def from_file(cls, env_path: str) -> "Environment":
        """
        Loads variables from a .env file.

        :param env_path: Path to the .env file.
        """
        values = dotenv_values(env_path)
        return cls((k, v if v is not None else "") for k, v in values.items())

    def add(self, key: str, value: str) -> None:
        self._vars[key] = value

    def update(self, values: Mapping[str, str]) -> None:
        for key, value in values.items():
            self.add(key, value)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        if key in self._vars:
            return self._vars[key]
        if self.hidden is not None:
            return self.hidden.get(key, default)
        return default

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def items(self) -> List[Tuple[str, str]]:
        return list(self._vars.items())

    def as_dict(self) -> Dict[str, str]:
        """Merged view; visible variables win over hidden ones."""
        merged = dict(self.hidden.as_dict()) if self.hidden is not None else {}
        merged.update(self._vars)
        return merged

    def interpolate(self, template: str) -> str:
        """
        Expands variables in the template. Unset variables become ''.
        """
        return EnvironmentInterpolator.interpolate(template, self.as_dict())

    def export(self) -> List[str]:
        """
        Renders shell ``export`` lines for the visible variables.
        """
        return [f"export {key}={shlex.quote(value)}" for key, value in self._vars.items()]
