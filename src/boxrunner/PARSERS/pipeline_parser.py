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
Parsers for boxrunner.yml pipeline files.
"""
import os
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from ..errors import ConfigurationError
from ..MODELS.box_config import BoxConfig
from ..MODELS.pipeline_config import PipelineConfig


class PipelineParser:
    """
    Parser for boxrunner.yml files.
    """
    FILENAME = "boxrunner.yml"

    def find(self, search_dirs: List[str]) -> str:
        """
        Finds the pipeline file in the first directory that has one.

        :param search_dirs: Directories to look in, in order.
        :return: Path of the pipeline file.
        :raises ConfigurationError: If no directory contains one.
        """
        for directory in search_dirs:
            candidate = os.path.join(directory, self.FILENAME)
            if os.path.isfile(candidate):
                return candidate
        raise ConfigurationError(f"No {self.FILENAME} found in: {', '.join(search_dirs)}")

    def parse(self, pipeline_path: str) -> PipelineConfig:
        """
        Parses a pipeline file from a path.

        :param pipeline_path: Path to the pipeline file.
        :return: Parsed configuration.
        """
        with open(pipeline_path, 'r') as f:
            content = f.read()
        return self.parse_from_string(content)

    def parse_from_string(self, content: str) -> PipelineConfig:
        """
        Parses a pipeline file from a string.

        :param content: YAML content of the pipeline file.
        :return: Parsed configuration.
        """
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid pipeline file: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError("Pipeline file must be a mapping")
        if not data.get('box'):
            raise ConfigurationError("Pipeline file has no box")

        services = data.get('services') or []
        if not isinstance(services, list):
            raise ConfigurationError("'services' must be a list")

        return PipelineConfig(
            box=self._parse_box(data['box']),
            services=[self._parse_box(s) for s in services],
            source_dir=str(data.get('source-dir') or ''),
        )

    def _parse_box(self, spec: Any) -> BoxConfig:
        """
        Parses a box given either as an id string or as a mapping.

        :param spec: The box entry of the pipeline file.
        :return: A BoxConfig instance.
        """
        if isinstance(spec, str):
            return BoxConfig(id=spec)
        if not isinstance(spec, dict) or not spec.get('id'):
            raise ConfigurationError(f"Invalid box definition: {spec!r}")

        try:
            return BoxConfig(
                id=str(spec['id']),
                tag=self._to_str(spec.get('tag')),
                name=self._to_str(spec.get('name')),
                cmd=self._to_str(spec.get('cmd')),
                entrypoint=self._to_str(spec.get('entrypoint')),
                env=self._to_env(spec.get('env')),
                username=self._to_str(spec.get('username')),
                password=self._to_str(spec.get('password')),
                registry=self._to_str(spec.get('registry')),
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid box definition: {e}") from e

    def _to_str(self, val: Optional[Any]) -> str:
        if val is None:
            return ''
        return str(val)

    def _to_env(self, val: Any) -> Dict[str, str]:
        """
        Accepts either a mapping or a list of KEY=VALUE strings.
        """
        if not val:
            return {}
        if isinstance(val, dict):
            return {str(k): self._to_str(v) for k, v in val.items()}
        if isinstance(val, list):
            env = {}
            for item in val:
                if isinstance(item, str) and '=' in item:
                    key, value = item.split('=', 1)
                    env[key] = value
            return env
        raise ConfigurationError(f"Invalid env definition: {val!r}")
