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
Models for the pipeline file: the primary box and its services.
"""
from typing import List
from pydantic import BaseModel
from .box_config import BoxConfig


class PipelineConfig(BaseModel):
    """
    Complete configuration for one pipeline run.
    Equivalent to a parsed boxrunner.yml file.
    """
    box: BoxConfig
    services: List[BoxConfig] = []
    source_dir: str = ""
