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
Models describing a box as declared in the pipeline configuration.
"""
from typing import Dict
from pydantic import BaseModel, ConfigDict


class BoxConfig(BaseModel):
    """
    Immutable descriptor of a box or service box.

    The identifier may embed a tag (``repository[:tag]``); an explicit
    ``tag`` overrides it. ``name`` sets the link alias of a service box.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    tag: str = ""
    name: str = ""

    # Execution
    cmd: str = ""
    entrypoint: str = ""
    env: Dict[str, str] = {}

    # Registry
    username: str = ""
    password: str = ""
    registry: str = ""
