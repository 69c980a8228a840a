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
Unit tests for boxrunner.yml parsing.
"""
import pytest

from boxrunner.errors import ConfigurationError
from boxrunner.PARSERS.pipeline_parser import PipelineParser


@pytest.fixture
def parser():
    return PipelineParser()


class TestPipelineParser:
    """Tests for PipelineParser."""

    def test_box_as_string(self, parser):
        config = parser.parse_from_string("box: wercker/python:3.11\n")
        assert config.box.id == "wercker/python:3.11"
        assert config.services == []
        assert config.source_dir == ""

    def test_full_pipeline(self, parser):
        content = """
box:
  id: registry.example.com/team/builder
  tag: "2.0"
  cmd: /bin/sh -l
  username: $REGISTRY_USER
  password: ${REGISTRY_PASSWORD}
  registry: registry.example.com
  env:
    CI: true
    RETRIES: 3
services:
  - redis
  - id: wercker/postgres
    name: db
    env:
      - POSTGRES_PASSWORD=secret
      - POSTGRES_DB=app=test
source-dir: src
"""
        config = parser.parse_from_string(content)

        assert config.box.id == "registry.example.com/team/builder"
        assert config.box.tag == "2.0"
        assert config.box.cmd == "/bin/sh -l"
        assert config.box.username == "$REGISTRY_USER"
        assert config.box.password == "${REGISTRY_PASSWORD}"
        assert config.box.env == {"CI": "True", "RETRIES": "3"}
        assert [s.id for s in config.services] == ["redis", "wercker/postgres"]
        assert config.services[1].name == "db"
        assert config.services[1].env == {"POSTGRES_PASSWORD": "secret", "POSTGRES_DB": "app=test"}
        assert config.source_dir == "src"

    def test_numeric_tag_kept_as_string(self, parser):
        config = parser.parse_from_string("box:\n  id: python\n  tag: 3\n")
        assert config.box.tag == "3"

    @pytest.mark.parametrize("content", [
        "",
        "- just\n- a list\n",
        "services: []\n",
        "box:\n  tag: latest\n",
        "box: python\nservices: redis\n",
        "box:\n  id: python\n  env: 42\n",
        "box: [unclosed\n",
    ])
    def test_invalid_pipeline(self, parser, content):
        with pytest.raises(ConfigurationError):
            parser.parse_from_string(content)

    def test_parse_file(self, parser, tmp_path):
        path = tmp_path / "boxrunner.yml"
        path.write_text("box: ubuntu\nservices:\n  - mongo\n")
        config = parser.parse(str(path))
        assert config.box.id == "ubuntu"
        assert config.services[0].id == "mongo"

    def test_find_first_directory(self, parser, tmp_path):
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.mkdir()
        second.mkdir()
        (second / "boxrunner.yml").write_text("box: ubuntu\n")
        assert parser.find([str(first), str(second)]) == str(second / "boxrunner.yml")

    def test_find_missing(self, parser, tmp_path):
        with pytest.raises(ConfigurationError):
            parser.find([str(tmp_path)])
