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
Unit tests for interpolation and the pipeline environment.
"""
import pytest

from boxrunner.UTILS.environment import Environment
from boxrunner.UTILS.string_interpolation import EnvironmentInterpolator


def test_interpolate_forms():
    context = {"NAME": "box", "EMPTY": ""}
    assert EnvironmentInterpolator.interpolate("${NAME}-$NAME", context) == "box-box"
    assert EnvironmentInterpolator.interpolate("${EMPTY:-fallback}", context) == "fallback"
    assert EnvironmentInterpolator.interpolate("${NAME:+set}", context) == "set"
    assert EnvironmentInterpolator.interpolate("${EMPTY:+set}", context) == ""


def test_unset_expands_to_empty():
    assert EnvironmentInterpolator.interpolate("a${MISSING}b$MISSING", {}) == "ab"


def test_strict_raises_for_unset():
    with pytest.raises(KeyError):
        EnvironmentInterpolator.interpolate("${MISSING}", {}, strict=True)


class TestEnvironment:
    """Tests for Environment."""

    def test_hidden_variables_interpolate(self):
        env = Environment([("USER", "builder")], hidden=Environment([("TOKEN", "t0k")]))
        assert env.interpolate("$USER:$TOKEN") == "builder:t0k"
        assert "TOKEN" in env
        assert env.get("TOKEN") == "t0k"

    def test_visible_wins_over_hidden(self):
        env = Environment([("A", "visible")], hidden=Environment([("A", "hidden")]))
        assert env.interpolate("$A") == "visible"

    def test_export_quotes_values(self):
        env = Environment([("PLAIN", "value"), ("SPACED", "two words")])
        assert env.export() == ["export PLAIN=value", "export SPACED='two words'"]

    def test_export_excludes_hidden(self):
        env = Environment([("A", "1")], hidden=Environment([("B", "2")]))
        assert env.export() == ["export A=1"]

    def test_from_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text('KEY1=VALUE1\n# comment\nKEY2="quoted value"\n')
        env = Environment.from_file(str(env_file))
        assert env.get("KEY1") == "VALUE1"
        assert env.get("KEY2") == "quoted value"

    def test_from_os(self, monkeypatch):
        monkeypatch.setenv("BOXRUNNER_TEST_VAR", "present")
        assert Environment.from_os().get("BOXRUNNER_TEST_VAR") == "present"
