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
Unit tests for bind mount translation.
"""
import os

import pytest

from boxrunner.errors import ConfigurationError
from boxrunner.MANAGERS.bind_manager import BindManager
from boxrunner.MODELS.pipeline_options import PipelineOptions


@pytest.fixture
def workdir(tmp_path):
    (tmp_path / "source").mkdir()
    (tmp_path / "cache").mkdir()
    (tmp_path / "notes.txt").write_text("ignored")
    os.symlink(str(tmp_path / "source"), str(tmp_path / "output"))
    return tmp_path


class TestBindManager:
    """Tests for BindManager."""

    def test_staging_binds(self, workdir):
        options = PipelineOptions(pipeline_id="p1", host_root=str(workdir))
        binds = BindManager(options, []).binds()
        rendered = sorted(b.to_engine() for b in binds)
        assert rendered == sorted([
            f"{workdir}/cache:/mnt/cache:ro",
            f"{workdir}/output:/mnt/output:ro",
            f"{workdir}/source:/mnt/source:ro",
        ])

    def test_direct_mount_binds(self, workdir):
        options = PipelineOptions(pipeline_id="p1", host_root=str(workdir), direct_mount=True)
        binds = BindManager(options, []).binds()
        by_name = {os.path.basename(b.host_path): b for b in binds}
        assert set(by_name) == {"cache", "output", "source"}
        assert by_name["source"].container_path == "/pipeline/source"
        assert by_name["source"].mode == "rw"

    def test_files_ignored(self, workdir):
        options = PipelineOptions(pipeline_id="p1", host_root=str(workdir))
        binds = BindManager(options, []).binds()
        assert all(not b.host_path.endswith("notes.txt") for b in binds)

    def test_infrastructure_volumes_last(self, workdir):
        options = PipelineOptions(pipeline_id="p1", host_root=str(workdir))
        volumes = ["/var/run/docker.sock", "/usr/local/bin/docker"]
        binds = BindManager(options, volumes).binds()
        assert [b.to_engine() for b in binds[-2:]] == [
            "/var/run/docker.sock:/var/run/docker.sock",
            "/usr/local/bin/docker:/usr/local/bin/docker",
        ]

    def test_missing_workdir_raises(self, tmp_path):
        options = PipelineOptions(pipeline_id="p1", host_root=str(tmp_path / "missing"))
        with pytest.raises(ConfigurationError) as excinfo:
            BindManager(options, []).binds()
        assert isinstance(excinfo.value.__cause__, FileNotFoundError)
