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
Shared fixtures: an in-memory container engine.
"""
import pytest

from boxrunner.ENGINE.engine_client import ContainerEngine
from boxrunner.MODELS.box_config import BoxConfig
from boxrunner.MODELS.engine_types import ContainerHandle, ImageHandle
from boxrunner.MODELS.pipeline_options import EngineOptions, PipelineOptions
from boxrunner.UTILS.context import PipelineContext
from boxrunner.UTILS.environment import Environment


class FakeEngine(ContainerEngine):
    """
    Records every call; failures are injected through ``errors``, keyed by
    method name or by ``"method:id"``.
    """

    def __init__(self):
        self.calls = []
        self.errors = {}
        self.created = {}
        self.access = True
        self.pull_chunks = []
        self.export_bytes = b"image-tarball"
        self._counter = 0

    def _next(self, prefix):
        self._counter += 1
        return f"{prefix}{self._counter}"

    def _maybe_fail(self, method, key=None):
        if key is not None and f"{method}:{key}" in self.errors:
            raise self.errors[f"{method}:{key}"]
        if method in self.errors:
            raise self.errors[method]

    def called(self, method):
        return [args for name, args in self.calls if name == method]

    def create_container(self, name, config, host_config):
        self.calls.append(("create_container", (name,)))
        self._maybe_fail("create_container", name)
        handle = ContainerHandle(id=self._next("container-"), name=name)
        self.created[handle.id] = (config, host_config)
        return handle

    def start_container(self, container_id):
        self.calls.append(("start_container", (container_id,)))
        self._maybe_fail("start_container", container_id)

    def stop_container(self, container_id, timeout):
        self.calls.append(("stop_container", (container_id, timeout)))
        self._maybe_fail("stop_container", container_id)

    def restart_container(self, container_id, timeout):
        self.calls.append(("restart_container", (container_id, timeout)))
        self._maybe_fail("restart_container", container_id)

    def remove_container(self, container_id, remove_volumes=False, force=False):
        self.calls.append(("remove_container", (container_id, remove_volumes, force)))
        self._maybe_fail("remove_container", container_id)

    def remove_image(self, image_id):
        self.calls.append(("remove_image", (image_id,)))
        self._maybe_fail("remove_image", image_id)

    def pull_image(self, repository, tag, auth, output_stream, context=None):
        self.calls.append(("pull_image", (repository, tag, auth)))
        for chunk in self.pull_chunks:
            output_stream.write(chunk)
        self._maybe_fail("pull_image", repository)

    def inspect_image(self, name):
        self.calls.append(("inspect_image", (name,)))
        self._maybe_fail("inspect_image", name)
        return ImageHandle(id=f"sha256:{name}", repo_tags=[name])

    def commit_container(self, container_id, repository, tag, message, author):
        self.calls.append(("commit_container", (container_id, repository, tag, message, author)))
        self._maybe_fail("commit_container", container_id)
        return ImageHandle(id=self._next("image-"), repo_tags=[f"{repository}:{tag}"])

    def export_image(self, name, output_stream):
        self.calls.append(("export_image", (name,)))
        self._maybe_fail("export_image", name)
        output_stream.write(self.export_bytes)

    def check_access(self, auth, access, repository, registry):
        self.calls.append(("check_access", (auth, access, repository, registry)))
        self._maybe_fail("check_access", repository)
        return self.access

    def attach_interactive(self, container_id, cmd, env):
        self.calls.append(("attach_interactive", (container_id, cmd, env)))


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def pipeline_options(tmp_path):
    return PipelineOptions(pipeline_id="abc123", host_root=str(tmp_path))


@pytest.fixture
def engine_options():
    return EngineOptions(dns=["8.8.8.8"])


@pytest.fixture
def context():
    return PipelineContext()


@pytest.fixture
def env():
    return Environment([("REGISTRY_USER", "builder"), ("VERSION", "1.2")])


@pytest.fixture
def box_config():
    return BoxConfig(id="wercker/python:3.11", env={"app_env": "test"})
