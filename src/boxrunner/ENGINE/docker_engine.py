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
Container engine client backed by the Docker SDK low-level API.
"""
import logging
import os
import sys
import threading
from contextlib import contextmanager
from typing import BinaryIO, Dict, List, Optional

import docker
from docker import errors as docker_errors

from ..errors import ContainerNotRunning, EngineError, NotFound
from ..MODELS.engine_types import (
    AuthConfig,
    ContainerConfig,
    ContainerHandle,
    HostConfig,
    ImageHandle,
    PortBinding,
)
from ..MODELS.pipeline_options import EngineOptions
from ..REGISTRY.registry_client import RegistryClient
from ..UTILS.context import PipelineContext
from .engine_client import ContainerEngine

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60


class DockerEngineClient(ContainerEngine):
    """
    ContainerEngine implementation talking to a Docker daemon.
    """

    def __init__(self, options: Optional[EngineOptions] = None,
                 api: Optional[docker.APIClient] = None,
                 registry: Optional[RegistryClient] = None):
        """
        :param options: Engine connection settings. DOCKER_* variables fill the gaps.
        :param api: Preconfigured low-level client, mostly for tests.
        :param registry: Client used for access checks.
        :raises EngineError: If the engine cannot be reached.
        """
        self.options = options or EngineOptions()
        if api is None:
            with self._operation("connect to engine"):
                kwargs = docker.utils.kwargs_from_env()
                if self.options.host:
                    kwargs["base_url"] = self.options.host
                api = docker.APIClient(version="auto", timeout=self.options.timeout or DEFAULT_TIMEOUT, **kwargs)
        self.api = api
        self.registry = registry or RegistryClient()

    @contextmanager
    def _operation(self, operation: str):
        """Translate Docker SDK and transport failures into EngineError."""
        try:
            yield
        except docker_errors.NotFound as e:
            raise NotFound(f"{operation}: {e.explanation or e}", operation) from e
        except docker_errors.APIError as e:
            raise EngineError(f"{operation}: {e.explanation or e}", operation) from e
        except docker_errors.DockerException as e:
            raise EngineError(f"{operation}: {e}", operation) from e
        except OSError as e:
            raise EngineError(f"{operation}: {e}", operation) from e

    @staticmethod
    def _port_bindings(bindings: Dict[str, List[PortBinding]]) -> Dict[str, list]:
        converted = {}
        for container_port, host_bindings in bindings.items():
            converted[container_port] = [
                (b.host_ip, b.host_port) if b.host_ip else b.host_port
                for b in host_bindings
            ]
        return converted

    @staticmethod
    def _auth_config(auth: AuthConfig) -> Optional[Dict[str, str]]:
        if auth.is_empty:
            return None
        config = {"username": auth.username, "password": auth.password}
        if auth.server_address:
            config["serveraddress"] = auth.server_address
        return config

    def create_container(self, name: str, config: ContainerConfig, host_config: HostConfig) -> ContainerHandle:
        links = [tuple(link.split(":", 1)) for link in host_config.links]
        ports = [tuple(port.split("/", 1)) for port in config.exposed_ports]
        with self._operation("create container"):
            host = self.api.create_host_config(
                binds=host_config.binds or None,
                links=links or None,
                port_bindings=self._port_bindings(host_config.port_bindings) or None,
                dns=host_config.dns or None,
            )
            response = self.api.create_container(
                image=config.image,
                command=config.cmd,
                entrypoint=config.entrypoint,
                environment=config.env,
                stdin_open=config.open_stdin,
                tty=config.tty,
                detach=not (config.attach_stdout or config.attach_stderr),
                ports=ports or None,
                network_disabled=config.network_disabled,
                name=name,
                host_config=host,
            )
        return ContainerHandle(id=response["Id"], name=name)

    def start_container(self, container_id: str) -> None:
        with self._operation("start container"):
            self.api.start(container_id)

    def stop_container(self, container_id: str, timeout: int) -> None:
        with self._operation("stop container"):
            state = self.api.inspect_container(container_id).get("State") or {}
            if not state.get("Running"):
                raise ContainerNotRunning(f"Container {container_id} is not running", "stop container")
            self.api.stop(container_id, timeout=timeout)

    def restart_container(self, container_id: str, timeout: int) -> None:
        with self._operation("restart container"):
            self.api.restart(container_id, timeout=timeout)

    def remove_container(self, container_id: str, remove_volumes: bool = False, force: bool = False) -> None:
        with self._operation("remove container"):
            self.api.remove_container(container_id, v=remove_volumes, force=force)

    def remove_image(self, image_id: str) -> None:
        with self._operation("remove image"):
            self.api.remove_image(image_id)

    def pull_image(self, repository: str, tag: str, auth: AuthConfig, output_stream: BinaryIO,
                   context: Optional[PipelineContext] = None) -> None:
        with self._operation("pull image"):
            for chunk in self.api.pull(repository, tag=tag, stream=True,
                                       auth_config=self._auth_config(auth)):
                if context is not None:
                    context.check()
                output_stream.write(chunk)

    def inspect_image(self, name: str) -> ImageHandle:
        with self._operation("inspect image"):
            data = self.api.inspect_image(name)
        return ImageHandle(
            id=data["Id"],
            repo_tags=data.get("RepoTags") or [],
            created=data.get("Created"),
            size=data.get("Size"),
            metadata=data,
        )

    def commit_container(self, container_id: str, repository: str, tag: str,
                         message: str, author: str) -> ImageHandle:
        with self._operation("commit container"):
            response = self.api.commit(container_id, repository=repository, tag=tag,
                                       message=message, author=author)
        return ImageHandle(id=response["Id"], repo_tags=[f"{repository}:{tag}"])

    def export_image(self, name: str, output_stream: BinaryIO) -> None:
        with self._operation("export image"):
            for chunk in self.api.get_image(name):
                output_stream.write(chunk)

    def check_access(self, auth: AuthConfig, access: str, repository: str, registry: str) -> bool:
        return self.registry.check_access(auth, access, repository, registry)

    def attach_interactive(self, container_id: str, cmd: List[str], env: List[str]) -> None:
        with self._operation("attach to container"):
            exec_id = self.api.exec_create(container_id, cmd, stdin=True, tty=True)["Id"]
            sock = self.api.exec_start(exec_id, tty=True, socket=True)
        raw = getattr(sock, "_sock", sock)
        try:
            raw.sendall(("\n".join(env) + "\n").encode())
            pump = threading.Thread(target=self._pump_stdin, args=(raw,), daemon=True)
            pump.start()
            while True:
                data = raw.recv(4096)
                if not data:
                    break
                sys.stdout.buffer.write(data)
                sys.stdout.buffer.flush()
        except OSError as e:
            raise EngineError(f"attach to container: {e}", "attach to container") from e
        finally:
            raw.close()

    @staticmethod
    def _pump_stdin(raw) -> None:
        fd = sys.stdin.fileno()
        try:
            while True:
                data = os.read(fd, 1024)
                if not data:
                    break
                raw.sendall(data)
        except OSError as e:
            logger.debug("Interactive input closed: %s", e)
