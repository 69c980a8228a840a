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
Translation of declarative port publish specs into engine port bindings.

A publish spec is one of ``port``, ``host:container`` or
``ip:host:container``; the container port may carry a ``/protocol`` suffix.
"""
from typing import Dict, List
from urllib.parse import urlparse

from ..errors import ConfigurationError
from ..MODELS.engine_types import ExposedPortMap, PortBinding


def port_bindings(published: List[str]) -> Dict[str, List[PortBinding]]:
    """
    Maps each container port (``port/protocol``) to a single host binding.

    :param published: Publish specs.
    :return: Container port to bindings.
    :raises ConfigurationError: If a spec has more than three fields.
    """
    outer: Dict[str, List[PortBinding]] = {}
    for portdef in published:
        ip = ""
        parts = portdef.split(":")
        if len(parts) == 3:
            ip, host_port, container_port = parts
        elif len(parts) == 2:
            host_port, container_port = parts
        elif len(parts) == 1:
            host_port = container_port = parts[0]
        else:
            raise ConfigurationError(f"Invalid port publish spec: {portdef!r}")

        if "/" not in container_port:
            container_port = f"{container_port}/tcp"

        if not host_port:
            host_port = container_port

        # a protocol is meaningless on the host side
        host_port = host_port.split("/")[0]

        outer[container_port] = [PortBinding(host_port=host_port, host_ip=ip or None)]
    return outer


def exposed_ports(published: List[str]) -> List[str]:
    """
    The container ports the publish specs expose, independent of binding.
    """
    return list(port_bindings(published).keys())


def engine_host_address(engine_host: str) -> str:
    """
    Resolves the host users reach published ports on from the engine URI.
    A ``unix://`` socket means the engine runs on this machine.
    """
    if not engine_host:
        return ""
    parsed = urlparse(engine_host)
    if parsed.scheme == "unix":
        return "localhost"
    return parsed.netloc.split(":")[0]


def exposed_port_maps(engine_host: str, published: List[str]) -> List[ExposedPortMap]:
    """
    Pairs each published container port with a ``host:port`` URI for display.

    :param engine_host: Engine address, e.g. ``tcp://192.168.59.103:2376``.
    :param published: Publish specs.
    """
    host = engine_host_address(engine_host)
    port_map = []
    for container_port, bindings in port_bindings(published).items():
        for binding in bindings:
            port_map.append(ExposedPortMap(
                container_port=container_port.split("/")[0],
                host_uri=f"{host}:{binding.host_port}",
            ))
    return port_map
