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
Error types raised by box lifecycle operations.
"""
from typing import Optional


class BoxError(Exception):
    """Base class for every error raised by boxrunner."""


class InvalidIdentifier(BoxError, ValueError):
    """A box identifier cannot be used as an engine repository name."""


class ConfigurationError(BoxError, ValueError):
    """Box or pipeline configuration is malformed."""


class AccessDenied(BoxError):
    """The registry refused read access to a repository."""

    def __init__(self, repository: str):
        super().__init__(f"Not allowed to interact with this repository: {repository}")
        self.repository = repository


class EngineError(BoxError):
    """
    A container engine call failed.

    :param message: Description of the failure.
    :param operation: The engine operation that failed, if known.
    """

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.operation = operation


class NotFound(EngineError):
    """The engine does not know the referenced container or image."""


class ContainerNotRunning(EngineError):
    """The container is already stopped."""


class BoxNotStarted(BoxError):
    """The operation needs a container but the box has not created one yet."""


class Cancelled(BoxError):
    """The pipeline context was cancelled or its deadline passed."""
