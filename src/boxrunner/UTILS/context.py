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
Cancellation and deadline context threaded through box operations.
"""
import threading
import time
from typing import Optional

from ..errors import Cancelled
from .emitter import Emitter


class PipelineContext:
    """
    Carries the status emitter and a cancellation signal for one pipeline run.
    """
    def __init__(self, emitter: Optional[Emitter] = None, deadline: Optional[float] = None):
        """
        :param emitter: Sink for status events. A fresh one is created if omitted.
        :param deadline: time.monotonic() value after which the context is done.
        """
        self.emitter = emitter or Emitter()
        self.deadline = deadline
        self._cancelled = threading.Event()

    @classmethod
    def with_timeout(cls, seconds: float, emitter: Optional[Emitter] = None) -> "PipelineContext":
        return cls(emitter=emitter, deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        self._cancelled.set()

    def check(self) -> None:
        """
        :raises Cancelled: If the context was cancelled or its deadline passed.
        """
        if self._cancelled.is_set():
            raise Cancelled("pipeline context cancelled")
        if self.deadline is not None and time.monotonic() >= self.deadline:
            raise Cancelled("pipeline context deadline exceeded")
