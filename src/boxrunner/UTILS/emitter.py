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
Event sink for lifecycle and pull progress notifications.
"""
import threading
from typing import Any, Callable, Dict, List

PULL_PROGRESS = "pull-progress"
LOGS = "logs"


class Emitter:
    """
    Thread-safe publish/subscribe of named events.
    """
    def __init__(self):
        self._listeners: Dict[str, List[Callable[[Any], None]]] = {}
        self._lock = threading.Lock()

    def on(self, event: str, callback: Callable[[Any], None]) -> None:
        """
        Registers a callback for an event.

        :param event: Event name, e.g. PULL_PROGRESS.
        :param callback: Called with the event payload.
        """
        with self._lock:
            self._listeners.setdefault(event, []).append(callback)

    def emit(self, event: str, payload: Any) -> None:
        with self._lock:
            listeners = list(self._listeners.get(event, []))
        for callback in listeners:
            callback(payload)
