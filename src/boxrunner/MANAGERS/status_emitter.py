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
Republishes raw image pull progress as structured status events.
"""
import json
import logging

from ..MODELS.engine_types import PullStatus
from ..UTILS.emitter import LOGS, PULL_PROGRESS, Emitter
from ..UTILS.status_pipe import StatusPipe

logger = logging.getLogger(__name__)


def format_status(status: PullStatus) -> str:
    """
    Renders a status the way engine CLIs print pull progress.
    """
    parts = []
    if status.id:
        parts.append(f"{status.id}:")
    parts.append(status.error or status.status)
    if status.progress:
        parts.append(status.progress)
    return " ".join(p for p in parts if p)


def emit_status(emitter: Emitter, pipe: StatusPipe) -> None:
    """
    Reads newline-delimited JSON pull records from the pipe until the
    writer closes it, emitting each as PULL_PROGRESS and LOGS events.

    :param emitter: Sink for the parsed records.
    :param pipe: Pipe the engine pull writes to.
    """
    for line in pipe.lines():
        line = line.strip()
        if not line:
            continue
        try:
            record = json.loads(line)
        except ValueError:
            logger.debug("Skipping malformed pull record: %r", line[:200])
            continue
        if not isinstance(record, dict):
            continue

        status = PullStatus.from_record(record)
        if status.error:
            logger.warning("Image pull reported an error: %s", status.error)
        emitter.emit(PULL_PROGRESS, status)
        emitter.emit(LOGS, format_status(status))
