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
In-process byte pipe connecting an engine output stream to a reader thread.
"""
import queue
from typing import Iterator, Optional


class StatusPipe:
    """
    Producer/consumer byte channel.

    The engine writes raw chunks; a reader iterates complete lines. Closing
    the writer side always ends the reader's iteration, so a reader thread
    terminates whether the producer finished or failed.
    """
    _EOF = None

    def __init__(self, maxsize: int = 0):
        self._queue: "queue.Queue[Optional[bytes]]" = queue.Queue(maxsize)
        self.closed = False

    def write(self, data: bytes) -> int:
        if self.closed:
            raise ValueError("write to closed pipe")
        if data:
            self._queue.put(bytes(data))
        return len(data)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._queue.put(self._EOF)

    def lines(self) -> Iterator[bytes]:
        """
        Yields complete lines (without the newline) until the writer closes.
        A trailing partial line is yielded at end-of-stream.
        """
        buffer = b""
        while True:
            chunk = self._queue.get()
            if chunk is self._EOF:
                break
            buffer += chunk
            while b"\n" in buffer:
                line, buffer = buffer.split(b"\n", 1)
                yield line
        if buffer:
            yield buffer
