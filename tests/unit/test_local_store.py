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
Unit tests for the local artifact store.
"""
from boxrunner.STORE.local_store import LocalStore


class TestLocalStore:
    """Tests for LocalStore."""

    def test_store_creates_directories(self, tmp_path):
        source = tmp_path / "image.tar"
        source.write_bytes(b"layers")
        store = LocalStore(str(tmp_path / "store"))

        output = store.store_from_file(str(source), "project/build-1/image.tar")

        assert output == str(tmp_path / "store" / "project" / "build-1" / "image.tar")
        assert (tmp_path / "store" / "project" / "build-1" / "image.tar").read_bytes() == b"layers"

    def test_store_overwrites(self, tmp_path):
        source = tmp_path / "image.tar"
        store = LocalStore(str(tmp_path / "store"))
        source.write_bytes(b"first")
        store.store_from_file(str(source), "image.tar")
        source.write_bytes(b"second")
        output = store.store_from_file(str(source), "image.tar")
        assert open(output, "rb").read() == b"second"
