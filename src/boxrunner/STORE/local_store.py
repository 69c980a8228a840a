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
Local storage of exported artifacts.
"""
import logging
import os
import shutil

logger = logging.getLogger(__name__)


class LocalStore:
    """
    Stores content under a base directory, addressed by slash-separated keys.
    """
    def __init__(self, base: str):
        self.base = base

    def store_from_file(self, path: str, key: str) -> str:
        """
        Copies the file at path to base/key, creating directories as needed.

        :param path: File to store.
        :param key: Destination key, e.g. 'project/build-1/image.tar'.
        :return: The path the file was stored at.
        """
        output_path = os.path.join(self.base, *key.split("/"))
        output_dir = os.path.dirname(output_path)
        logger.debug("Creating output directory %s", output_dir)
        os.makedirs(output_dir, exist_ok=True)

        with open(path, "rb") as input_file, open(output_path, "wb") as output_file:
            shutil.copyfileobj(input_file, output_file)

        logger.info("Stored %s at %s", path, output_path)
        return output_path
