"""
Bind mount translation for boxes: the pipeline working directory plus the
infrastructure paths every box gets.
"""
import os
from typing import List
from ..errors import ConfigurationError
from ..MODELS.engine_types import BindSpec
from ..MODELS.pipeline_options import PipelineOptions


class BindManager:
    """
    Computes the bind mounts for a box container.
    """
    def __init__(self, options: PipelineOptions, volumes: List[str]):
        """
        Initializes the bind manager.

        :param options: Pipeline options resolving host, guest and staging paths.
        :param volumes: Infrastructure paths bound at the identical container path.
        """
        self.options = options
        self.volumes = volumes

    def binds(self) -> List[BindSpec]:
        """
        Maps every directory or symlink at the top of the host working
        directory into the container. Plain files are ignored.

        With direct mount the entry is shared read-write at its guest path;
        otherwise it is mounted read-only at a staging path to be copied from.

        :return: Bind specs in directory listing order, infrastructure paths last.
        :raises ConfigurationError: If the working directory cannot be listed.
        """
        binds = []
        try:
            entries = list(os.scandir(self.options.host_path()))
        except OSError as e:
            raise ConfigurationError(f"Cannot read working directory {self.options.host_path()}: {e}") from e

        for entry in entries:
            if not (entry.is_dir(follow_symlinks=False) or entry.is_symlink()):
                continue
            if self.options.direct_mount:
                binds.append(BindSpec(
                    host_path=self.options.host_path(entry.name),
                    container_path=self.options.guest_path(entry.name),
                    mode="rw",
                ))
            else:
                binds.append(BindSpec(
                    host_path=self.options.host_path(entry.name),
                    container_path=self.options.mnt_path(entry.name),
                    mode="ro",
                ))

        for volume in self.volumes:
            binds.append(BindSpec(host_path=volume, container_path=volume))
        return binds
