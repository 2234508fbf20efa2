from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from esp_fs_defs.partitions import PartitionOption, PartitionScheme, InputError

DEFAULT_SPI_PAGE = 256
DEFAULT_SPI_BLOCK = 4096


@dataclass(frozen=True)
class Port:
    address: str
    protocol: str = 'serial'


@dataclass(frozen=True)
class CreateImageParams:
    # Path to `mkspiffs`, `mkfatfs` or `mklittlefs`
    image_tool_path: str


@dataclass(frozen=True)
class UploadImageParams:
    port: Port
    fqbn: str
    sketch_path: str
    tool_path: str


@dataclass(frozen=True)
class SPIOptions:
    """Filesystem geometry handed to the image tools, derived from a partition"""

    # Image tools cannot place a filesystem at a build time offset
    UNPLACED: ClassVar[str] = "Partition '%s' has no fixed offset"

    start: int
    size: int
    page: int = DEFAULT_SPI_PAGE
    block: int = DEFAULT_SPI_BLOCK

    @property
    def end(self) -> int:
        return self.start + self.size

    @classmethod
    def from_partition(cls, partition: PartitionOption, page: int = DEFAULT_SPI_PAGE,
                       block: int = DEFAULT_SPI_BLOCK) -> SPIOptions:
        if partition.has_auto_offset:
            raise InputError(cls.UNPLACED % partition.name)
        return cls(start=partition.offset, size=partition.size, page=page, block=block)

    @classmethod
    def from_scheme(cls, scheme: PartitionScheme, page: int = DEFAULT_SPI_PAGE,
                    block: int = DEFAULT_SPI_BLOCK) -> SPIOptions:
        partition = scheme.find_filesystem_partition()
        if partition is None:
            raise InputError('No filesystem partition found')
        return cls.from_partition(partition, page=page, block=block)
