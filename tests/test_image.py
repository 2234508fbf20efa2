"""Tests for the values handed to the filesystem image tools."""

import pytest

from esp_fs_defs.image import (
    DEFAULT_SPI_BLOCK,
    DEFAULT_SPI_PAGE,
    CreateImageParams,
    Port,
    SPIOptions,
    UploadImageParams,
)
from esp_fs_defs.partitions import InputError, parse_partition_scheme


def test_spi_options_from_scheme(default_scheme_csv: str) -> None:
    options = SPIOptions.from_scheme(parse_partition_scheme(default_scheme_csv))

    assert options == SPIOptions(start=0x110000, size=0x2E0000)
    assert options.page == DEFAULT_SPI_PAGE == 256
    assert options.block == DEFAULT_SPI_BLOCK == 4096
    assert options.end == 0x3F0000


def test_spi_options_geometry(ffat_scheme_csv: str) -> None:
    options = SPIOptions.from_scheme(parse_partition_scheme(ffat_scheme_csv), page=512, block=8192)

    assert options == SPIOptions(start=4259840, size=12451840, page=512, block=8192)


def test_spi_options_auto_offset(suffixed_scheme_csv: str) -> None:
    with pytest.raises(InputError, match="Partition 'spiffs' has no fixed offset"):
        SPIOptions.from_scheme(parse_partition_scheme(suffixed_scheme_csv))


def test_spi_options_without_filesystem() -> None:
    scheme = parse_partition_scheme("nvs, data, nvs, 0x9000, 0x5000,\napp0, app, factory, 0x10000, 0x100000,")

    with pytest.raises(InputError, match="No filesystem partition found"):
        SPIOptions.from_scheme(scheme)


def test_upload_params() -> None:
    params = UploadImageParams(
        port=Port("/dev/ttyUSB0"),
        fqbn="esp32:esp32:esp32",
        sketch_path="/home/user/Arduino/sketch",
        tool_path="/opt/mkspiffs",
    )

    assert params.port.protocol == "serial"
    assert params.port == Port(address="/dev/ttyUSB0", protocol="serial")
    assert CreateImageParams("/opt/mkfatfs").image_tool_path == "/opt/mkfatfs"
