import pytest

DEFAULT_SCHEME = """
# ESP-IDF Partition Table
# Name,   Type, SubType, Offset,  Size, Flags
nvs,      data, nvs,     0x9000,  0x5000,
otadata,  data, ota,     0xe000,  0x2000,
app0,     app,  ota_0,   0x10000, 0x100000,
spiffs,   data, spiffs,  0x110000,0x2E0000,
coredump, data, coredump,0x3F0000,0x10000,
""".strip()

SUFFIXED_SCHEME = """
# Name,   Type, SubType, Offset,  Size, Flags
nvs,      data, nvs,     36K,     20K,
otadata,  data, ota,     56K,     8K,
app0,     app,  ota_0,   64K,     2M,
app1,     app,  ota_1,   ,        2M,
spiffs,   data, spiffs,  ,        3M,
""".strip()

FFAT_SCHEME = """
# Name,   Type, SubType, Offset,  Size, Flags
nvs,      data, nvs,     0x9000,  0x5000,
otadata,  data, ota,     0xe000,  0x2000,
app0,     app,  ota_0,   0x10000, 0x200000,
app1,     app,  ota_1,   0x210000,0x200000,
ffat,     data, fat,     0x410000,0xBE0000,
coredump, data, coredump,0xFF0000,0x10000,
# to create/use ffat, see https://github.com/marcmerlin/esp32_fatfsimage
""".strip()


@pytest.fixture
def default_scheme_csv() -> str:
    return DEFAULT_SCHEME


@pytest.fixture
def suffixed_scheme_csv() -> str:
    return SUFFIXED_SCHEME


@pytest.fixture
def ffat_scheme_csv() -> str:
    return FFAT_SCHEME
