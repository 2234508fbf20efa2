__all__ = [
    "PartitionScheme",
    "PartitionOption",
    "PartitionType",
    "PartitionSubtype",
    "parse_byte_size",
    "parse_partition_scheme",
    "load_partition_scheme",
    "print_partition_scheme",
    "InputError",
    "MalformedSizeError",
    "MalformedRecordError",
    "AUTO_OFFSET",
    "Port",
    "CreateImageParams",
    "UploadImageParams",
    "SPIOptions",
]

from esp_fs_defs.partitions import PartitionScheme, PartitionOption, PartitionType, PartitionSubtype, \
    parse_byte_size, parse_partition_scheme, load_partition_scheme, print_partition_scheme, \
    InputError, MalformedSizeError, MalformedRecordError, AUTO_OFFSET

from esp_fs_defs.image import Port, CreateImageParams, UploadImageParams, SPIOptions
