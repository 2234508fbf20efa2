#
# Arduino-ESP32 partition scheme parser
#
# Reads partition tables in the ESP-IDF CSV format into a name-keyed scheme.
#
# See https://espressif-docs.readthedocs-hosted.com/projects/arduino-esp32/en/latest/tutorials/partition_table.html
# for explanation of partition table structure and uses.
#
# SPDX-FileCopyrightText: 2016-2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import codecs
import io
import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Literal, Optional, Union

from esptool.util import FatalError, flash_size_bytes

KILO = 1024
MEGA = KILO * KILO

AUTO_OFFSET = 'auto'

NUM_PARTITION_SUBTYPE_APP_OTA = 16

# Number of comma separated fields in a partition line
NUM_FIELDS = 6


class PartitionType(str, Enum):
    APP = 'app'
    DATA = 'data'


DATA_SUBTYPES = ['ota', 'nvs', 'coredump', 'nvs_keys', 'fat', 'spiffs']
APP_SUBTYPES = ['factory', 'test'] + ['ota_%d' % ota_slot for ota_slot in range(NUM_PARTITION_SUBTYPE_APP_OTA)]


class _Subtype(str, Enum):
    @property
    def ota_slot(self) -> Optional[int]:
        """OTA slot index of an 'ota_N' subtype, None for any other subtype"""
        if self.value.startswith('ota_'):
            return int(self.value[4:])
        return None


# Subtypes are not tied to a type, 'data' partitions may carry 'ota_N' and vice versa
PartitionSubtype = _Subtype(
    'PartitionSubtype',
    [(name.upper(), name) for name in DATA_SUBTYPES + APP_SUBTYPES],
    module=__name__,
)

FILESYSTEM_SUBTYPES = (PartitionSubtype.SPIFFS, PartitionSubtype.FAT)


def parse_type(value: Optional[str]) -> PartitionType:
    """ Convert the name of a partition type to a PartitionType """
    try:
        return PartitionType(value)
    except ValueError:
        raise InputError("Invalid partition type '%s'. Known types: %s"
                         % (value, ', '.join(t.value for t in PartitionType)))


def parse_subtype(value: Optional[str]) -> PartitionSubtype:
    """ Convert the name of a partition subtype to a PartitionSubtype """
    try:
        return PartitionSubtype(value)
    except ValueError:
        raise InputError("Invalid partition subtype '%s'. Known subtypes: %s"
                         % (value, ', '.join(s.value for s in PartitionSubtype)))


_INT_PREFIX = {
    10: re.compile(r'^\s*([+-]?[0-9]+)'),
    16: re.compile(r'^\s*([+-]?[0-9A-Fa-f]+)'),
}

_DIGITS = re.compile(r'[0-9]+')


def _parse_int_prefix(s: str, base: int) -> Optional[int]:
    """Parse the leading integer of s, ignoring anything after it. None if s has no leading digits."""
    m = _INT_PREFIX[base].match(s)
    if not m:
        return None
    return int(m.group(1), base)


def parse_byte_size(raw: str, strict_suffixes: bool = False) -> int:
    """Parse a size or offset field into bytes.

    The raw value may be a hex number (0x prefix) or a number with a K (kilo)
    or M (mega) unit suffix, i.e: 4096 = 4K = 0x1000.

    Without strict_suffixes every value that is not hex has its last character
    dropped and the rest is taken as kilobytes, so '2M' is 2048 and '8000' is
    800 * 1024. Existing partition schemes depend on these numbers.
    """
    if raw[:2].lower() == '0x':
        size = _parse_int_prefix(raw[2:], 16)
    elif not strict_suffixes:
        size = _parse_int_prefix(raw[:-1], 10)
        if size is not None:
            size *= KILO
    else:
        size = None
        for letter, multiplier in [('k', KILO), ('m', MEGA)]:
            if raw.lower().endswith(letter):
                if _DIGITS.fullmatch(raw[:-1]):
                    size = int(raw[:-1]) * multiplier
                break
        else:
            if _DIGITS.fullmatch(raw):
                size = int(raw)
    if size is None:
        raise MalformedSizeError(raw)
    return size


@dataclass(frozen=True)
class PartitionOption:
    name: str
    type: PartitionType
    subtype: PartitionSubtype
    offset: Union[int, Literal['auto']]  # bytes
    size: int  # bytes
    flags: str

    @property
    def has_auto_offset(self) -> bool:
        return self.offset == AUTO_OFFSET

    def as_dict(self) -> dict:
        return _option_dict(self.name, self.type, self.subtype, self.offset, self.size, self.flags)

    def __str__(self):
        offset = self.offset if self.has_auto_offset else '0x%x' % self.offset
        return "Part '%s' %s/%s @ %s size 0x%x" % (
            self.name, self.type.value, self.subtype.value, offset, self.size)


def _option_dict(name, ptype, subtype, offset, size, flags) -> dict:
    def plain(v):
        return v.value if isinstance(v, Enum) else v

    return {
        'name': name,
        'type': plain(ptype),
        'subType': plain(subtype),
        'offset': offset,
        'size': size,
        'flags': flags,
    }


def _is_byte_count(v) -> bool:
    return isinstance(v, int) and not isinstance(v, bool) and v >= 0


class PartitionScheme(dict):
    """Partition options keyed by name.

    A later option with the same name replaces the earlier one.
    """

    def find_by_type(self, ptype, subtype=None) -> Iterator[PartitionOption]:
        """Yield the options matching a type and (optionally) a subtype,
        given as names or enum members"""
        ptype = parse_type(ptype)
        if subtype is not None:
            subtype = parse_subtype(subtype)

        for p in self.values():
            if p.type == ptype and (subtype is None or p.subtype == subtype):
                yield p

    def find_filesystem_partition(self) -> Optional[PartitionOption]:
        """Return the last data partition holding a filesystem, None if there is none"""
        fs_partition = None
        for p in self.find_by_type(PartitionType.DATA):
            if p.subtype in FILESYSTEM_SUBTYPES:
                fs_partition = p
        return fs_partition

    def flash_size(self) -> int:
        """Return the size that the explicitly placed partitions occupy in flash
        (ie the offset the last of them ends at)
        """
        return max((p.offset + p.size for p in self.values() if not p.has_auto_offset), default=0)

    def verify_size_fits(self, flash_size: Union[int, str]) -> None:
        """Check that the scheme fits into the given flash size, in bytes or as
        an esptool size string such as '4MB'. Raises InputError otherwise.
        """
        if isinstance(flash_size, str):
            try:
                flash_size = flash_size_bytes(flash_size)
            except FatalError as err:
                raise InputError('Invalid flash size: %s' % err) from err
        table_size = self.flash_size()
        if flash_size < table_size:
            raise InputError(
                'Partition scheme occupies %.1fMB of flash (%d bytes) which does not fit in available '
                'flash size %.1fMB.'
                % (table_size / MEGA, table_size, flash_size / MEGA)
            )


def parse_partition_option(line: str, strict_suffixes: bool = False) -> PartitionOption:
    """Parse a single (non comment) line of a partition scheme"""
    fields = [f.strip() for f in line.split(',')]
    field_count = len(fields)
    name, raw_type, raw_subtype, raw_offset, raw_size, flags = (fields + [None] * NUM_FIELDS)[:NUM_FIELDS]

    try:
        ptype = parse_type(raw_type)
    except InputError:
        ptype = None
    try:
        subtype = parse_subtype(raw_subtype)
    except InputError:
        subtype = None
    try:
        offset = parse_byte_size(raw_offset, strict_suffixes) if raw_offset else AUTO_OFFSET
        size = parse_byte_size(raw_size, strict_suffixes) if raw_size is not None else None
    except MalformedSizeError as err:
        raise MalformedSizeError(err.raw, line) from None

    valid = (
        field_count == NUM_FIELDS
        and isinstance(name, str) and len(name) > 0
        and ptype is not None
        and subtype is not None
        and (offset == AUTO_OFFSET or _is_byte_count(offset))
        and _is_byte_count(size)
        and isinstance(flags, str)
    )
    if not valid:
        raise MalformedRecordError(_option_dict(name, ptype, subtype or raw_subtype, offset, size, flags), line)

    return PartitionOption(name=name, type=ptype, subtype=subtype, offset=offset, size=size, flags=flags)


def parse_partition_scheme(content: Union[str, Iterable[str]], strict_suffixes: bool = False) -> PartitionScheme:
    """Parse a partition scheme from CSV text or from an iterable of lines (e.g. an open text file).

    Any invalid line aborts the whole parse.
    """
    lines = io.StringIO(content, newline=None) if isinstance(content, str) else content

    scheme = PartitionScheme()
    for line in lines:
        line = line.rstrip('\r\n')
        stripped = line.strip()
        if stripped.startswith('#') or len(stripped) == 0:
            continue
        option = parse_partition_option(line, strict_suffixes)
        scheme[option.name] = option
    return scheme


def get_encoding(first_bytes):
    """Detect the encoding by checking for BOM (Byte Order Mark)"""
    BOMS = {
        codecs.BOM_UTF8: 'utf-8-sig',
        codecs.BOM_UTF32_LE: 'utf-32',
        codecs.BOM_UTF32_BE: 'utf-32',
        codecs.BOM_UTF16_LE: 'utf-16',
        codecs.BOM_UTF16_BE: 'utf-16',
    }
    for bom, encoding in BOMS.items():
        if first_bytes.startswith(bom):
            return encoding
    return 'utf-8'


def load_partition_scheme(path, strict_suffixes: bool = False) -> PartitionScheme:
    """Stream a partition scheme CSV file from disk"""
    with open(path, 'rb') as f:
        encoding = get_encoding(f.peek(4)[:4])
        reader = io.TextIOWrapper(f, encoding=encoding, newline=None)
        try:
            return parse_partition_scheme(reader, strict_suffixes)
        finally:
            # hand the file back so that only the with block closes it
            reader.detach()


def print_partition_scheme(scheme: PartitionScheme):
    def addr_format(a, include_sizes):
        if a == AUTO_OFFSET:
            return a
        if include_sizes:
            for (val, suffix) in [(MEGA, 'M'), (KILO, 'K')]:
                if a % val == 0:
                    return f'{a // val}{suffix}'
        return f'0x{a:x}'

    has_flags = any(part.flags for part in scheme.values())

    # header row
    header = ["Name", "Type", "Subtype", "Offset", "Size"]
    if has_flags:
        header.append("Flags")
    rows = [header]

    for part in scheme.values():
        cells = [
            part.name,
            part.type.value,
            part.subtype.value,
            addr_format(part.offset, False),
            addr_format(part.size, True),
        ]
        if has_flags:
            cells.append(part.flags)
        rows.append(cells)

    # zip(*rows) groups together all values of each column
    col_widths = [max(len(cell) for cell in col) for col in zip(*rows)]

    row_fmt = "|" + "|".join(f" {{:<{w}}} " for w in col_widths) + "|"
    sep = "|" + "|".join("-" * (w + 2) for w in col_widths) + "|"

    print(row_fmt.format(*rows[0]))
    print(sep)
    for data_row in rows[1:]:
        print(row_fmt.format(*data_row))


class InputError(RuntimeError):
    def __init__(self, e):
        super(InputError, self).__init__(e)


class MalformedSizeError(InputError):
    def __init__(self, raw, line=None):
        self.raw = raw
        self.line = line
        message = "Could not parse raw size into bytes: '%s'" % raw
        if line is not None:
            message += ". Could not parse line: '%s'" % line
        super(MalformedSizeError, self).__init__(message)


class MalformedRecordError(InputError):
    def __init__(self, option, line):
        self.option = option
        self.line = line
        super(MalformedRecordError, self).__init__(
            "Invalid partition option: %s. Could not parse line: '%s'" % (json.dumps(option), line))
