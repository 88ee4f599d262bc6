"""
Parsing of the COFF structures found inside library members

Only as much of each format is read as is needed to tell the member shapes
apart and to walk section names; section contents, relocations and symbols
are never interpreted.
"""

import struct
from typing import Iterator, NamedTuple, Optional

from .exceptions import CoffParseError
from .names import NameTable, resolve_indirect_name

FILE_HEADER = struct.Struct("<HHIIIHH")
BIGOBJ_HEADER = struct.Struct("<HHHHI16sIIIIIII")
IMPORT_HEADER = struct.Struct("<HHHHIIHH")
SECTION_HEADER_SIZE = 40
SYMBOL_SIZE = 18
BIGOBJ_SYMBOL_SIZE = 20

IMAGE_FILE_MACHINE_UNKNOWN = 0x0
ANON_SIG2 = 0xFFFF
# {D1BAA1C7-BAEE-4ba9-AF20-FAF66AA4DCB8}
BIGOBJ_CLASS_ID = bytes.fromhex("c7a1bad1eebaa94baf20faf66aa4dcb8")
BIGOBJ_MIN_VERSION = 2

MACHINE_TYPES = {
    0x0: "unknown",
    0x14C: "i386",
    0x162: "r3000",
    0x166: "r4000",
    0x168: "r10000",
    0x169: "wcemipsv2",
    0x184: "alpha",
    0x1A2: "sh3",
    0x1A3: "sh3dsp",
    0x1A6: "sh4",
    0x1A8: "sh5",
    0x1C0: "arm",
    0x1C2: "thumb",
    0x1C4: "armnt",
    0x1D3: "am33",
    0x1F0: "powerpc",
    0x1F1: "powerpcfp",
    0x200: "ia64",
    0x266: "mips16",
    0x284: "alpha64",
    0x366: "mipsfpu",
    0x466: "mipsfpu16",
    0x520: "tricore",
    0xCEF: "cef",
    0xEBC: "ebc",
    0x3A64: "chpe_x86",
    0x5032: "riscv32",
    0x5064: "riscv64",
    0x5128: "riscv128",
    0x6232: "loongarch32",
    0x6264: "loongarch64",
    0x8664: "amd64",
    0x9041: "m32r",
    0xA641: "arm64ec",
    0xA64E: "arm64x",
    0xAA64: "arm64",
    0xC0EE: "cee",
}

IMPORT_TYPES = ("code", "data", "const")
IMPORT_NAME_TYPES = ("ordinal", "name", "noprefix", "undecorate", "exportas")
IMPORT_NAME_EXPORTAS = 4


class CoffObject(NamedTuple):
    machine: int
    section_count: int
    section_table: bytes
    strings: NameTable
    bigobj: bool = False

    def section_names(self) -> Iterator[bytes]:
        """Resolve section names lazily, in section table order"""
        for i in range(self.section_count):
            start = i * SECTION_HEADER_SIZE
            yield section_name(self.section_table[start : start + 8], self)


class ImportHeader(NamedTuple):
    machine: int
    symbol: bytes
    dll: bytes
    import_type: str
    name_type: str
    ordinal_or_hint: int
    export_name: Optional[bytes] = None


def section_name(raw: bytes, obj: CoffObject) -> bytes:
    if raw[:1] == b"/":
        try:
            return resolve_indirect_name(raw, obj.strings)
        except ValueError as err:
            raise CoffParseError(f"invalid section name: {err}") from err
    return raw.split(b"\0", 1)[0]


def _string_table(
    payload: bytes, symtab_offset: int, symbol_count: int, symbol_size: int
) -> NameTable:
    if symtab_offset == 0:
        return NameTable.coff(b"")
    strtab_offset = symtab_offset + symbol_count * symbol_size
    if strtab_offset + 4 > len(payload):
        raise CoffParseError("symbol table runs past the end of the member")
    (strtab_size,) = struct.unpack_from("<I", payload, strtab_offset)
    strtab_end = strtab_offset + max(strtab_size, 4)
    if strtab_end > len(payload):
        raise CoffParseError(
            f"string table size {strtab_size} runs past the end of the member"
        )
    return NameTable.coff(payload[strtab_offset:strtab_end])


def _section_table(payload: bytes, offset: int, count: int) -> bytes:
    end = offset + count * SECTION_HEADER_SIZE
    if end > len(payload):
        raise CoffParseError(
            f"{count} section headers run past the end of the member"
        )
    return payload[offset:end]


def _parse_bigobj(payload: bytes) -> CoffObject:
    if len(payload) < BIGOBJ_HEADER.size:
        raise CoffParseError("bigobj file header truncated")
    (
        _sig1,
        _sig2,
        _version,
        machine,
        _timestamp,
        _class_id,
        _size_of_data,
        _flags,
        _metadata_size,
        _metadata_offset,
        section_count,
        symtab_offset,
        symbol_count,
    ) = BIGOBJ_HEADER.unpack_from(payload)
    if machine not in MACHINE_TYPES:
        raise CoffParseError(f"unrecognised machine type {machine:#06x}")
    return CoffObject(
        machine=machine,
        section_count=section_count,
        section_table=_section_table(
            payload, BIGOBJ_HEADER.size, section_count
        ),
        strings=_string_table(
            payload, symtab_offset, symbol_count, BIGOBJ_SYMBOL_SIZE
        ),
        bigobj=True,
    )


def is_bigobj(payload: bytes) -> bool:
    if len(payload) < BIGOBJ_HEADER.size:
        return False
    sig1, sig2, version, _machine, _timestamp, class_id = struct.unpack_from(
        "<HHHHI16s", payload
    )
    return (
        sig1 == IMAGE_FILE_MACHINE_UNKNOWN
        and sig2 == ANON_SIG2
        and version >= BIGOBJ_MIN_VERSION
        and class_id == BIGOBJ_CLASS_ID
    )


def parse_object(payload: bytes) -> CoffObject:
    """Parse the file header and locate the section and string tables.

    Raises CoffParseError when `payload` is not a COFF object, including
    when it carries the anonymous header used by short import descriptors.
    """
    if is_bigobj(payload):
        return _parse_bigobj(payload)
    if len(payload) < FILE_HEADER.size:
        raise CoffParseError("file header truncated")
    (
        machine,
        section_count,
        _timestamp,
        symtab_offset,
        symbol_count,
        optional_header_size,
        _characteristics,
    ) = FILE_HEADER.unpack_from(payload)
    if machine not in MACHINE_TYPES:
        raise CoffParseError(f"unrecognised machine type {machine:#06x}")
    if machine == IMAGE_FILE_MACHINE_UNKNOWN and section_count == ANON_SIG2:
        raise CoffParseError("anonymous object header, not a COFF object")
    return CoffObject(
        machine=machine,
        section_count=section_count,
        section_table=_section_table(
            payload, FILE_HEADER.size + optional_header_size, section_count
        ),
        strings=_string_table(
            payload, symtab_offset, symbol_count, SYMBOL_SIZE
        ),
    )


def _cstring(data: bytes, offset: int, what: str):
    end = data.find(b"\0", offset)
    if end == -1:
        raise CoffParseError(f"import {what} name is not terminated")
    return data[offset:end], end + 1


def parse_import_descriptor(payload: bytes) -> ImportHeader:
    """Parse a short import library record"""
    if len(payload) < IMPORT_HEADER.size:
        raise CoffParseError("import header truncated")
    (
        sig1,
        sig2,
        version,
        machine,
        _timestamp,
        size_of_data,
        ordinal_or_hint,
        flags,
    ) = IMPORT_HEADER.unpack_from(payload)
    if sig1 != IMAGE_FILE_MACHINE_UNKNOWN or sig2 != ANON_SIG2:
        raise CoffParseError("invalid import header signature")
    if version != 0:
        raise CoffParseError(f"unknown import header version {version}")
    end = IMPORT_HEADER.size + size_of_data
    if end > len(payload):
        raise CoffParseError(
            f"import data size {size_of_data} runs past the end of the member"
        )
    data = payload[IMPORT_HEADER.size : end]

    import_type = flags & 0x3
    name_type = (flags >> 2) & 0x7
    if import_type >= len(IMPORT_TYPES):
        raise CoffParseError(f"invalid import type {import_type}")
    if name_type >= len(IMPORT_NAME_TYPES):
        raise CoffParseError(f"invalid import name type {name_type}")

    symbol, pos = _cstring(data, 0, "symbol")
    dll, pos = _cstring(data, pos, "DLL")
    export_name = None
    if name_type == IMPORT_NAME_EXPORTAS:
        export_name, pos = _cstring(data, pos, "export")

    return ImportHeader(
        machine=machine,
        symbol=symbol,
        dll=dll,
        import_type=IMPORT_TYPES[import_type],
        name_type=IMPORT_NAME_TYPES[name_type],
        ordinal_or_hint=ordinal_or_hint,
        export_name=export_name,
    )
