"""
Resolution of names stored out of line in a string table

Archive member names longer than the inline header field and COFF section
names longer than eight bytes both use the same indirection: the inline
field holds ``/<offset>`` and the real name lives in a separate table. The
two formats differ only in how table entries are terminated and in the
extra ``//<base64>`` form COFF uses for very large offsets.
"""

import re
from typing import NamedTuple

DECIMAL_PAT = re.compile(rb"[0-9]+")
BASE64_PAT = re.compile(rb"[A-Za-z0-9+/]{1,6}")
BASE64_ALPHABET = (
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
)


class NameTable(NamedTuple):
    data: bytes
    terminators: bytes = b"\0"
    strip_slash: bool = False
    allow_base64: bool = False

    @classmethod
    def archive(cls, data: bytes) -> "NameTable":
        """The `//` member of an archive (GNU `name/\\n` or MS `name\\0`)"""
        return cls(data, terminators=b"\0\n", strip_slash=True)

    @classmethod
    def coff(cls, data: bytes) -> "NameTable":
        """A COFF string table, including its 4-byte length prefix"""
        return cls(data, terminators=b"\0", allow_base64=True)

    def lookup(self, offset: int) -> bytes:
        if offset >= len(self.data):
            raise ValueError(
                f"name offset {offset} is outside the {len(self.data)} byte "
                "name table"
            )
        ends = [
            end
            for end in (self.data.find(t, offset) for t in self.terminators)
            if end != -1
        ]
        if not ends:
            raise ValueError(f"name at offset {offset} is not terminated")
        name = self.data[offset : min(ends)]
        if self.strip_slash and name.endswith(b"/"):
            name = name[:-1]
        return name


def decode_base64_offset(digits: bytes) -> int:
    value = 0
    for c in digits:
        value = value * 64 + BASE64_ALPHABET.index(c)
    return value


def parse_indirect_offset(reference: bytes, table: NameTable) -> int:
    """Parse the offset out of a `/<decimal>` or `//<base64>` reference"""
    field = reference.rstrip(b"\0 ")
    if not field.startswith(b"/"):
        raise ValueError(f"{reference!r} is not a name table reference")
    if field.startswith(b"//") and table.allow_base64:
        digits = field[2:]
        if not BASE64_PAT.fullmatch(digits):
            raise ValueError(f"invalid base64 name offset {reference!r}")
        return decode_base64_offset(digits)
    digits = field[1:]
    if not DECIMAL_PAT.fullmatch(digits):
        raise ValueError(f"invalid name offset {reference!r}")
    return int(digits)


def resolve_indirect_name(reference: bytes, table: NameTable) -> bytes:
    """Resolve an inline `/<offset>` reference against `table`"""
    return table.lookup(parse_indirect_offset(reference, table))
