"""
Reading and writing of COFF ("ar" style) library archives
"""

import re
from typing import List, NamedTuple, Optional, Sequence

from .exceptions import (
    CorruptMemberError,
    FieldOverflowError,
    NotAnArchiveError,
)
from .logging import get_logger
from .names import NameTable, resolve_indirect_name

logger = get_logger(__name__)

MAGIC = b"!<arch>\n"
HEADER_SIZE = 60
HEADER_END = b"`\n"
PAD = b"\n"

SYMBOL_INDEX_NAME = b"/"
EC_SYMBOL_INDEX_NAME = b"/<ECSYMBOLS>"
LONG_NAMES_NAME = b"//"
INLINE_NAME_MAX = 15

DEFAULT_MTIME = 0
DEFAULT_UID = 0
DEFAULT_GID = 0
DEFAULT_MODE = 0o644

DECIMAL_PAT = re.compile(rb"[0-9]+")
OCTAL_PAT = re.compile(rb"[0-7]+")

# (field, start, end, base)
HEADER_FIELDS = (
    ("mtime", 16, 28, 10),
    ("uid", 28, 34, 10),
    ("gid", 34, 40, 10),
    ("mode", 40, 48, 8),
    ("size", 48, 58, 10),
)
FIELD_WIDTHS = {field: end - start for field, start, end, _ in HEADER_FIELDS}
FIELD_BASES = {field: base for field, _, _, base in HEADER_FIELDS}


class ByteRange(NamedTuple):
    # file offset of the first payload byte, just past the member header
    offset: int
    length: int


class ArchiveMember(NamedTuple):
    name: bytes
    byte_range: ByteRange
    payload: bytes
    mtime: Optional[int] = None
    uid: Optional[int] = None
    gid: Optional[int] = None
    mode: Optional[int] = None

    @property
    def offset(self) -> int:
        return self.byte_range.offset

    @property
    def size(self) -> int:
        return self.byte_range.length

    @property
    def display_name(self) -> str:
        return self.name.decode("utf-8", "replace")


class MemberListing(NamedTuple):
    offset: int
    size: int
    name: str


def _field_text(hdr: bytes, field: str) -> bytes:
    _, start, end, _ = next(f for f in HEADER_FIELDS if f[0] == field)
    return hdr[start:end].strip(b" ")


def _to_int(text: bytes, field: str, pos: int) -> int:
    base = FIELD_BASES[field]
    pat = OCTAL_PAT if base == 8 else DECIMAL_PAT
    if not pat.fullmatch(text):
        raise CorruptMemberError(pos, f"invalid {field} field {text!r}")
    return int(text, base)


def _parse_number(hdr: bytes, field: str, pos: int) -> Optional[int]:
    text = _field_text(hdr, field)
    if not text:
        return None
    return _to_int(text, field, pos)


def _parse_size(hdr: bytes, pos: int) -> int:
    text = _field_text(hdr, "size")
    if not text:
        raise CorruptMemberError(pos, "empty size field")
    return _to_int(text, "size", pos)


def _member_name(
    raw_name: bytes, long_names: Optional[NameTable], pos: int
) -> bytes:
    if raw_name[:1] == b"/":
        # long name in the long-name table
        if long_names is None:
            raise CorruptMemberError(
                pos, f"name {raw_name!r} refers to a missing long-name table"
            )
        try:
            return resolve_indirect_name(raw_name, long_names)
        except ValueError as err:
            raise CorruptMemberError(pos, str(err)) from err
    elif raw_name[-1:] == b"/":
        return raw_name[:-1]
    return raw_name


def decode(data: bytes) -> List[ArchiveMember]:
    """Decode an archive into its ordinary members, in container order"""
    magic = bytes(data[: len(MAGIC)])
    if magic != MAGIC:
        raise NotAnArchiveError(magic)

    members: List[ArchiveMember] = []
    long_names: Optional[NameTable] = None
    pos = len(MAGIC)
    while pos < len(data):
        hdr = bytes(data[pos : pos + HEADER_SIZE])
        if len(hdr) != HEADER_SIZE:
            raise CorruptMemberError(pos, "archive truncated")
        if hdr[58:] != HEADER_END:
            raise CorruptMemberError(pos, "bad header terminator")
        size = _parse_size(hdr, pos)
        start = pos + HEADER_SIZE
        end = start + size
        if end > len(data):
            raise CorruptMemberError(
                pos, f"member size {size} runs past the end of the archive"
            )
        payload = bytes(data[start:end])

        raw_name = hdr[:16].rstrip(b" ")
        if raw_name == SYMBOL_INDEX_NAME or raw_name.startswith(
            EC_SYMBOL_INDEX_NAME
        ):
            logger.debug("Skipping symbol index at %#x", start)
        elif raw_name == LONG_NAMES_NAME:
            logger.debug("Loading long-name table at %#x", start)
            long_names = NameTable.archive(payload)
        else:
            members.append(
                ArchiveMember(
                    name=_member_name(raw_name, long_names, pos),
                    byte_range=ByteRange(start, size),
                    payload=payload,
                    mtime=_parse_number(hdr, "mtime", pos),
                    uid=_parse_number(hdr, "uid", pos),
                    gid=_parse_number(hdr, "gid", pos),
                    mode=_parse_number(hdr, "mode", pos),
                )
            )
        pos = end + size % 2

    logger.debug("Decoded %d archive members", len(members))
    return members


def list_members(data: bytes) -> List[MemberListing]:
    """The (offset, size, name) of every member, in container order"""
    return [
        MemberListing(m.offset, m.size, m.display_name) for m in decode(data)
    ]


def _format_number(value: Optional[int], field: str, index: int) -> bytes:
    width = FIELD_WIDTHS[field]
    if value is None:
        return b" " * width
    if value < 0:
        raise FieldOverflowError(field, index)
    text = (b"%o" if field == "mode" else b"%d") % value
    if len(text) > width:
        raise FieldOverflowError(field, index)
    return text.ljust(width, b" ")


def _header(
    name_field: bytes,
    size: int,
    index: int,
    mtime: Optional[int] = None,
    uid: Optional[int] = None,
    gid: Optional[int] = None,
    mode: Optional[int] = None,
) -> bytes:
    if len(name_field) > 16:
        raise FieldOverflowError("name", index)
    return b"".join(
        [
            name_field.ljust(16, b" "),
            _format_number(mtime, "mtime", index),
            _format_number(uid, "uid", index),
            _format_number(gid, "gid", index),
            _format_number(mode, "mode", index),
            _format_number(size, "size", index),
            HEADER_END,
        ]
    )


def is_inline_name(name: bytes) -> bool:
    """Whether `name` can be stored as `name/` in the header itself"""
    return (
        0 < len(name) <= INLINE_NAME_MAX
        and b"/" not in name
        and not name.endswith(b" ")
    )


def encode(members: Sequence[ArchiveMember]) -> bytes:
    """Encode `members` into a new archive, without a symbol index.

    The long-name table is rebuilt from the member names on every call and
    only written when at least one name does not fit its header.
    """
    long_names = bytearray()
    name_fields: List[bytes] = []
    for index, member in enumerate(members):
        if is_inline_name(member.name):
            name_fields.append(member.name + b"/")
            continue
        if b"\0" in member.name or b"\n" in member.name:
            raise FieldOverflowError("name", index)
        name_fields.append(b"/%d" % len(long_names))
        long_names += member.name + b"\0"

    out = bytearray(MAGIC)
    if long_names:
        # -1: the table itself, not one of `members`
        out += _header(LONG_NAMES_NAME, len(long_names), -1)
        out += long_names
        if len(long_names) % 2:
            out += PAD

    for index, (member, name_field) in enumerate(zip(members, name_fields)):
        payload = member.payload
        out += _header(
            name_field,
            len(payload),
            index,
            mtime=DEFAULT_MTIME if member.mtime is None else member.mtime,
            uid=DEFAULT_UID if member.uid is None else member.uid,
            gid=DEFAULT_GID if member.gid is None else member.gid,
            mode=DEFAULT_MODE if member.mode is None else member.mode,
        )
        out += payload
        if len(payload) % 2:
            out += PAD

    logger.debug("Encoded %d members into %d bytes", len(members), len(out))
    return bytes(out)
