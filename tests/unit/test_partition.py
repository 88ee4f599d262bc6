"""
Unit tests for partition.py
"""

import os
import sys

sys.path.insert(
    0,
    os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")),
)

from winlib.archive import ArchiveMember, ByteRange  # noqa: E402
from winlib.classifier import (  # noqa: E402
    ClassifiedMember,
    ImportDescriptor,
    RegularObject,
)
from winlib.partition import (  # noqa: E402
    PartitionPolicy,
    is_import_member,
    partition,
)


def _classified(offset, kind):
    member = ArchiveMember(
        b"m%x.obj" % offset, ByteRange(offset, 2), b"\0\0"
    )
    return ClassifiedMember(member, kind)


PLAIN = _classified(0x44, RegularObject(has_import_section=False))
IDATA = _classified(0x120, RegularObject(has_import_section=True))
IMPORT = _classified(0x200, ImportDescriptor(b"f", b"f.dll"))
ALL = [PLAIN, IDATA, IMPORT]


def _offsets(members):
    return [m.offset for m in members]


def test_is_import_member():
    assert not is_import_member(PLAIN.kind)
    assert is_import_member(IDATA.kind)
    assert is_import_member(IMPORT.kind)


def test_default_policy_keeps_everything():
    result = partition(ALL, PartitionPolicy())
    assert _offsets(result.kept) == [0x44, 0x120, 0x200]
    assert result.excluded == []


def test_exclude_import_members_captured():
    policy = PartitionPolicy(
        exclude_import_members=True, capture_excluded=True
    )
    result = partition(ALL, policy)
    assert _offsets(result.kept) == [0x44]
    assert _offsets(result.excluded) == [0x120, 0x200]


def test_offset_exclusion_not_captured():
    policy = PartitionPolicy(exclude_offsets=frozenset({0x44}))
    result = partition(ALL, policy)
    assert _offsets(result.kept) == [0x120, 0x200]
    assert result.excluded == []


def test_offset_exclusion_takes_precedence():
    """A plain object is excluded by offset without the import rule"""
    policy = PartitionPolicy(
        exclude_offsets=frozenset({0x44}),
        exclude_import_members=False,
        capture_excluded=True,
    )
    result = partition(ALL, policy)
    assert _offsets(result.excluded) == [0x44]
    assert _offsets(result.kept) == [0x120, 0x200]


def test_offsets_are_truncated_to_32_bits():
    big = _classified(0x1_0000_0044, RegularObject(False))
    policy = PartitionPolicy(exclude_offsets=frozenset({0x44}))
    assert partition([big], policy).kept == []


def test_unknown_offsets_are_ignored():
    policy = PartitionPolicy(exclude_offsets=frozenset({0x45, 0x999}))
    assert _offsets(partition(ALL, policy).kept) == [0x44, 0x120, 0x200]


def test_partition_is_complete_and_stable():
    items = [
        _classified(0x100 * (i + 1), RegularObject(i % 3 == 0))
        for i in range(10)
    ]
    policy = PartitionPolicy(
        exclude_offsets=frozenset({0x200, 0x500}),
        exclude_import_members=True,
        capture_excluded=True,
    )
    result = partition(items, policy)
    kept, excluded = _offsets(result.kept), _offsets(result.excluded)
    assert len(kept) + len(excluded) == len(items)
    assert not set(kept) & set(excluded)
    assert kept == sorted(kept)
    assert excluded == sorted(excluded)
    assert excluded == [0x100, 0x200, 0x400, 0x500, 0x700, 0xA00]


def test_uncaptured_drops_excluded():
    policy = PartitionPolicy(exclude_import_members=True)
    result = partition(ALL, policy)
    assert len(result.kept) <= len(ALL)
    assert result.excluded == []
