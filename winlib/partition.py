"""
Splitting classified members into kept and excluded sets
"""

from typing import FrozenSet, List, NamedTuple, Sequence

from .archive import ArchiveMember
from .classifier import (
    ClassifiedMember,
    ImportDescriptor,
    MemberKind,
    RegularObject,
)
from .logging import get_logger

logger = get_logger(__name__)

U32_MASK = 0xFFFFFFFF


class PartitionPolicy(NamedTuple):
    exclude_offsets: FrozenSet[int] = frozenset()
    exclude_import_members: bool = False
    capture_excluded: bool = False


class PartitionResult(NamedTuple):
    kept: List[ArchiveMember]
    excluded: List[ArchiveMember]


def is_import_member(kind: MemberKind) -> bool:
    """Whether the member contributes to the import table"""
    if isinstance(kind, ImportDescriptor):
        return True
    return isinstance(kind, RegularObject) and kind.has_import_section


def is_excluded(item: ClassifiedMember, policy: PartitionPolicy) -> bool:
    if (item.member.offset & U32_MASK) in policy.exclude_offsets:
        return True
    return policy.exclude_import_members and is_import_member(item.kind)


def partition(
    classified: Sequence[ClassifiedMember], policy: PartitionPolicy
) -> PartitionResult:
    """Stable split of `classified` according to `policy`"""
    kept: List[ArchiveMember] = []
    excluded: List[ArchiveMember] = []
    for item in classified:
        if not is_excluded(item, policy):
            kept.append(item.member)
            continue
        member = item.member
        logger.debug("Excluding %s at %#x", member.display_name, member.offset)
        if policy.capture_excluded:
            excluded.append(item.member)

    logger.info(
        "Keeping %d of %d members, %d excluded",
        len(kept),
        len(classified),
        len(classified) - len(kept),
    )
    return PartitionResult(kept, excluded)
