"""
Classification of library members by payload shape
"""

from typing import List, NamedTuple, Sequence, Union

from .archive import ArchiveMember
from .coff import parse_import_descriptor, parse_object
from .exceptions import CoffParseError, UnrecognizedMemberError
from .logging import get_logger

logger = get_logger(__name__)

IMPORT_SECTION_PREFIX = b".idata$"


class RegularObject(NamedTuple):
    has_import_section: bool


class ImportDescriptor(NamedTuple):
    symbol: bytes = b""
    dll: bytes = b""
    machine: int = 0


MemberKind = Union[RegularObject, ImportDescriptor]


class ClassifiedMember(NamedTuple):
    member: ArchiveMember
    kind: MemberKind


def classify(payload: bytes, offset: int = 0) -> MemberKind:
    """Classify a member payload.

    A COFF object is tried first and the short import descriptor only when
    that fails, because import descriptors are only told apart from objects
    by their invalid file header. `offset` is reported in the error.
    """
    try:
        obj = parse_object(payload)
        for name in obj.section_names():
            if name.startswith(IMPORT_SECTION_PREFIX):
                return RegularObject(has_import_section=True)
        return RegularObject(has_import_section=False)
    except CoffParseError as object_error:
        try:
            header = parse_import_descriptor(payload)
        except CoffParseError as import_error:
            raise UnrecognizedMemberError(
                offset, object_error, import_error
            ) from object_error
        return ImportDescriptor(header.symbol, header.dll, header.machine)


def classify_members(
    members: Sequence[ArchiveMember],
) -> List[ClassifiedMember]:
    """Pair every member with its kind, stopping at the first failure"""
    classified = []
    for member in members:
        kind = classify(member.payload, member.offset)
        logger.debug(
            "Member %s at %#x: %s", member.display_name, member.offset, kind
        )
        classified.append(ClassifiedMember(member, kind))
    return classified
