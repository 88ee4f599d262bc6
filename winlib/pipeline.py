"""
The decode, classify, partition and encode pipeline
"""

from typing import Optional, Tuple

from . import archive
from .classifier import classify_members
from .exceptions import (
    ClassifyError,
    CodecError,
    EncodeError,
    PipelineError,
)
from .logging import get_logger
from .partition import PartitionPolicy, partition

logger = get_logger(__name__)


def run(
    source: bytes, policy: PartitionPolicy
) -> Tuple[bytes, Optional[bytes]]:
    """Rebuild `source` without the members `policy` excludes.

    Returns the filtered archive and, when `policy.capture_excluded` is set,
    an archive of the excluded members. Either both requested archives are
    returned or a PipelineError is raised.
    """
    try:
        members = archive.decode(source)
    except CodecError as err:
        raise PipelineError("decode", err) from err
    logger.info("Read %d members", len(members))

    try:
        classified = classify_members(members)
    except ClassifyError as err:
        raise PipelineError("classify", err) from err

    result = partition(classified, policy)

    try:
        kept = archive.encode(result.kept)
        excluded = (
            archive.encode(result.excluded)
            if policy.capture_excluded
            else None
        )
    except EncodeError as err:
        raise PipelineError("encode", err) from err
    return kept, excluded
