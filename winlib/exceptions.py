"""
Errors raised while reading, classifying and rebuilding libraries
"""

from typing import Optional


class WinlibError(Exception):
    """Base class for all library processing errors"""


class CodecError(WinlibError):
    """The archive container could not be decoded"""


class NotAnArchiveError(CodecError):
    def __init__(self, magic: bytes):
        self.magic = magic
        super().__init__(f"not a recognised archive file (magic {magic!r})")


class CorruptMemberError(CodecError):
    def __init__(self, offset: int, reason: str):
        self.offset = offset
        self.reason = reason
        super().__init__(f"corrupt archive member at {offset:#x}: {reason}")


class CoffParseError(WinlibError):
    """A member payload is not the COFF structure it was parsed as"""


class ClassifyError(WinlibError):
    """A member could not be classified"""


class UnrecognizedMemberError(ClassifyError):
    def __init__(
        self,
        offset: int,
        cause: CoffParseError,
        import_error: Optional[CoffParseError] = None,
    ):
        self.offset = offset
        self.cause = cause
        self.import_error = import_error
        super().__init__(
            f"unrecognised archive member at {offset:#x}\ncause: {cause}"
        )


class EncodeError(WinlibError):
    """An archive could not be encoded"""


class FieldOverflowError(EncodeError):
    def __init__(self, field: str, member_index: int):
        self.field = field
        self.member_index = member_index
        super().__init__(
            f"member {member_index}: value does not fit the '{field}' "
            "header field"
        )


class PipelineError(WinlibError):
    """A failure in one stage of the filter pipeline"""

    def __init__(self, stage: str, cause: WinlibError):
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage} failed: {cause}")
