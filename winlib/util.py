"""
Utility functions
"""

import argparse
import pathlib
import re
from typing import Callable, Optional

__version__ = "0.2.1"

HEX_PAT = re.compile(r"0[xX](?P<digits>[0-9a-fA-F]+)")
DEC_PAT = re.compile(r"[0-9]+")
U32_MAX = 0xFFFFFFFF


def hex_value(arg: str) -> int:
    """A `0x` prefixed hexadecimal or a decimal member offset"""
    m = HEX_PAT.fullmatch(arg)
    if m:
        value = int(m.group("digits"), 16)
    elif DEC_PAT.fullmatch(arg):
        value = int(arg, 10)
    else:
        raise argparse.ArgumentTypeError(f"invalid offset: '{arg}'")
    if value > U32_MAX:
        raise argparse.ArgumentTypeError(
            f"offset '{arg}' does not fit in 32 bits"
        )
    return value


def path_arg(
    exists: Optional[bool] = None,
    is_dir: Optional[bool] = None,
    is_file: Optional[bool] = None,
) -> Callable[[str], pathlib.Path]:
    """pathlib checked types for argparse"""

    def _path_arg(arg: str) -> pathlib.Path:
        p = pathlib.Path(arg)

        attrs = [exists, is_dir, is_file]
        attr_names = ["exists", "is_dir", "is_file"]

        for attr_val, attr_name in zip(attrs, attr_names):
            if attr_val is None:  # Skip attributes that are not defined
                continue

            m = getattr(p, attr_name)
            if m() != attr_val:
                raise argparse.ArgumentTypeError(
                    f"The path '{arg}' needs the attribute"
                    f" {attr_name}={attr_val}, but {attr_name}={m()}"
                )
        return p

    return _path_arg


def format_offset(value: int) -> str:
    return f"0x{value:X}"
