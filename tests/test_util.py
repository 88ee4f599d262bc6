import argparse
import os
import sys

import pytest

sys.path.insert(
    0, os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
)

import winlib.util  # NOQA


def test_hex_value():
    """Offsets are hex with a 0x prefix, decimal otherwise"""
    assert winlib.util.hex_value("0x44") == 0x44
    assert winlib.util.hex_value("0X1aF") == 0x1AF
    assert winlib.util.hex_value("68") == 68
    assert winlib.util.hex_value("0xFFFFFFFF") == 0xFFFFFFFF
    for bad in ["", "0x", "44h", "-1", "0x100000000", "4294967296", "1_0"]:
        with pytest.raises(argparse.ArgumentTypeError):
            winlib.util.hex_value(bad)
    for bad in ["68\n", "0x44\n"]:
        with pytest.raises(argparse.ArgumentTypeError):
            winlib.util.hex_value(bad)


def test_format_offset():
    assert winlib.util.format_offset(0x120) == "0x120"
    assert winlib.util.format_offset(0xABC) == "0xABC"
    assert winlib.util.format_offset(0) == "0x0"


def test_path_arg(tmp_path):
    lib = tmp_path / "a.lib"
    lib.write_bytes(b"!<arch>\n")
    assert winlib.util.path_arg(exists=True, is_file=True)(str(lib)) == lib
    with pytest.raises(argparse.ArgumentTypeError):
        winlib.util.path_arg(exists=True)(str(tmp_path / "missing.lib"))
    with pytest.raises(argparse.ArgumentTypeError):
        winlib.util.path_arg(is_file=True)(str(tmp_path))
