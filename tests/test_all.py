import sys
import os

sys.path.insert(
    0, os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
)

import winlib  # NOQA
import winlib.util  # NOQA


def test_one():
    assert winlib


def test_version():
    assert winlib.__version__ == winlib.util.__version__
    assert winlib.util.__version__.count(".") == 2


def test_main_module():
    package_dir = os.path.dirname(winlib.__file__)
    assert os.path.isfile(os.path.join(package_dir, "__main__.py"))
