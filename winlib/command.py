"""
Command classes for the winlib command line
"""

from abc import ABC, abstractmethod
import argparse
import pathlib
import sys
from typing import Any, Dict, List, Optional

from . import archive
from .exceptions import WinlibError
from .logging import get_logger, set_level
from .partition import PartitionPolicy
from .pipeline import run
from .util import __version__, format_offset, hex_value, path_arg


class BaseCommand(ABC):
    """A command base class"""

    params: Dict[str, Dict[str, Any]] = {}
    positionals: Dict[str, Dict[str, Any]] = {}

    @classmethod
    def add_arguments(cls, parser: argparse.ArgumentParser):
        for k, kwargs in cls.params.items():
            kwargs = dict(kwargs)
            flags = kwargs.pop("flags", ["--" + k])
            parser.add_argument(*flags, dest=k, **kwargs)

        for k, kwargs in cls.positionals.items():
            parser.add_argument(k, **kwargs)

    def handle_arguments(self, args: argparse.Namespace):
        """Update self using the argparse object"""
        for k in self.params.keys():
            assert k in self.__dict__
            if k in args.__dict__:
                val = getattr(args, k)
                if val is not None:
                    setattr(self, k, val)
        for k in self.positionals.keys():
            assert k in self.__dict__
            if k in args.__dict__:
                setattr(self, k, getattr(args, k))

    def setup_logging(self, args: argparse.Namespace) -> None:
        self.logger = get_logger(__name__)
        set_level(args.loglevel)
        self.logger.info("Starting winlib version: %s", __version__)

    def main(self, args: argparse.Namespace) -> None:
        """Run the command, exiting with status 1 on failure"""
        self.handle_arguments(args)
        self.setup_logging(args)
        self.validate()
        try:
            self.execute()
        except (WinlibError, OSError) as err:
            self.logger.error("%s", err)
            sys.exit(1)

    def validate(self) -> None:
        pass

    @abstractmethod
    def execute(self) -> None:
        pass


class ListLibCommand(BaseCommand):
    """Show the contents of a lib."""

    positionals: Dict[str, Dict[str, Any]] = {
        "lib_path": {
            "help": "the path of the lib to inspect",
            "type": path_arg(exists=True, is_file=True),
        },
    }

    def __init__(self) -> None:
        self.lib_path: Optional[pathlib.Path] = None

    def execute(self) -> None:
        assert self.lib_path
        data = self.lib_path.read_bytes()
        print(f"{'offset':>10}  {'size':>10}  member name")
        for listing in archive.list_members(data):
            print(
                f"{format_offset(listing.offset):>10}  "
                f"{format_offset(listing.size):>10}  {listing.name}"
            )


class CreateLibCommand(BaseCommand):
    """Create a new lib from an old lib."""

    params: Dict[str, Dict[str, Any]] = {
        "from_lib": {
            "flags": ["--from"],
            "metavar": "PATH",
            "required": True,
            "help": (
                "The new lib will contain members from the old lib at PATH."
            ),
            "type": path_arg(exists=True, is_file=True),
        },
        "exclude": {
            "metavar": "OFFSET",
            "help": (
                "Exclude the member at the given offset (decimal or "
                "0x-prefixed hex, as shown by 'list'). May be repeated."
            ),
            "type": hex_value,
            "action": "append",
        },
        "exclude_idata": {
            "help": "Exclude members containing .idata sections.",
            "action": "store_true",
        },
        "save_excluded": {
            "metavar": "PATH",
            "help": (
                "Store the excluded members in a separate library at PATH."
            ),
            "type": path_arg(),
        },
    }
    positionals: Dict[str, Dict[str, Any]] = {
        "lib_path": {
            "help": "the new path of the lib to create",
            "type": path_arg(),
        },
    }

    def __init__(self) -> None:
        self.from_lib: Optional[pathlib.Path] = None
        self.exclude: List[int] = []
        self.exclude_idata = False
        self.save_excluded: Optional[pathlib.Path] = None
        self.lib_path: Optional[pathlib.Path] = None

    def validate(self) -> None:
        if self.save_excluded and self.save_excluded == self.lib_path:
            self.logger.error(
                "--save-excluded must differ from the output lib path"
            )
            sys.exit(2)

    def policy(self) -> PartitionPolicy:
        return PartitionPolicy(
            exclude_offsets=frozenset(self.exclude),
            exclude_import_members=self.exclude_idata,
            capture_excluded=self.save_excluded is not None,
        )

    def execute(self) -> None:
        assert self.from_lib and self.lib_path
        source = self.from_lib.read_bytes()
        kept, excluded = run(source, self.policy())

        # only write once every requested archive has been built
        self.lib_path.write_bytes(kept)
        self.logger.info("Wrote %s", self.lib_path)
        if self.save_excluded is not None and excluded is not None:
            self.save_excluded.write_bytes(excluded)
            self.logger.info(
                "Wrote excluded members to %s", self.save_excluded
            )
