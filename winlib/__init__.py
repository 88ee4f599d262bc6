from . import argh_parser
from .command import CreateLibCommand, ListLibCommand
from .util import __version__


def main(argv=None):
    """main entry point for this project"""
    parser = argh_parser.CustomArghParser(
        prog="winlib",
        description="Tools for inspecting and modifying Windows lib files.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        help="Verbose logging",
        action="store_const",
        dest="loglevel",
        const="INFO",
        default="WARNING",
    )
    parser.add_argument(
        "-d",
        "--debug",
        help="Print debugging info",
        action="store_const",
        dest="loglevel",
        const="DEBUG",
    )
    subparsers = parser.add_subparsers(dest="subcommand", required=True)

    command = ListLibCommand()
    list_subparser = subparsers.add_parser(
        "list", help=ListLibCommand.__doc__
    )
    command.add_arguments(list_subparser)
    list_subparser.set_defaults(command=command.main)

    command = CreateLibCommand()
    create_subparser = subparsers.add_parser(
        "create", help=CreateLibCommand.__doc__
    )
    command.add_arguments(create_subparser)
    create_subparser.set_defaults(command=command.main)

    args = parser.parse_args(argv)
    args.command(args)


if __name__ == "__main__":
    main()
