"""Argument parsing functionality for depfresh."""

import argparse
import os

from constants import Constants


def _positive_int(value):
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid list length: {value!r}") from exc
    if number < 1:
        raise argparse.ArgumentTypeError("list length must be at least 1")
    return number


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="depfresh",
        description=(
            "depfresh - list the most recently published packages in a project's dependency tree"
        ),
        add_help=True,
    )

    parser.add_argument("manifest",
                        metavar="MANIFEST",
                        help="Path to package.json (default: ./package.json)",
                        nargs="?",
                        default=os.path.join(os.curdir, Constants.PACKAGE_JSON_FILE))
    parser.add_argument("-l",
                        dest="LIST_LENGTH",
                        help=f"Number of packages to display (default: {Constants.DEFAULT_LIST_LENGTH})",
                        action="store",
                        type=_positive_int,
                        default=Constants.DEFAULT_LIST_LENGTH)
    parser.add_argument("--dev",
                        dest="INCLUDE_DEV",
                        help="Include devDependencies of the root manifest.",
                        action="store_true")

    return parser.parse_args(argv)
