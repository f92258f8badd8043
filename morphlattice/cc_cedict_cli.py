"""Command line entry point for building CC-CEDICT dictionaries."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from .cc_cedict_builder import CcCedictBuilder
from .errors import LinderaError, LinderaErrorKind


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cc-cedict-builder", description="CC-CEDICT dictionary builder"
    )
    parser.add_argument(
        "-s", "--dict-src", metavar="DICT_SRC", help="The dictionary source directory."
    )
    parser.add_argument(
        "-d", "--dict-dest", metavar="DICT_DEST", help="The dictionary destination directory."
    )
    parser.add_argument(
        "-S", "--user-dict-src", metavar="USER_DICT_SRC", help="The user dictionary source file."
    )
    parser.add_argument(
        "-D",
        "--user-dict-dest",
        metavar="USER_DICT_DEST",
        help="The user dictionary destination file.",
    )
    return parser


def _run(args: argparse.Namespace, builder: CcCedictBuilder) -> None:
    if args.dict_src is not None:
        if args.dict_dest is None:
            raise LinderaErrorKind.ARGS.with_error(
                "`--dict-dest` is required when `--dict-src` is specified"
            )
        try:
            builder.build_dictionary(args.dict_src, args.dict_dest)
        except LinderaError as err:
            raise LinderaErrorKind.ARGS.with_error(err) from err

    if args.user_dict_src is not None:
        if args.user_dict_dest is None:
            raise LinderaErrorKind.ARGS.with_error(
                "`--user-dict-dest` is required when `--user-dict-src` is specified"
            )
        try:
            builder.build_user_dictionary(args.user_dict_src, args.user_dict_dest)
        except LinderaError as err:
            raise LinderaErrorKind.ARGS.with_error(err) from err


def main(argv: Sequence[str] | None = None) -> int:
    """Build the requested dictionaries; return the process exit status."""
    args = _parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    try:
        _run(args, CcCedictBuilder())
    except LinderaError as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())