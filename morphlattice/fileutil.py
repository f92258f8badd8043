"""Reading dictionary source files in their native encodings."""

from __future__ import annotations

import os

from .errors import LinderaErrorKind

_BOMS = (
    (b"\xef\xbb\xbf", "utf-8"),
    (b"\xff\xfe", "utf-16-le"),
    (b"\xfe\xff", "utf-16-be"),
)


def read_file(filename: str | os.PathLike[str]) -> bytes:
    """Return the whole content of ``filename``."""
    try:
        with open(filename, "rb") as handle:
            return handle.read()
    except OSError as err:
        raise LinderaErrorKind.IO.with_error(err) from err


def _decode(buffer: bytes, encoding: str) -> str:
    for bom, bom_encoding in _BOMS:
        if buffer.startswith(bom):
            return buffer[len(bom):].decode(bom_encoding, errors="replace")
    return buffer.decode(encoding, errors="replace")


def read_euc_file(filename: str | os.PathLike[str]) -> str:
    """Read an EUC-JP encoded file, replacing undecodable bytes."""
    return _decode(read_file(filename), "euc_jp")


def read_utf8_file(filename: str | os.PathLike[str]) -> str:
    """Read a UTF-8 encoded file, replacing undecodable bytes."""
    return _decode(read_file(filename), "utf-8")