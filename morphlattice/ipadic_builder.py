"""Builder for dictionaries in the IPADIC source format."""

from __future__ import annotations

import csv
import io
import logging
import os
import re
import struct
from collections import defaultdict
from collections.abc import Iterable, Sequence
from pathlib import Path

from .binfmt import Encoder
from .character_definition import CharacterDefinitions, CharacterDefinitionsBuilder
from .compression import Algorithm, AlgorithmKind
from .compression import compress as compress_data
from .dictionary_builder import DictionaryBuilder
from .doublearray import DoubleArray
from .errors import LinderaErrorKind
from .fileutil import read_euc_file, read_file
from .prefix_dict import PrefixDict
from .unknown_dictionary import parse_unk
from .user_dictionary import UserDictionary
from .word_entry import WordEntry, WordId

logger = logging.getLogger(__name__)

SIMPLE_USERDIC_FIELDS_NUM = 3
SIMPLE_WORD_COST = -10000
SIMPLE_CONTEXT_ID = 0
DETAILED_USERDIC_FIELDS_NUM = 13
UNK_FIELDS_NUM = 11
COMPRESS_ALGORITHM = Algorithm(AlgorithmKind.LZMA, 9)

_I16_MAX = 2**15 - 1
_SIGNED = re.compile(r"[+-]?[0-9]+")
_UNSIGNED = re.compile(r"\+?[0-9]+")
_I16_RANGE = (-(2**15), _I16_MAX)
_U16_RANGE = (0, 2**16 - 1)
_I32_RANGE = (-(2**31), 2**31 - 1)

_USER_DICT_FIELDS_MESSAGE = (
    f"user dictionary should be a CSV with {SIMPLE_USERDIC_FIELDS_NUM} "
    f"or {DETAILED_USERDIC_FIELDS_NUM}+ fields"
)


def _parse_int(
    text: str, pattern: re.Pattern[str], bounds: tuple[int, int], message: str | None = None
) -> int:
    low, high = bounds
    if pattern.fullmatch(text) and low <= int(text) <= high:
        return int(text)
    raise LinderaErrorKind.PARSE.with_error(message or f"invalid number: {text!r}")


def _wrap_i16(value: int) -> int:
    return ((value + 0x8000) & 0xFFFF) - 0x8000


def _lines(text: str) -> list[str]:
    parts = text.split("\n")
    if parts and parts[-1] == "":
        parts.pop()
    return [part[:-1] if part.endswith("\r") else part for part in parts]


def _read_csv(text: str, flexible: bool) -> list[list[str]]:
    """Parse CSV records, skipping blank lines; unless ``flexible``, widths must agree."""
    rows: list[list[str]] = []
    width: int | None = None
    try:
        for record in csv.reader(io.StringIO(text, newline="")):
            if not record:
                continue
            if not flexible:
                if width is None:
                    width = len(record)
                elif len(record) != width:
                    raise LinderaErrorKind.CONTENT.with_error(
                        f"found record with {len(record)} fields, "
                        f"but the previous record has {width} fields"
                    )
            rows.append(record)
    except csv.Error as err:
        raise LinderaErrorKind.CONTENT.with_error(err) from err
    return rows


def _field(row: Sequence[str], index: int) -> str:
    if index >= len(row):
        raise LinderaErrorKind.CONTENT.with_error(f"missing field {index} in record {row}")
    return row[index]


def _write_file(path: Path, data: bytes) -> None:
    try:
        path.write_bytes(data)
    except OSError as err:
        raise LinderaErrorKind.IO.with_error(err) from err


def _group_entries(entries: Iterable[tuple[str, WordEntry]]) -> dict[str, list[WordEntry]]:
    grouped: dict[str, list[WordEntry]] = defaultdict(list)
    for surface, entry in entries:
        grouped[surface].append(entry)
    return dict(sorted(grouped.items()))


def _build_trie(entry_map: dict[str, list[WordEntry]], error_message: str) -> DoubleArray:
    keyset = []
    first_id = 0
    for surface, entries in entry_map.items():
        keyset.append((surface, (first_id << 5) | len(entries)))
        first_id += len(entries)
    try:
        return DoubleArray.build(keyset)
    except ValueError as err:
        raise LinderaErrorKind.IO.with_error(error_message) from err


def _values(entry_map: dict[str, list[WordEntry]]) -> bytes:
    return b"".join(entry.serialize() for entries in entry_map.values() for entry in entries)


def _word_details(details: Iterable[list[str]]) -> tuple[bytes, bytes]:
    """Return the offset index and the concatenated encoded detail lists."""
    words = bytearray()
    index = bytearray()
    for detail in details:
        try:
            index += struct.pack("<I", len(words))
        except struct.error as err:
            raise LinderaErrorKind.IO.with_error(err) from err
        words += Encoder().string_list(detail).to_bytes()
    return bytes(index), bytes(words)


def _normalize(column: str) -> str:
    # EUC-JP sources are ambiguous between these look-alike characters.
    return column.replace("\u2015", "\u2014").replace("\uff5e", "\u301c")


class IpadicBuilder(DictionaryBuilder):
    """Builds system and user dictionaries from IPADIC sources.

    With ``compress`` set, every system dictionary file is written
    LZMA-compressed inside a :class:`CompressedData` container.
    """

    def __init__(self, compress: bool = False) -> None:
        self.compress = compress

    def _write(self, path: Path, buffer: bytes) -> None:
        if self.compress:
            buffer = compress_data(buffer, COMPRESS_ALGORITHM).to_bytes()
        _write_file(path, buffer)

    def build_chardef(
        self, input_dir: str | os.PathLike[str], output_dir: str | os.PathLike[str]
    ) -> CharacterDefinitions:
        char_def_path = Path(input_dir) / "char.def"
        logger.debug("reading %s", char_def_path)
        builder = CharacterDefinitionsBuilder()
        builder.parse(read_euc_file(char_def_path))
        char_definitions = builder.build()
        self._write(Path(output_dir) / "char_def.bin", char_definitions.to_bytes())
        return char_definitions

    def build_unk(
        self,
        input_dir: str | os.PathLike[str],
        chardef: CharacterDefinitions,
        output_dir: str | os.PathLike[str],
    ) -> None:
        unk_path = Path(input_dir) / "unk.def"
        logger.debug("reading %s", unk_path)
        unknown = parse_unk(chardef.categories(), read_euc_file(unk_path), UNK_FIELDS_NUM)
        self._write(Path(output_dir) / "unk.bin", unknown.to_bytes())

    def build_dict(
        self, input_dir: str | os.PathLike[str], output_dir: str | os.PathLike[str]
    ) -> None:
        rows: list[list[str]] = []
        for filename in sorted(Path(input_dir).glob("*.csv")):
            logger.debug("reading %s", filename)
            rows.extend(_read_csv(read_euc_file(filename), flexible=False))

        normalized = [[_normalize(column) for column in row] for row in rows]
        normalized.sort(key=lambda row: row[0])

        entry_map = _group_entries(
            (
                row[0],
                WordEntry(
                    word_id=WordId(row_id, True),
                    word_cost=_parse_int(
                        _field(row, 3).strip(), _SIGNED, _I16_RANGE, "failed to parse word_cost"
                    ),
                    cost_id=_parse_int(
                        _field(row, 1).strip(), _UNSIGNED, _U16_RANGE, "failed to parse cost_id"
                    ),
                ),
            )
            for row_id, row in enumerate(normalized)
        )

        output = Path(output_dir)
        words_idx, words = _word_details(row[4:] for row in normalized)
        self._write(output / "dict.words", words)
        self._write(output / "dict.wordsidx", words_idx)
        trie = _build_trie(entry_map, "DoubleArray build error.")
        self._write(output / "dict.da", trie.to_bytes())
        self._write(output / "dict.vals", _values(entry_map))

    def build_cost_matrix(
        self, input_dir: str | os.PathLike[str], output_dir: str | os.PathLike[str]
    ) -> None:
        matrix_path = Path(input_dir) / "matrix.def"
        logger.debug("reading %s", matrix_path)
        lines = [
            [_parse_int(field, _SIGNED, _I32_RANGE) for field in line.split()]
            for line in _lines(read_euc_file(matrix_path))
        ]
        if not lines:
            raise LinderaErrorKind.CONTENT.with_error("unknown error")
        header, *body = lines
        if len(header) < 2 or header[0] < 0 or header[1] < 0:
            raise LinderaErrorKind.CONTENT.with_error(f"invalid matrix header: {header}")
        forward_size, backward_size = header[0], header[1]

        costs = [_I16_MAX] * (2 + forward_size * backward_size)
        costs[0] = _wrap_i16(forward_size)
        costs[1] = _wrap_i16(backward_size)
        for fields in body:
            if len(fields) < 3:
                raise LinderaErrorKind.CONTENT.with_error(f"invalid matrix line: {fields}")
            forward_id, backward_id, cost = fields[0], fields[1], fields[2]
            index = 2 + backward_id + forward_id * backward_size
            if forward_id < 0 or backward_id < 0 or index >= len(costs):
                raise LinderaErrorKind.CONTENT.with_error(
                    f"context ids out of range: {forward_id} {backward_id}"
                )
            costs[index] = _wrap_i16(cost)

        self._write(Path(output_dir) / "matrix.mtx", struct.pack(f"<{len(costs)}h", *costs))

    def build_user_dict(self, input_file: str | os.PathLike[str]) -> UserDictionary:
        logger.debug("reading %s", input_file)
        raw = read_file(input_file)
        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError as err:
            raise LinderaErrorKind.CONTENT.with_error(err) from err
        rows = _read_csv(text, flexible=True)
        rows.sort(key=lambda row: row[0])

        entries = []
        for row_id, row in enumerate(rows):
            if len(row) == SIMPLE_USERDIC_FIELDS_NUM:
                word_cost, cost_id = SIMPLE_WORD_COST, SIMPLE_CONTEXT_ID
            elif len(row) < 4:
                raise LinderaErrorKind.CONTENT.with_error(_USER_DICT_FIELDS_MESSAGE)
            else:
                word_cost = _parse_int(row[3], _SIGNED, _I16_RANGE, "failed to parse word cost")
                cost_id = _parse_int(
                    row[1], _UNSIGNED, _U16_RANGE, "failed to parse left context id"
                )
            entries.append((row[0], WordEntry(WordId(row_id, False), word_cost, cost_id)))
        entry_map = _group_entries(entries)

        details = []
        for row in rows:
            if len(row) == SIMPLE_USERDIC_FIELDS_NUM:
                details.append([row[1], "*", "*", "*", "*", "*", row[0], row[2], "*"])
            elif len(row) >= DETAILED_USERDIC_FIELDS_NUM:
                details.append(row[4:])
            else:
                raise LinderaErrorKind.CONTENT.with_error(_USER_DICT_FIELDS_MESSAGE)
        words_idx, words = _word_details(details)

        trie = _build_trie(entry_map, "DoubleArray build error for user dict.")
        return UserDictionary(PrefixDict(trie, _values(entry_map), False), words_idx, words)