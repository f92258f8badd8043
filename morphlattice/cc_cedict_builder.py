"""Builder for dictionaries in the CC-CEDICT MeCab source format."""

from __future__ import annotations

import logging
import os
import re
import struct
from pathlib import Path

from .character_definition import CharacterDefinitions, CharacterDefinitionsBuilder
from .compression import Algorithm, AlgorithmKind
from .compression import compress as compress_data
from .dictionary_builder import DictionaryBuilder
from .errors import LinderaError, LinderaErrorKind
from .fileutil import read_file, read_utf8_file
from .ipadic_builder import (
    _build_trie,
    _field,
    _group_entries,
    _lines,
    _parse_int,
    _read_csv,
    _values,
    _word_details,
    _wrap_i16,
    _write_file,
)
from .prefix_dict import PrefixDict
from .unknown_dictionary import parse_unk
from .user_dictionary import UserDictionary
from .word_entry import WordEntry, WordId

logger = logging.getLogger(__name__)

SIMPLE_USERDIC_FIELDS_NUM = 3
SIMPLE_WORD_COST = -10000
SIMPLE_CONTEXT_ID = 0
DETAILED_USERDIC_FIELDS_NUM = 12
UNK_FIELDS_NUM = 10
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


def _try_parse(text: str, pattern: re.Pattern[str], bounds: tuple[int, int]) -> int | None:
    try:
        return _parse_int(text, pattern, bounds)
    except LinderaError:
        return None


class CcCedictBuilder(DictionaryBuilder):
    """Builds system and user dictionaries from CC-CEDICT sources.

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
        builder.parse(read_utf8_file(char_def_path))
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
        unknown = parse_unk(chardef.categories(), read_utf8_file(unk_path), UNK_FIELDS_NUM)
        self._write(Path(output_dir) / "unk.bin", unknown.to_bytes())

    def build_dict(
        self, input_dir: str | os.PathLike[str], output_dir: str | os.PathLike[str]
    ) -> None:
        rows: list[list[str]] = []
        for filename in sorted(Path(input_dir).glob("*.csv")):
            logger.debug("reading %s", filename)
            rows.extend(_read_csv(read_utf8_file(filename), flexible=True))
        rows.sort(key=lambda row: row[0])

        entries = []
        for row_id, row in enumerate(rows):
            logger.debug("%r", row)
            word_cost = _try_parse(_field(row, 3).strip(), _SIGNED, _I16_RANGE)
            if word_cost is None:
                logger.warning("failed to parse word_cost: %r", row)
                continue
            cost_id = _try_parse(_field(row, 1).strip(), _UNSIGNED, _U16_RANGE)
            if cost_id is None:
                logger.warning("failed to parse cost_id: %r", row)
                continue
            entries.append((row[0], WordEntry(WordId(row_id, True), word_cost, cost_id)))
        entry_map = _group_entries(entries)

        output = Path(output_dir)
        words_idx, words = _word_details(row[4:] for row in rows)
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
            for line in _lines(read_utf8_file(matrix_path))
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
        rows = _read_csv(text, flexible=False)
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
            entries.append((row[0], WordEntry(WordId(row_id, True), word_cost, cost_id)))
        entry_map = _group_entries(entries)

        details = []
        for row in rows:
            if len(row) == SIMPLE_USERDIC_FIELDS_NUM:
                details.append([row[1], "*", "*", "*", row[2], "*", "*", "*"])
            elif len(row) >= DETAILED_USERDIC_FIELDS_NUM:
                details.append(row[4:])
            else:
                raise LinderaErrorKind.CONTENT.with_error(_USER_DICT_FIELDS_MESSAGE)
        words_idx, words = _word_details(details)

        trie = _build_trie(entry_map, "DoubleArray build error.")
        return UserDictionary(PrefixDict(trie, _values(entry_map), False), words_idx, words)