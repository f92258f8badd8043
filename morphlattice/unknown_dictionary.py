"""Entries for words absent from the dictionary, parsed from ``unk.def``."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from .binfmt import Decoder, Encoder
from .errors import LinderaErrorKind
from .word_entry import U32_MAX, WordEntry, WordId

logger = logging.getLogger(__name__)

_UNSIGNED = re.compile(r"\+?[0-9]+")
_SIGNED = re.compile(r"[+-]?[0-9]+")
_I32_MIN, _I32_MAX = -(2**31), 2**31 - 1


def _parse_int(text: str, pattern: re.Pattern[str], low: int, high: int) -> int:
    if not pattern.fullmatch(text):
        raise LinderaErrorKind.PARSE.with_error(f"invalid digit found in string: {text!r}")
    value = int(text)
    if not low <= value <= high:
        raise LinderaErrorKind.PARSE.with_error(f"number out of range: {text!r}")
    return value


def _wrap_i16(value: int) -> int:
    return ((value + 0x8000) & 0xFFFF) - 0x8000


def _lines(text: str) -> list[str]:
    parts = text.split("\n")
    if parts and parts[-1] == "":
        parts.pop()
    return [part[:-1] if part.endswith("\r") else part for part in parts]


@dataclass
class UnknownDictionary:
    """Word entries per character category."""

    category_references: list[list[int]]
    costs: list[WordEntry]

    def word_entry(self, word_id: int) -> WordEntry:
        return self.costs[word_id]

    def lookup_word_ids(self, category_id: int) -> list[int]:
        return self.category_references[category_id]

    def to_bytes(self) -> bytes:
        encoder = Encoder().u64(len(self.category_references))
        for references in self.category_references:
            encoder.u64(len(references))
            for word_id in references:
                encoder.u32(word_id)
        encoder.u64(len(self.costs))
        for entry in self.costs:
            entry.encode(encoder)
        return encoder.to_bytes()

    @classmethod
    def load(cls, unknown_data: bytes) -> "UnknownDictionary":
        decoder = Decoder(unknown_data)
        references = [
            [decoder.u32() for _ in range(decoder.u64())] for _ in range(decoder.u64())
        ]
        costs = [WordEntry.decode(decoder) for _ in range(decoder.u64())]
        return cls(references, costs)


@dataclass(frozen=True)
class UnknownDictionaryEntry:
    """One line of ``unk.def``."""

    surface: str
    left_id: int
    right_id: int
    word_cost: int


def _parse_entry(fields: Sequence[str], expected_fields_len: int) -> UnknownDictionaryEntry:
    if len(fields) != expected_fields_len:
        raise LinderaErrorKind.CONTENT.with_error(
            f"Invalid number of fields. Expect {expected_fields_len}, got {len(fields)}"
        )
    return UnknownDictionaryEntry(
        surface=fields[0],
        left_id=_parse_int(fields[1], _UNSIGNED, 0, U32_MAX),
        right_id=_parse_int(fields[2], _UNSIGNED, 0, U32_MAX),
        word_cost=_parse_int(fields[3], _SIGNED, _I32_MIN, _I32_MAX),
    )


def _cost_entry(entry: UnknownDictionaryEntry) -> WordEntry:
    if entry.left_id != entry.right_id:
        logger.warning("left id and right id are not same: %r", entry)
    return WordEntry(
        word_id=WordId(U32_MAX, True),
        word_cost=_wrap_i16(entry.word_cost),
        cost_id=entry.left_id & 0xFFFF,
    )


def parse_unk(
    categories: Sequence[str], file_content: str, expected_fields_len: int
) -> UnknownDictionary:
    """Parse ``unk.def`` content; every line needs exactly ``expected_fields_len`` fields."""
    entries = [_parse_entry(line.split(","), expected_fields_len) for line in _lines(file_content)]
    references = [
        [entry_id for entry_id, entry in enumerate(entries) if entry.surface == category]
        for category in categories
    ]
    return UnknownDictionary(references, [_cost_entry(entry) for entry in entries])