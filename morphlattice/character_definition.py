"""Character categories used to group unknown words, parsed from ``char.def``."""

from __future__ import annotations

import bisect
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .binfmt import Decoder, Encoder
from .errors import LinderaErrorKind

DEFAULT_CATEGORY_NAME = "DEFAULT"

_U32_MAX = 0xFFFFFFFF
_U16_MAX = 0xFFFF
_UNSIGNED = re.compile(r"\+?[0-9]+")
_HEX = re.compile(r"\+?[0-9A-Fa-f]+")
_ASCII_WHITESPACE = re.compile(r"[ \t\n\x0c\r]+")


def _lines(text: str) -> list[str]:
    """Split into lines on ``\\n``, dropping a trailing ``\\r`` and a final empty line."""
    parts = text.split("\n")
    if parts and parts[-1] == "":
        parts.pop()
    return [part[:-1] if part.endswith("\r") else part for part in parts]


def _parse_u32(text: str) -> int:
    if not _UNSIGNED.fullmatch(text):
        raise LinderaErrorKind.PARSE.with_error(f"invalid digit found in string: {text!r}")
    value = int(text)
    if value > _U32_MAX:
        raise LinderaErrorKind.PARSE.with_error(f"number too large: {text!r}")
    return value


def _parse_hex_codepoint(text: str) -> int:
    digits = text
    while digits.startswith("0x"):
        digits = digits[2:]
    if not _HEX.fullmatch(digits):
        raise LinderaErrorKind.PARSE.with_error(f"invalid hex code point: {text!r}")
    ucs2 = int(digits, 16)
    if ucs2 > _U16_MAX:
        raise LinderaErrorKind.PARSE.with_error(f"code point too large: {text!r}")
    # Lone surrogates decode to the replacement character.
    decoded = ucs2.to_bytes(2, "little").decode("utf-16-le", errors="replace")
    if len(decoded) != 1:
        raise LinderaErrorKind.PARSE.with_error("unusual char length")
    return ord(decoded)


@dataclass(frozen=True)
class CategoryData:
    """How unknown words of a category are formed."""

    invoke: bool
    group: bool
    length: int


@dataclass
class LookupTable:
    """Piecewise-constant map from code points to category id lists."""

    boundaries: list[int]
    values: list[list[int]]

    @classmethod
    def from_fn(
        cls, boundaries: Iterable[int], funct: Callable[[int], Iterable[int]]
    ) -> "LookupTable":
        """Evaluate ``funct`` at every boundary (0 is always one)."""
        bounds = list(boundaries)
        if 0 not in bounds:
            bounds.append(0)
        bounds.sort()
        return cls(bounds, [list(funct(boundary)) for boundary in bounds])

    def eval(self, target: int) -> list[int]:
        return self.values[bisect.bisect_right(self.boundaries, target) - 1]


@dataclass
class CharacterDefinitions:
    """Category definitions, their names and the code point mapping."""

    category_definitions: list[CategoryData]
    category_names: list[str]
    mapping: LookupTable

    def categories(self) -> list[str]:
        return self.category_names

    def lookup_definition(self, category_id: int) -> CategoryData:
        return self.category_definitions[category_id]

    def category_name(self, category_id: int) -> str:
        return self.category_names[category_id]

    def lookup_categories(self, c: str) -> list[int]:
        """Return the category ids of the single character ``c``."""
        return self.mapping.eval(ord(c))

    def to_bytes(self) -> bytes:
        encoder = Encoder().u64(len(self.category_definitions))
        for data in self.category_definitions:
            encoder.boolean(data.invoke).boolean(data.group).u32(data.length)
        encoder.string_list(self.category_names)
        encoder.u64(len(self.mapping.boundaries))
        for boundary in self.mapping.boundaries:
            encoder.u32(boundary)
        encoder.u64(len(self.mapping.values))
        for ids in self.mapping.values:
            encoder.u64(len(ids))
            for category_id in ids:
                encoder.u64(category_id)
        return encoder.to_bytes()

    @classmethod
    def load(cls, char_def_data: bytes) -> "CharacterDefinitions":
        decoder = Decoder(char_def_data)
        definitions = [
            CategoryData(decoder.boolean(), decoder.boolean(), decoder.u32())
            for _ in range(decoder.u64())
        ]
        names = decoder.string_list()
        boundaries = [decoder.u32() for _ in range(decoder.u64())]
        values = [
            [decoder.u64() for _ in range(decoder.u64())] for _ in range(decoder.u64())
        ]
        return cls(definitions, names, LookupTable(boundaries, values))


class CharacterDefinitionsBuilder:
    """Collects category and range lines of ``char.def``."""

    def __init__(self) -> None:
        self._category_definitions: list[CategoryData] = []
        self._category_index: dict[str, int] = {}
        self._char_ranges: list[tuple[int, int, list[int]]] = []

    def category_id(self, category_name: str) -> int:
        """Return the id of ``category_name``, allocating the next one if new."""
        return self._category_index.setdefault(category_name, len(self._category_index))

    def _lookup_categories(self, c: int) -> list[int]:
        found: list[int] = []
        for start, stop, category_ids in self._char_ranges:
            if start <= c <= stop:
                found.extend(cat for cat in category_ids if cat not in found)
        if not found and DEFAULT_CATEGORY_NAME in self._category_index:
            found.append(self._category_index[DEFAULT_CATEGORY_NAME])
        return found

    def parse(self, content: str) -> None:
        for line in _lines(content):
            line_str = line.split("#", 1)[0].strip()
            if not line_str:
                continue
            if line_str.startswith("0x"):
                self._parse_range(line_str)
            else:
                self._parse_category(line_str)

    def _parse_range(self, line: str) -> None:
        fields = line.split()
        bounds = fields[0].split("..")
        if len(bounds) == 1:
            lower = higher = _parse_hex_codepoint(bounds[0])
        elif len(bounds) == 2:
            lower = _parse_hex_codepoint(bounds[0])
            higher = _parse_hex_codepoint(bounds[1])
        else:
            raise LinderaErrorKind.CONTENT.with_error(f"Invalid line: {line}")
        category_ids = [self.category_id(name) for name in fields[1:]]
        self._char_ranges.append((lower, higher, category_ids))

    def _parse_category(self, line: str) -> None:
        fields = [field for field in _ASCII_WHITESPACE.split(line) if field]
        if len(fields) != 4:
            raise LinderaErrorKind.CONTENT.with_error(
                f"Expected 4 fields. Got {len(fields)} in {line}"
            )
        invoke = _parse_u32(fields[1]) == 1
        group = _parse_u32(fields[2]) == 1
        length = _parse_u32(fields[3])
        self.category_id(fields[0])
        self._category_definitions.append(CategoryData(invoke, group, length))

    def build(self) -> CharacterDefinitions:
        # Ids are allocated densely in insertion order, so the dict order is the id order.
        category_names = list(self._category_index)
        boundaries = sorted(
            {bound for low, high, _ in self._char_ranges for bound in (low, high + 1)}
        )
        mapping = LookupTable.from_fn(boundaries, self._lookup_categories)
        return CharacterDefinitions(list(self._category_definitions), category_names, mapping)