"""A double-array trie mapping byte strings to unsigned 32-bit values."""

from __future__ import annotations

import itertools
import struct
from collections.abc import Iterable, Iterator

from .errors import LinderaErrorKind

_FREE = -1
_U32_MAX = 0xFFFFFFFF
_UNIT = struct.Struct("<II")


def _as_bytes(key: str | bytes) -> bytes:
    return key.encode("utf-8") if isinstance(key, str) else bytes(key)


class _Builder:
    """Places trie nodes into base/check arrays.

    Child codes are ``byte + 1``; code 0 marks the end of a key, and the
    slot it leads to holds the key's value in its base.
    """

    def __init__(self) -> None:
        self.base: list[int] = [0]
        self.check: list[int] = [_FREE]
        self._next_free = 1

    def _ensure(self, size: int) -> None:
        if size > len(self.check):
            grow = size - len(self.check)
            self.base.extend([0] * grow)
            self.check.extend([_FREE] * grow)

    def _find_base(self, codes: list[int]) -> int:
        first = codes[0]
        pos = max(self._next_free, first + 1)
        while True:
            self._ensure(pos + 1)
            if self.check[pos] == _FREE:
                candidate = pos - first
                self._ensure(candidate + codes[-1] + 1)
                if all(self.check[candidate + code] == _FREE for code in codes):
                    return candidate
            pos += 1

    def run(self, entries: list[tuple[bytes, int]]) -> None:
        if not entries:
            return
        stack = [(0, entries, 0)]
        while stack:
            node, group, depth = stack.pop()

            def code_of(entry: tuple[bytes, int], depth: int = depth) -> int:
                key = entry[0]
                return key[depth] + 1 if len(key) > depth else 0

            children = [(code, list(items)) for code, items in itertools.groupby(group, key=code_of)]
            codes = [code for code, _ in children]
            base = self._find_base(codes)
            self.base[node] = base
            for code, items in children:
                self.check[base + code] = node
            for code, items in children:
                if code == 0:
                    self.base[base] = items[0][1]
                else:
                    stack.append((base + code, items, depth + 1))
            while self._next_free < len(self.check) and self.check[self._next_free] != _FREE:
                self._next_free += 1


class DoubleArray:
    """Immutable trie supporting exact and common-prefix lookups."""

    def __init__(self, base: Iterable[int] = (0,), check: Iterable[int] = (_FREE,)) -> None:
        self._base = list(base)
        self._check = list(check)
        if len(self._base) != len(self._check) or not self._base:
            raise ValueError("base and check arrays must be non-empty and of equal length")

    @classmethod
    def build(cls, keyset: Iterable[tuple[str | bytes, int]]) -> "DoubleArray":
        """Build from ``(key, value)`` pairs; keys must be unique, values u32."""
        entries = sorted((_as_bytes(key), value) for key, value in keyset)
        for (key, value), following in itertools.zip_longest(entries, entries[1:]):
            if not 0 <= value <= _U32_MAX:
                raise ValueError(f"value {value} does not fit in 32 bits")
            if following is not None and following[0] == key:
                raise ValueError(f"duplicate key {key!r}")
        builder = _Builder()
        builder.run(entries)
        return cls(builder.base, builder.check)

    def _child(self, node: int, code: int) -> int | None:
        index = self._base[node] + code
        if 0 <= index < len(self._check) and self._check[index] == node:
            return index
        return None

    def _terminal_value(self, node: int) -> int | None:
        terminal = self._child(node, 0)
        return None if terminal is None else self._base[terminal]

    def common_prefix_search(self, key: str | bytes) -> Iterator[tuple[int, int]]:
        """Yield ``(value, prefix_length_in_bytes)`` for every stored prefix of ``key``."""
        data = _as_bytes(key)
        node = 0
        for depth, byte in enumerate(data):
            value = self._terminal_value(node)
            if value is not None:
                yield value, depth
            next_node = self._child(node, byte + 1)
            if next_node is None:
                return
            node = next_node
        value = self._terminal_value(node)
        if value is not None:
            yield value, len(data)

    def exact_match_search(self, key: str | bytes) -> int | None:
        """Return the value stored for ``key``, or None."""
        node = 0
        for byte in _as_bytes(key):
            next_node = self._child(node, byte + 1)
            if next_node is None:
                return None
            node = next_node
        return self._terminal_value(node)

    def to_bytes(self) -> bytes:
        checks = (_U32_MAX if check == _FREE else check for check in self._check)
        return b"".join(_UNIT.pack(base, check) for base, check in zip(self._base, checks))

    @classmethod
    def from_bytes(cls, data: bytes) -> "DoubleArray":
        if not data or len(data) % _UNIT.size:
            raise LinderaErrorKind.DESERIALIZE.with_error(
                f"double array data has invalid length {len(data)}"
            )
        units = list(_UNIT.iter_unpack(data))
        return cls(
            (base for base, _ in units),
            (_FREE if check == _U32_MAX else check for _, check in units),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DoubleArray):
            return NotImplemented
        return self._base == other._base and self._check == other._check

    __hash__ = None  # type: ignore[assignment]