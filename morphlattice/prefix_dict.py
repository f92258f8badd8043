"""Prefix lookup of word entries through a double-array trie."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from .binfmt import Decoder, Encoder
from .doublearray import DoubleArray
from .word_entry import WordEntry

_LENGTH_BITS = 5
_LENGTH_MASK = (1 << _LENGTH_BITS) - 1


@dataclass
class PrefixDict:
    """Trie of surfaces whose values point into packed word entries.

    Each trie value holds ``(offset << 5) | count``: ``count`` entries
    starting at entry number ``offset`` in ``vals_data``.
    """

    da: DoubleArray
    vals_data: bytes
    is_system: bool

    @classmethod
    def from_static_slice(cls, da_data: bytes, vals_data: bytes) -> "PrefixDict":
        return cls(DoubleArray.from_bytes(da_data), bytes(vals_data), True)

    def prefix(self, s: str) -> Iterator[tuple[int, WordEntry]]:
        """Yield ``(prefix_length_in_bytes, entry)`` for every word that prefixes ``s``."""
        size = WordEntry.SERIALIZED_LEN
        for offset_len, prefix_len in self.da.common_prefix_search(s):
            count = offset_len & _LENGTH_MASK
            start = (offset_len >> _LENGTH_BITS) * size
            for position in range(start, start + count * size, size):
                yield prefix_len, WordEntry.deserialize(
                    self.vals_data[position:position + size], self.is_system
                )

    def encode(self, encoder: Encoder) -> None:
        encoder.raw_bytes(self.da.to_bytes()).raw_bytes(self.vals_data).boolean(self.is_system)

    @classmethod
    def decode(cls, decoder: Decoder) -> "PrefixDict":
        da = DoubleArray.from_bytes(decoder.raw_bytes())
        vals_data = decoder.raw_bytes()
        return cls(da, vals_data, decoder.boolean())

    def to_bytes(self) -> bytes:
        encoder = Encoder()
        self.encode(encoder)
        return encoder.to_bytes()

    @classmethod
    def from_bytes(cls, data: bytes) -> "PrefixDict":
        return cls.decode(Decoder(data))