"""Word identifiers and the fixed-size entries stored in dictionaries."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import ClassVar

from .binfmt import Decoder, Encoder
from .errors import LinderaErrorKind

U32_MAX = 0xFFFFFFFF

_ENTRY_FORMAT = struct.Struct("<IhH")


@dataclass(frozen=True)
class WordId:
    """Index of a word and whether it comes from the system dictionary."""

    index: int = U32_MAX
    is_system: bool = True

    def is_unknown(self) -> bool:
        return self.index == U32_MAX

    def encode(self, encoder: Encoder) -> None:
        encoder.u32(self.index).boolean(self.is_system)

    @classmethod
    def decode(cls, decoder: Decoder) -> "WordId":
        return cls(decoder.u32(), decoder.boolean())


@dataclass(frozen=True)
class WordEntry:
    """A word id with its cost and its connection context id."""

    SERIALIZED_LEN: ClassVar[int] = 8

    word_id: WordId = field(default_factory=WordId)
    word_cost: int = 0
    cost_id: int = 0

    def left_id(self) -> int:
        return self.cost_id

    def right_id(self) -> int:
        return self.cost_id

    def serialize(self) -> bytes:
        """Return the 8-byte packed form (word index, cost, context id)."""
        try:
            return _ENTRY_FORMAT.pack(self.word_id.index, self.word_cost, self.cost_id)
        except struct.error as err:
            raise LinderaErrorKind.SERIALIZE.with_error(err) from err

    @classmethod
    def deserialize(cls, data: bytes, is_system_entry: bool) -> "WordEntry":
        """Read an entry from the first 8 bytes of ``data``."""
        try:
            index, word_cost, cost_id = _ENTRY_FORMAT.unpack_from(data, 0)
        except struct.error as err:
            raise LinderaErrorKind.DESERIALIZE.with_error(err) from err
        return cls(WordId(index, is_system_entry), word_cost, cost_id)

    def encode(self, encoder: Encoder) -> None:
        """Write the full entry, including the system flag."""
        self.word_id.encode(encoder)
        encoder.i16(self.word_cost).u16(self.cost_id)

    @classmethod
    def decode(cls, decoder: Decoder) -> "WordEntry":
        word_id = WordId.decode(decoder)
        return cls(word_id, decoder.i16(), decoder.u16())