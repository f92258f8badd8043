"""A user dictionary: prefix trie plus word details."""

from __future__ import annotations

from dataclasses import dataclass

from .binfmt import Decoder, Encoder
from .prefix_dict import PrefixDict


@dataclass
class UserDictionary:
    """Words supplied by the user, stored alongside the system dictionary."""

    prefix_dict: PrefixDict
    words_idx_data: bytes
    words_data: bytes

    def to_bytes(self) -> bytes:
        encoder = Encoder()
        self.prefix_dict.encode(encoder)
        encoder.raw_bytes(self.words_idx_data).raw_bytes(self.words_data)
        return encoder.to_bytes()

    @classmethod
    def load(cls, user_dict_data: bytes) -> "UserDictionary":
        decoder = Decoder(user_dict_data)
        prefix_dict = PrefixDict.decode(decoder)
        return cls(prefix_dict, decoder.raw_bytes(), decoder.raw_bytes())