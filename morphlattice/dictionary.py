"""The system dictionary and loading it from a directory of built files."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .character_definition import CharacterDefinitions
from .connection import ConnectionCostMatrix
from .fileutil import read_file
from .prefix_dict import PrefixDict
from .unknown_dictionary import UnknownDictionary


@dataclass
class Dictionary:
    """Everything the tokenizer needs from a system dictionary."""

    prefix_dict: PrefixDict
    cost_matrix: ConnectionCostMatrix
    char_definitions: CharacterDefinitions
    unknown_dictionary: UnknownDictionary
    words_idx_data: bytes
    words_data: bytes


def _read(dir: str | os.PathLike[str], name: str) -> bytes:
    return read_file(Path(dir) / name)


def load_dictionary(path: str | os.PathLike[str]) -> Dictionary:
    """Load every part of a dictionary from the directory ``path``."""
    return Dictionary(
        prefix_dict=prefix_dict(path),
        cost_matrix=connection(path),
        char_definitions=char_def(path),
        unknown_dictionary=unknown_dict(path),
        words_idx_data=words_idx_data(path),
        words_data=words_data(path),
    )


def char_def(dir: str | os.PathLike[str]) -> CharacterDefinitions:
    return CharacterDefinitions.load(_read(dir, "char_def.bin"))


def connection(dir: str | os.PathLike[str]) -> ConnectionCostMatrix:
    return ConnectionCostMatrix.load(_read(dir, "matrix.mtx"))


def prefix_dict(dir: str | os.PathLike[str]) -> PrefixDict:
    return PrefixDict.from_static_slice(_read(dir, "dict.da"), _read(dir, "dict.vals"))


def unknown_dict(dir: str | os.PathLike[str]) -> UnknownDictionary:
    return UnknownDictionary.load(_read(dir, "unk.bin"))


def words_idx_data(dir: str | os.PathLike[str]) -> bytes:
    return _read(dir, "dict.wordsidx")


def words_data(dir: str | os.PathLike[str]) -> bytes:
    return _read(dir, "dict.words")