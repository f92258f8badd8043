"""The common shape of builders that turn dictionary sources into binary files."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from pathlib import Path

from .character_definition import CharacterDefinitions
from .errors import LinderaErrorKind
from .user_dictionary import UserDictionary


class DictionaryBuilder(ABC):
    """Builds a system dictionary directory and user dictionary files."""

    def build_dictionary(
        self, input_dir: str | os.PathLike[str], output_dir: str | os.PathLike[str]
    ) -> None:
        """Build every dictionary file from ``input_dir`` into ``output_dir``."""
        try:
            os.makedirs(output_dir, exist_ok=True)
        except OSError as err:
            raise LinderaErrorKind.IO.with_error(err) from err
        chardef = self.build_chardef(input_dir, output_dir)
        self.build_unk(input_dir, chardef, output_dir)
        self.build_dict(input_dir, output_dir)
        self.build_cost_matrix(input_dir, output_dir)

    def build_user_dictionary(
        self, input_file: str | os.PathLike[str], output_file: str | os.PathLike[str]
    ) -> None:
        """Build a user dictionary from ``input_file`` and write it to ``output_file``."""
        output_path = Path(output_file)
        parent = output_path.parent
        if parent == output_path:
            raise LinderaErrorKind.IO.with_error(
                "failed to get parent directory of output file"
            )
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            raise LinderaErrorKind.IO.with_error(err) from err

        data = self.build_user_dict(input_file).to_bytes()
        try:
            output_path.write_bytes(data)
        except OSError as err:
            raise LinderaErrorKind.IO.with_error(err) from err

    @abstractmethod
    def build_chardef(
        self, input_dir: str | os.PathLike[str], output_dir: str | os.PathLike[str]
    ) -> CharacterDefinitions:
        """Build the character definitions file and return the definitions."""

    @abstractmethod
    def build_unk(
        self,
        input_dir: str | os.PathLike[str],
        chardef: CharacterDefinitions,
        output_dir: str | os.PathLike[str],
    ) -> None:
        """Build the unknown word dictionary file."""

    @abstractmethod
    def build_dict(
        self, input_dir: str | os.PathLike[str], output_dir: str | os.PathLike[str]
    ) -> None:
        """Build the word trie, entry and detail files."""

    @abstractmethod
    def build_cost_matrix(
        self, input_dir: str | os.PathLike[str], output_dir: str | os.PathLike[str]
    ) -> None:
        """Build the connection cost matrix file."""

    @abstractmethod
    def build_user_dict(self, input_file: str | os.PathLike[str]) -> UserDictionary:
        """Build a user dictionary in memory from ``input_file``."""