"""Word lattice construction and best-path search over dictionary costs."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from enum import Enum, auto

from .character_definition import CharacterDefinitions
from .connection import ConnectionCostMatrix
from .errors import LinderaErrorKind
from .prefix_dict import PrefixDict
from .unknown_dictionary import UnknownDictionary
from .word_entry import WordEntry, WordId

EOS_NODE = 1

_I32_MAX = 2**31 - 1
_KANJI_FIRST = 19968
_KANJI_LAST = 40879


def _is_kanji(c: str) -> bool:
    return _KANJI_FIRST <= ord(c) <= _KANJI_LAST


def _is_kanji_only(s: str) -> bool:
    return all(_is_kanji(c) for c in s)


@dataclass(frozen=True)
class Penalty:
    """Extra cost for long words, used when decomposing compounds."""

    kanji_penalty_length_threshold: int = 2
    kanji_penalty_length_penalty: int = 3000
    other_penalty_length_threshold: int = 7
    other_penalty_length_penalty: int = 1700

    def penalty(self, edge: "Edge") -> int:
        num_chars = edge.num_chars()
        if num_chars <= self.kanji_penalty_length_threshold:
            return 0
        if edge.kanji_only:
            return (
                num_chars - self.kanji_penalty_length_threshold
            ) * self.kanji_penalty_length_penalty
        if num_chars > self.other_penalty_length_threshold:
            return (
                num_chars - self.other_penalty_length_threshold
            ) * self.other_penalty_length_penalty
        return 0


@dataclass(frozen=True)
class Mode:
    """Tokenization mode: normal when ``penalty`` is None, decompose otherwise."""

    penalty: Penalty | None = None

    @classmethod
    def from_str(cls, mode: str) -> "Mode":
        if mode == "normal":
            return cls()
        if mode == "decompose":
            return cls(Penalty())
        raise LinderaErrorKind.MODE_ERROR.with_error(f"Invalid mode: {mode}")

    def is_search(self) -> bool:
        return self.penalty is not None

    def penalty_cost(self, edge: "Edge") -> int:
        return 0 if self.penalty is None else self.penalty.penalty(edge)


class EdgeType(Enum):
    """Where the word behind an edge came from."""

    KNOWN = auto()
    UNKNOWN = auto()
    USER = auto()
    INSERTED = auto()


@dataclass
class Edge:
    """A candidate word spanning byte offsets ``start_index`` to ``stop_index``."""

    edge_type: EdgeType = EdgeType.KNOWN
    word_entry: WordEntry = field(default_factory=WordEntry)
    path_cost: int = 0
    left_edge: int | None = None
    start_index: int = 0
    stop_index: int = 0
    kanji_only: bool = False

    def num_chars(self) -> int:
        """Approximate character count, assuming three bytes per character."""
        return (self.stop_index - self.start_index) // 3


class Lattice:
    """All candidate words of a text and the best path through them."""

    def __init__(self) -> None:
        self._edges: list[Edge] = []
        self._starts_at: list[list[int]] = []
        self._ends_at: list[list[int]] = []

    def clear(self) -> None:
        for edge_ids in self._starts_at:
            edge_ids.clear()
        for edge_ids in self._ends_at:
            edge_ids.clear()
        self._edges.clear()

    def _reset(self, text_len: int) -> None:
        self._edges = []
        self._starts_at = [[] for _ in range(text_len + 1)]
        self._ends_at = [[] for _ in range(text_len + 1)]

    def _add_edge(self, edge: Edge) -> int:
        self._edges.append(edge)
        return len(self._edges) - 1

    def _add_edge_in_lattice(self, edge: Edge) -> None:
        edge_id = self._add_edge(edge)
        self._starts_at[edge.start_index].append(edge_id)
        self._ends_at[edge.stop_index].append(edge_id)

    def edge(self, edge_id: int) -> Edge:
        return self._edges[edge_id]

    def set_text(
        self,
        prefix_dict: PrefixDict,
        user_dict: PrefixDict | None,
        char_definitions: CharacterDefinitions,
        unknown_dictionary: UnknownDictionary,
        text: str,
        search_mode: Mode,
    ) -> None:
        """Fill the lattice with every known and unknown word candidate of ``text``."""
        encoded = text.encode("utf-8")
        length = len(encoded)
        self._reset(length)

        start_edge_id = self._add_edge(Edge())
        end_edge_id = self._add_edge(Edge())
        self._ends_at[0].append(start_edge_id)
        self._starts_at[length].append(end_edge_id)

        char_positions: dict[int, int] = {}
        offset = 0
        for position, char in enumerate(text):
            char_positions[offset] = position
            offset += len(char.encode("utf-8"))

        dictionaries = [d for d in (user_dict, prefix_dict) if d is not None]
        unknown_word_end: int | None = None

        for start in range(length):
            if not self._ends_at[start]:
                continue
            position = char_positions.get(start)
            if position is None:
                raise LinderaErrorKind.CONTENT.with_error(
                    f"a word ends inside a character at byte {start}"
                )
            suffix = text[position:]

            found = False
            for dictionary in dictionaries:
                for prefix_len, word_entry in dictionary.prefix(suffix):
                    stop = start + prefix_len
                    self._add_edge_in_lattice(
                        Edge(
                            edge_type=EdgeType.KNOWN,
                            word_entry=word_entry,
                            path_cost=_I32_MAX,
                            left_edge=None,
                            start_index=start,
                            stop_index=stop,
                            kanji_only=_is_kanji_only(encoded[start:stop].decode("utf-8")),
                        )
                    )
                    found = True

            # Normal mode does not start a new unknown word inside the previous one.
            if search_mode.is_search() or unknown_word_end is None or unknown_word_end <= start:
                categories = char_definitions.lookup_categories(suffix[0])
                for category_ord, category in enumerate(categories):
                    unknown_word_end = self._process_unknown_word(
                        char_definitions,
                        unknown_dictionary,
                        category,
                        category_ord,
                        unknown_word_end,
                        start,
                        suffix,
                        found,
                    )

    def _process_unknown_word(
        self,
        char_definitions: CharacterDefinitions,
        unknown_dictionary: UnknownDictionary,
        category: int,
        category_ord: int,
        unknown_word_index: int | None,
        start: int,
        suffix: str,
        found: bool,
    ) -> int | None:
        category_data = char_definitions.lookup_definition(category)
        if not (category_data.invoke or not found):
            return unknown_word_index

        num_chars = 1
        if category_data.group:

            def same_category(c: str) -> bool:
                categories = char_definitions.lookup_categories(c)
                return len(categories) > category_ord and categories[category_ord] == category

            num_chars += sum(1 for _ in itertools.takewhile(same_category, suffix[1:]))

        unknown_word = suffix[:num_chars]
        stop = start + len(unknown_word.encode("utf-8"))
        kanji_only = _is_kanji_only(unknown_word)
        for word_id in unknown_dictionary.lookup_word_ids(category):
            self._add_edge_in_lattice(
                Edge(
                    edge_type=EdgeType.UNKNOWN,
                    word_entry=unknown_dictionary.word_entry(word_id),
                    path_cost=_I32_MAX,
                    left_edge=None,
                    start_index=start,
                    stop_index=stop,
                    kanji_only=kanji_only,
                )
            )
        return stop

    def calculate_path_costs(self, cost_matrix: ConnectionCostMatrix, mode: Mode) -> None:
        """Link every edge to its cheapest left neighbour."""
        for left_edge_ids, right_edge_ids in zip(self._ends_at, self._starts_at):
            if not left_edge_ids:
                continue
            for right_edge_id in right_edge_ids:
                right_entry = self._edges[right_edge_id].word_entry

                def path_cost(left_edge_id: int) -> int:
                    left = self._edges[left_edge_id]
                    return (
                        left.path_cost
                        + cost_matrix.cost(left.word_entry.right_id(), right_entry.left_id())
                        + mode.penalty_cost(left)
                    )

                best_left = min(left_edge_ids, key=path_cost)
                right = self._edges[right_edge_id]
                right.left_edge = best_left
                right.path_cost = right_entry.word_cost + path_cost(best_left)

    def tokens_offset(self) -> list[tuple[int, WordId]]:
        """Return ``(byte_offset, word_id)`` for each word on the best path."""
        offsets: list[tuple[int, WordId]] = []
        edge = self.edge(EOS_NODE)
        while edge.left_edge is not None:
            offsets.append((edge.start_index, edge.word_entry.word_id))
            edge = self.edge(edge.left_edge)
        offsets.reverse()
        if offsets:
            offsets.pop()
        return offsets