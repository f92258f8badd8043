import pytest

from morphlattice.binfmt import Decoder, Encoder
from morphlattice.errors import LinderaError
from morphlattice.word_entry import WordEntry, WordId


def test_word_entry():
    word_entry = WordEntry(word_id=WordId(1, True), word_cost=-17, cost_id=1411)
    buffer = word_entry.serialize()
    assert WordEntry.SERIALIZED_LEN == len(buffer)
    word_entry2 = WordEntry.deserialize(buffer, True)
    assert word_entry == word_entry2


def test_deserialize_takes_system_flag_from_caller():
    entry = WordEntry(WordId(7, True), 100, 3)
    restored = WordEntry.deserialize(entry.serialize(), False)
    assert restored.word_id == WordId(7, False)
    assert restored.word_cost == 100


def test_default_word_id_is_unknown_system():
    word_id = WordId()
    assert word_id.is_unknown()
    assert word_id.is_system


def test_known_word_id_is_not_unknown():
    assert not WordId(0, True).is_unknown()


def test_left_and_right_id_are_cost_id():
    entry = WordEntry(WordId(2, True), -17, 1411)
    assert entry.left_id() == 1411
    assert entry.right_id() == 1411


def test_deserialize_short_data_raises():
    with pytest.raises(LinderaError):
        WordEntry.deserialize(b"\x00\x01", True)


def test_serialize_out_of_range_raises():
    with pytest.raises(LinderaError):
        WordEntry(WordId(1, True), 40000, 0).serialize()


def test_encode_decode_round_trip():
    entry = WordEntry(WordId(5, False), -17, 1411)
    encoder = Encoder()
    entry.encode(encoder)
    decoder = Decoder(encoder.to_bytes())
    assert WordEntry.decode(decoder) == entry
    assert decoder.at_end()