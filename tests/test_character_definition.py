import pytest

from morphlattice.character_definition import (
    CategoryData,
    CharacterDefinitions,
    CharacterDefinitionsBuilder,
    LookupTable,
)
from morphlattice.errors import LinderaError, LinderaErrorKind

CHAR_DEF = """\
# comment line
DEFAULT 0 1 0
SPACE 0 1 0   # trailing comment
KANJI 0 0 2
KANJINUMERIC 1 1 0

0x0020 SPACE
0x4E00..0x9FA5 KANJI
0x4E00 KANJINUMERIC
"""


def _funct(c):
    return [1] if c >= 10 else [0]


def test_lookup_table():
    table = LookupTable.from_fn([0, 10], _funct)
    for i in range(100):
        assert table.eval(i) == _funct(i)


def test_lookup_table_adds_zero_boundary():
    table = LookupTable.from_fn([10], _funct)
    assert table.boundaries == [0, 10]
    assert table.eval(3) == [0]


@pytest.fixture
def definitions():
    builder = CharacterDefinitionsBuilder()
    builder.parse(CHAR_DEF)
    return builder.build()


def _names(defs, c):
    return [defs.category_name(cid) for cid in defs.lookup_categories(c)]


def test_categories_in_id_order(definitions):
    assert definitions.categories() == ["DEFAULT", "SPACE", "KANJI", "KANJINUMERIC"]


def test_lookup_categories(definitions):
    assert _names(definitions, " ") == ["SPACE"]
    assert _names(definitions, "a") == ["DEFAULT"]
    assert _names(definitions, "一") == ["KANJI", "KANJINUMERIC"]
    assert _names(definitions, "二") == ["KANJI"]


def test_lookup_definition(definitions):
    assert definitions.lookup_definition(2) == CategoryData(False, False, 2)
    assert definitions.lookup_definition(3) == CategoryData(True, True, 0)


def test_round_trip(definitions):
    loaded = CharacterDefinitions.load(definitions.to_bytes())
    assert loaded == definitions
    assert _names(loaded, "一") == ["KANJI", "KANJINUMERIC"]


def test_category_id_allocation():
    builder = CharacterDefinitionsBuilder()
    assert builder.category_id("A") == 0
    assert builder.category_id("B") == 1
    assert builder.category_id("A") == 0


def test_surrogate_maps_to_replacement_character():
    builder = CharacterDefinitionsBuilder()
    builder.parse("DEFAULT 0 1 0\nSPACE 0 1 0\n0xD800 SPACE\n")
    defs = builder.build()
    assert _names(defs, "\ufffd") == ["SPACE"]


def test_no_default_gives_empty_list():
    builder = CharacterDefinitionsBuilder()
    builder.parse("SPACE 0 1 0\n0x0020 SPACE\n")
    defs = builder.build()
    assert defs.lookup_categories("a") == []


def test_wrong_field_count():
    builder = CharacterDefinitionsBuilder()
    with pytest.raises(LinderaError) as info:
        builder.parse("DEFAULT 0 1\n")
    assert info.value.kind is LinderaErrorKind.CONTENT


def test_bad_hex():
    builder = CharacterDefinitionsBuilder()
    with pytest.raises(LinderaError) as info:
        builder.parse("0xZZ SPACE\n")
    assert info.value.kind is LinderaErrorKind.PARSE


def test_hex_too_large():
    builder = CharacterDefinitionsBuilder()
    with pytest.raises(LinderaError) as info:
        builder.parse("0x10000 SPACE\n")
    assert info.value.kind is LinderaErrorKind.PARSE


def test_too_many_range_bounds():
    builder = CharacterDefinitionsBuilder()
    with pytest.raises(LinderaError) as info:
        builder.parse("0x0001..0x0002..0x0003 SPACE\n")
    assert info.value.kind is LinderaErrorKind.CONTENT


def test_bad_number():
    builder = CharacterDefinitionsBuilder()
    with pytest.raises(LinderaError) as info:
        builder.parse("DEFAULT x 1 0\n")
    assert info.value.kind is LinderaErrorKind.PARSE


def test_load_truncated():
    with pytest.raises(LinderaError) as info:
        CharacterDefinitions.load(b"\x01\x00")
    assert info.value.kind is LinderaErrorKind.DESERIALIZE