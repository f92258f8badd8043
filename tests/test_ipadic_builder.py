import struct
from pathlib import Path

import pytest

from morphlattice.binfmt import Decoder
from morphlattice.compression import CompressedData, decompress
from morphlattice.dictionary import char_def, connection, load_dictionary, unknown_dict
from morphlattice.errors import LinderaError, LinderaErrorKind
from morphlattice.ipadic_builder import IpadicBuilder
from morphlattice.user_dictionary import UserDictionary

CHAR_DEF = """\
# character categories
DEFAULT 0 1 0
HIRAGANA 0 1 2
KATAKANA 1 1 2
KANJI 0 0 2

0x3041..0x3096 HIRAGANA
0x30A1..0x30FA KATAKANA
0x4E00..0x9FA5 KANJI
"""

UNK_DEF = """\
DEFAULT,5,5,4769,記号,一般,*,*,*,*,*
HIRAGANA,2,2,3000,名詞,一般,*,*,*,*,*
KATAKANA,3,3,2500,名詞,一般,*,*,*,*,*
KANJI,4,4,2000,名詞,一般,*,*,*,*,*
"""

MATRIX_DEF = "2 2\n0 0 -5\n0 1 7\n1 0 3\n1 1 -2\n"

ROWS_A = [
    "すもも,0,0,3000,名詞,一般,*,*,*,*,すもも,スモモ,スモモ",
    "すも,1,1,500,名詞,一般,*,*,*,*,すも,スモ,スモ",
]
ROWS_B = [
    "テスト,1,1,-1000,名詞,固有名詞,一般,*,*,*,テスト,テスト,テスト",
]

OUTPUT_FILES = {
    "char_def.bin",
    "unk.bin",
    "dict.da",
    "dict.vals",
    "dict.words",
    "dict.wordsidx",
    "matrix.mtx",
}


def write_source(directory: Path, rows_a=ROWS_A, rows_b=ROWS_B, matrix=MATRIX_DEF) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "char.def").write_bytes(CHAR_DEF.encode("euc_jp"))
    (directory / "unk.def").write_bytes(UNK_DEF.encode("euc_jp"))
    (directory / "matrix.def").write_bytes(matrix.encode("euc_jp"))
    (directory / "a.csv").write_bytes(("\n".join(rows_a) + "\n").encode("euc_jp"))
    (directory / "b.csv").write_bytes(("\n".join(rows_b) + "\n").encode("euc_jp"))
    return directory


def word_detail(words_idx: bytes, words: bytes, index: int) -> list[str]:
    (offset,) = struct.unpack_from("<I", words_idx, index * 4)
    return Decoder(words[offset:]).string_list()


@pytest.fixture
def built(tmp_path):
    source = write_source(tmp_path / "src")
    output = tmp_path / "out"
    IpadicBuilder().build_dictionary(source, output)
    return output


def test_build_dictionary_writes_every_file(built):
    assert {path.name for path in built.iterdir()} == OUTPUT_FILES


def test_prefix_lookup_finds_every_known_prefix(built):
    dictionary = load_dictionary(built)
    text = "すももも"
    results = list(dictionary.prefix_dict.prefix(text))
    assert len(results) == 2
    surfaces = set()
    for length, entry in results:
        surface = text.encode("utf-8")[:length].decode("utf-8")
        detail = word_detail(dictionary.words_idx_data, dictionary.words_data, entry.word_id.index)
        assert detail[6] == surface
        assert entry.word_id.is_system
        surfaces.add(surface)
    assert surfaces == {"すも", "すもも"}
    assert {entry.word_cost for _, entry in results} == {500, 3000}


def test_word_details_are_the_columns_after_the_costs(built):
    dictionary = load_dictionary(built)
    for row in ROWS_A + ROWS_B:
        fields = row.split(",")
        matches = [
            entry
            for length, entry in dictionary.prefix_dict.prefix(fields[0])
            if length == len(fields[0].encode("utf-8"))
        ]
        assert len(matches) == 1
        entry = matches[0]
        assert entry.word_cost == int(fields[3])
        assert entry.cost_id == int(fields[1])
        detail = word_detail(dictionary.words_idx_data, dictionary.words_data, entry.word_id.index)
        assert detail == fields[4:]


def test_duplicate_surfaces_share_one_trie_key(tmp_path):
    rows = ROWS_A + ["すも,0,0,42,動詞,自立,*,*,*,*,すも,スモ,スモ"]
    source = write_source(tmp_path / "src", rows_a=rows)
    output = tmp_path / "out"
    IpadicBuilder().build_dictionary(source, output)
    dictionary = load_dictionary(output)
    entries = [entry for length, entry in dictionary.prefix_dict.prefix("すも") if length == 6]
    assert sorted(entry.word_cost for entry in entries) == [42, 500]
    assert len({entry.word_id.index for entry in entries}) == 2


def test_cost_matrix_holds_the_given_costs(built):
    matrix = connection(built)
    assert matrix.backward_size == 2
    assert matrix.cost(0, 0) == -5
    assert matrix.cost(0, 1) == 7
    assert matrix.cost(1, 0) == 3
    assert matrix.cost(1, 1) == -2


def test_missing_matrix_cells_hold_the_maximum_cost(tmp_path):
    source = write_source(tmp_path / "src", matrix="2 2\n0 0 1\n")
    output = tmp_path / "out"
    IpadicBuilder().build_dictionary(source, output)
    matrix = connection(output)
    assert matrix.cost(0, 0) == 1
    assert matrix.cost(1, 1) == 32767


def test_character_definitions_are_written(built):
    definitions = char_def(built)
    (hiragana,) = definitions.lookup_categories("あ")
    assert definitions.category_name(hiragana) == "HIRAGANA"
    (default,) = definitions.lookup_categories("A")
    assert definitions.category_name(default) == "DEFAULT"
    (katakana,) = definitions.lookup_categories("テ")
    assert definitions.lookup_definition(katakana).invoke is True


def test_unknown_dictionary_is_written(built):
    definitions = char_def(built)
    unknown = unknown_dict(built)
    katakana = definitions.categories().index("KATAKANA")
    (word_id,) = unknown.lookup_word_ids(katakana)
    entry = unknown.word_entry(word_id)
    assert entry.word_cost == 2500
    assert entry.cost_id == 3
    assert entry.word_id.is_unknown()


def test_look_alike_characters_are_normalized(tmp_path):
    source = write_source(tmp_path / "src")
    row = "ア\uff5eイ,1,1,100,記号,一般,*,*,*,*,ア\uff5eイ,*,*\n"
    (source / "c.csv").write_bytes(b"\xef\xbb\xbf" + row.encode("utf-8"))
    output = tmp_path / "out"
    IpadicBuilder().build_dictionary(source, output)
    dictionary = load_dictionary(output)
    (result,) = list(dictionary.prefix_dict.prefix("ア\u301cイ"))
    detail = word_detail(dictionary.words_idx_data, dictionary.words_data, result[1].word_id.index)
    assert detail[6] == "ア\u301cイ"
    assert list(dictionary.prefix_dict.prefix("ア\uff5eイ")) == []


def test_invalid_word_cost_is_a_parse_error(tmp_path):
    rows = ["すもも,0,0,cheap,名詞,一般,*,*,*,*,すもも,スモモ,スモモ"]
    source = write_source(tmp_path / "src", rows_a=rows)
    with pytest.raises(LinderaError) as info:
        IpadicBuilder().build_dictionary(source, tmp_path / "out")
    assert info.value.kind is LinderaErrorKind.PARSE
    assert "word_cost" in str(info.value)


def test_word_cost_out_of_range_is_a_parse_error(tmp_path):
    rows = ["すもも,0,0,40000,名詞,一般,*,*,*,*,すもも,スモモ,スモモ"]
    source = write_source(tmp_path / "src", rows_a=rows)
    with pytest.raises(LinderaError) as info:
        IpadicBuilder().build_dictionary(source, tmp_path / "out")
    assert info.value.kind is LinderaErrorKind.PARSE


def test_uneven_records_are_a_content_error(tmp_path):
    rows = ROWS_A + ["すもも,0,0,3000,名詞"]
    source = write_source(tmp_path / "src", rows_a=rows)
    with pytest.raises(LinderaError) as info:
        IpadicBuilder().build_dictionary(source, tmp_path / "out")
    assert info.value.kind is LinderaErrorKind.CONTENT


def test_empty_matrix_is_a_content_error(tmp_path):
    source = write_source(tmp_path / "src", matrix="")
    with pytest.raises(LinderaError) as info:
        IpadicBuilder().build_dictionary(source, tmp_path / "out")
    assert info.value.kind is LinderaErrorKind.CONTENT


def test_non_numeric_matrix_is_a_parse_error(tmp_path):
    source = write_source(tmp_path / "src", matrix="2 2\n0 x 1\n")
    with pytest.raises(LinderaError) as info:
        IpadicBuilder().build_dictionary(source, tmp_path / "out")
    assert info.value.kind is LinderaErrorKind.PARSE


def test_missing_char_def_is_an_io_error(tmp_path):
    source = write_source(tmp_path / "src")
    (source / "char.def").unlink()
    with pytest.raises(LinderaError) as info:
        IpadicBuilder().build_dictionary(source, tmp_path / "out")
    assert info.value.kind is LinderaErrorKind.IO


def test_compressed_files_decompress_to_the_plain_ones(tmp_path):
    source = write_source(tmp_path / "src")
    plain = tmp_path / "plain"
    packed = tmp_path / "packed"
    IpadicBuilder().build_dictionary(source, plain)
    IpadicBuilder(compress=True).build_dictionary(source, packed)
    for name in OUTPUT_FILES:
        container = CompressedData.from_bytes((packed / name).read_bytes())
        assert decompress(container) == (plain / name).read_bytes()


def test_simple_user_dictionary(tmp_path):
    source = tmp_path / "user.csv"
    source.write_text("東京スカイツリー,カスタム名詞,トウキョウスカイツリー\n", encoding="utf-8")
    user = IpadicBuilder().build_user_dict(source)
    ((length, entry),) = list(user.prefix_dict.prefix("東京スカイツリーの"))
    assert length == len("東京スカイツリー".encode("utf-8"))
    assert entry.word_cost == -10000
    assert entry.cost_id == 0
    assert entry.word_id.is_system is False
    assert word_detail(user.words_idx_data, user.words_data, entry.word_id.index) == [
        "カスタム名詞",
        "*",
        "*",
        "*",
        "*",
        "*",
        "東京スカイツリー",
        "トウキョウスカイツリー",
        "*",
    ]


def test_detailed_user_dictionary(tmp_path):
    fields = "とうきょう,1285,1285,-3000,名詞,固有名詞,地域,一般,*,*,東京,トウキョウ,トーキョー"
    source = tmp_path / "user.csv"
    source.write_text(fields + "\n", encoding="utf-8")
    user = IpadicBuilder().build_user_dict(source)
    ((_, entry),) = list(user.prefix_dict.prefix("とうきょう"))
    parts = fields.split(",")
    assert entry.word_cost == int(parts[3])
    assert entry.cost_id == int(parts[1])
    assert word_detail(user.words_idx_data, user.words_data, entry.word_id.index) == parts[4:]


def test_user_dictionary_with_wrong_field_count(tmp_path):
    source = tmp_path / "user.csv"
    source.write_text("とうきょう,1285,1285,-3000,名詞\n", encoding="utf-8")
    with pytest.raises(LinderaError) as info:
        IpadicBuilder().build_user_dict(source)
    assert info.value.kind is LinderaErrorKind.CONTENT


def test_user_dictionary_with_bad_word_cost(tmp_path):
    source = tmp_path / "user.csv"
    source.write_text(
        "とうきょう,1285,1285,high,名詞,固有名詞,地域,一般,*,*,東京,トウキョウ,トーキョー\n",
        encoding="utf-8",
    )
    with pytest.raises(LinderaError) as info:
        IpadicBuilder().build_user_dict(source)
    assert info.value.kind is LinderaErrorKind.PARSE


def test_build_user_dictionary_round_trips_through_file(tmp_path):
    source = tmp_path / "user.csv"
    source.write_text(
        "東京スカイツリー,カスタム名詞,トウキョウスカイツリー\n"
        "東武スカイツリーライン,カスタム名詞,トウブスカイツリーライン\n",
        encoding="utf-8",
    )
    output = tmp_path / "nested" / "user.bin"
    builder = IpadicBuilder()
    builder.build_user_dictionary(source, output)
    assert UserDictionary.load(output.read_bytes()) == builder.build_user_dict(source)