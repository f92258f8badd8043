# morphlattice

Building blocks for dictionary-based morphological analysis of Japanese
and Chinese text:

- builders that turn MeCab-style dictionary sources (IPADIC, CC-CEDICT)
  into binary dictionary files (`morphlattice.ipadic_builder`,
  `morphlattice.cc_cedict_builder`),
- a double-array trie for exact and common-prefix lookup of surface
  forms (`morphlattice.doublearray`, `morphlattice.prefix_dict`),
- character category definitions and unknown-word entries
  (`morphlattice.character_definition`, `morphlattice.unknown_dictionary`),
- a connection cost matrix and a Viterbi lattice that finds the
  lowest-cost segmentation of a text (`morphlattice.connection`,
  `morphlattice.viterbi`).

The package has no runtime dependencies beyond the standard library.

## Installation

```
pip install morphlattice
```

## Building a system dictionary

A dictionary source directory holds `char.def`, `unk.def`, `matrix.def`
and one or more `*.csv` lexicon files. IPADIC sources are read as
EUC-JP; CC-CEDICT sources as UTF-8.

```
morphlattice-ipadic-builder --dict-src ./mecab-ipadic --dict-dest ./ipadic-out
morphlattice-cc-cedict-builder --dict-src ./cc-cedict-mecab --dict-dest ./cc-cedict-out
```

The destination directory is created if needed and receives
`char_def.bin`, `unk.bin`, `dict.da`, `dict.vals`, `dict.words`,
`dict.wordsidx` and `matrix.mtx`.

The IPADIC builder stops at the first lexicon row whose cost or context
id cannot be parsed; the CC-CEDICT builder logs a warning and leaves
such a row out of the trie.

## Building a user dictionary

A user dictionary is a UTF-8 CSV file. Each row is either a simple
entry of three fields:

```
surface,part-of-speech,reading
```

(for CC-CEDICT the third field is the pinyin), or a detailed entry in
the same layout as the system lexicon (13 or more fields for IPADIC,
12 or more for CC-CEDICT). Simple entries get the cost -10000 and the
context id 0.

```
morphlattice-ipadic-builder --user-dict-src ./userdic.csv --user-dict-dest ./userdic.bin
```

Both commands accept the short options `-s`, `-d`, `-S` and `-D`.
`--dict-dest` is required with `--dict-src`, and `--user-dict-dest`
with `--user-dict-src`. On failure the command prints the error to
standard error and exits with status 1.

## Using the library

```python
from morphlattice.dictionary import load_dictionary
from morphlattice.viterbi import Lattice, Mode

dictionary = load_dictionary("./ipadic-out")
mode = Mode.from_str("normal")  # or "decompose"

text = "東京都に住む"
lattice = Lattice()
lattice.set_text(
    dictionary.prefix_dict,
    None,  # or a user dictionary's prefix_dict
    dictionary.char_definitions,
    dictionary.unknown_dictionary,
    text,
    mode,
)
lattice.calculate_path_costs(dictionary.cost_matrix, mode)

for start, word_id in lattice.tokens_offset():
    print(start, word_id.index, word_id.is_unknown())
```

`tokens_offset()` returns, for each token on the best path, the byte
offset in the UTF-8 text where it starts, together with its `WordId`.
A user dictionary file is read back with
`UserDictionary.load(data)`; pass its `prefix_dict` as the second
argument of `set_text`.

Dictionaries are built from Python with `IpadicBuilder` or
`CcCedictBuilder`, whose `build_dictionary(input_dir, output_dir)` and
`build_user_dictionary(input_file, output_file)` do the same work as
the commands above. Constructed with `compress=True`, a builder writes
each system dictionary file LZMA-compressed inside a `CompressedData`
container (see `morphlattice.compression`); `load_dictionary` reads
only uncompressed files, so decompress such files first.

`dict.wordsidx` holds a little-endian u32 offset per word into
`dict.words`, where each word's details are a list of strings readable
with `morphlattice.binfmt.Decoder(...).string_list()`.

Errors are raised as `LinderaError`, whose `kind` is a
`LinderaErrorKind` such as `IO`, `PARSE` or `CONTENT`.

## What the package does not do

There is no tokenizer command that reads text and prints tokens, and
no class that turns lattice offsets into token strings with their word
details; that step is left to the caller. No ready-built dictionaries
are included: a dictionary has to be built from its sources first.