[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "morphlattice"
version = "0.17.0"
description = "Morphological analysis core: dictionary building, prefix lookup and Viterbi lattice search."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "morphological-analysis",
    "dictionary",
    "double-array-trie",
    "viterbi",
    "ipadic",
    "cc-cedict",
    "japanese",
    "chinese",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Natural Language :: Japanese",
    "Natural Language :: Chinese (Simplified)",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Linguistic",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
morphlattice-ipadic-builder = "morphlattice.ipadic_cli:main"
morphlattice-cc-cedict-builder = "morphlattice.cc_cedict_cli:main"

[tool.hatch.build.targets.wheel]
packages = ["morphlattice"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
