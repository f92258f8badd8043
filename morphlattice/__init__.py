"""Dictionary building, prefix lookup and Viterbi lattice search for morphological analysis."""

__version__ = "0.17.0"