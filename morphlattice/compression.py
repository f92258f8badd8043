"""Optional compression of dictionary files and its container format."""

from __future__ import annotations

import lzma
from dataclasses import dataclass
from enum import Enum

from .binfmt import Decoder, Encoder
from .errors import LinderaErrorKind


class AlgorithmKind(Enum):
    """Compression algorithms, numbered as stored on disk."""

    BZIP = 0
    LZ77 = 1
    LZMA = 2
    RAW = 3


@dataclass(frozen=True)
class Algorithm:
    """An algorithm; LZMA carries a preset level, the others carry none."""

    kind: AlgorithmKind
    preset: int | None = None

    def __post_init__(self) -> None:
        if self.kind is AlgorithmKind.LZMA and self.preset is None:
            raise ValueError("LZMA needs a preset")
        if self.kind is not AlgorithmKind.LZMA and self.preset is not None:
            raise ValueError(f"{self.kind.name} takes no preset")


@dataclass(frozen=True)
class CompressedData:
    """Payload bytes together with the algorithm that produced them."""

    algorithm: Algorithm
    data: bytes

    def to_bytes(self) -> bytes:
        encoder = Encoder().u32(self.algorithm.kind.value)
        if self.algorithm.preset is not None:
            encoder.u32(self.algorithm.preset)
        return encoder.raw_bytes(self.data).to_bytes()

    @classmethod
    def from_bytes(cls, data: bytes) -> "CompressedData":
        decoder = Decoder(data)
        tag = decoder.u32()
        try:
            kind = AlgorithmKind(tag)
        except ValueError as err:
            raise LinderaErrorKind.DESERIALIZE.with_error(
                f"unknown compression algorithm tag {tag}"
            ) from err
        preset = decoder.u32() if kind is AlgorithmKind.LZMA else None
        return cls(Algorithm(kind, preset), decoder.raw_bytes())


def compress(data: bytes, algorithm: Algorithm) -> CompressedData:
    """Compress ``data`` with ``algorithm``."""
    if algorithm.kind is AlgorithmKind.LZMA:
        try:
            output = lzma.compress(bytes(data), format=lzma.FORMAT_XZ, preset=algorithm.preset)
        except (lzma.LZMAError, ValueError) as err:
            raise LinderaErrorKind.COMPRESS.with_error(err) from err
        return CompressedData(algorithm, output)
    if algorithm.kind is AlgorithmKind.RAW:
        return CompressedData(algorithm, bytes(data))
    raise LinderaErrorKind.COMPRESS.with_error(
        f"unsupported compression algorithm: {algorithm.kind.name}"
    )


def decompress(data: CompressedData) -> bytes:
    """Recover the original bytes of ``data``."""
    kind = data.algorithm.kind
    if kind is AlgorithmKind.LZMA:
        try:
            return lzma.decompress(data.data, format=lzma.FORMAT_XZ)
        except lzma.LZMAError as err:
            raise LinderaErrorKind.DECODE.with_error(err) from err
    if kind is AlgorithmKind.RAW:
        return data.data
    raise LinderaErrorKind.DECODE.with_error(f"unsupported compression algorithm: {kind.name}")