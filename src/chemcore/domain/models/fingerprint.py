#!/usr/bin/env python3
# src/chemcore/domain/models/fingerprint.py

"""
Domain model for fixed-size molecular fingerprints.
"""

from enum import Enum

import numpy as np

from ...exceptions import InvalidParametersError

WORD_BITS = 64


class FingerprintType(Enum):
    PATH = "path"
    ECFP2 = "ecfp2"
    ECFP4 = "ecfp4"
    ECFP6 = "ecfp6"

    @property
    def radius(self) -> int:
        """Morgan radius for ECFP types, 0 for path fingerprints."""
        return {"ecfp2": 1, "ecfp4": 2, "ecfp6": 3}.get(self.value, 0)


class Fingerprint:
    """Read-only bit vector of ``size`` bits packed into 64-bit words.

    Bit ``i`` lives in word ``i // 64`` at position ``i % 64``.
    """

    def __init__(self, fp_type: FingerprintType, size: int, words: np.ndarray):
        expected = (size + WORD_BITS - 1) // WORD_BITS
        words = np.array(words, dtype=np.uint64)
        if words.shape != (expected,):
            raise InvalidParametersError(
                f"expected {expected} words for {size} bits, got {words.shape}"
            )
        spare = expected * WORD_BITS - size
        if spare and int(words[-1]) >> (WORD_BITS - spare):
            raise InvalidParametersError(f"bits set beyond fingerprint size {size}")
        words.setflags(write=False)
        self._type = fp_type
        self._size = size
        self._words = words

    @classmethod
    def from_bits(cls, fp_type: FingerprintType, size: int, bits) -> "Fingerprint":
        """Build from an iterable of set bit positions."""
        words = np.zeros((size + WORD_BITS - 1) // WORD_BITS, dtype=np.uint64)
        for bit in bits:
            if not 0 <= bit < size:
                raise InvalidParametersError(f"bit {bit} outside fingerprint of size {size}")
            words[bit // WORD_BITS] |= np.uint64(1 << (bit % WORD_BITS))
        return cls(fp_type, size, words)

    @classmethod
    def from_hex(cls, fp_type: FingerprintType, size: int, text: str) -> "Fingerprint":
        try:
            raw = bytes.fromhex(text)
        except ValueError as e:
            raise InvalidParametersError(f"invalid fingerprint hex: {e}") from e
        if len(raw) % 8:
            raise InvalidParametersError("fingerprint hex must encode whole 64-bit words")
        words = np.frombuffer(raw, dtype="<u8").astype(np.uint64)
        return cls(fp_type, size, words)

    @property
    def type(self) -> FingerprintType:
        return self._type

    @property
    def size(self) -> int:
        return self._size

    @property
    def words(self) -> np.ndarray:
        return self._words

    def get_bit(self, bit: int) -> bool:
        if not 0 <= bit < self._size:
            raise IndexError(f"bit {bit} outside fingerprint of size {self._size}")
        word = int(self._words[bit // WORD_BITS])
        return bool((word >> (bit % WORD_BITS)) & 1)

    def bit_array(self) -> np.ndarray:
        """Bits as a boolean array of length ``size``."""
        as_bytes = self._words.astype("<u8").view(np.uint8)
        return np.unpackbits(as_bytes, bitorder="little")[: self._size].astype(bool)

    def on_bits(self):
        return [int(i) for i in np.flatnonzero(self.bit_array())]

    def count_bits(self) -> int:
        return int(np.unpackbits(self._words.astype("<u8").view(np.uint8)).sum())

    def to_hex(self) -> str:
        return self._words.astype("<u8").tobytes().hex()

    def __eq__(self, other) -> bool:
        if not isinstance(other, Fingerprint):
            return NotImplemented
        return (
            self._type == other._type
            and self._size == other._size
            and np.array_equal(self._words, other._words)
        )

    def __hash__(self) -> int:
        return hash((self._type, self._size, self._words.tobytes()))

    def __repr__(self) -> str:
        return (
            f"Fingerprint(type={self._type.name}, size={self._size}, "
            f"bits_set={self.count_bits()})"
        )
