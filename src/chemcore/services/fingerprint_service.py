#!/usr/bin/env python3
# src/chemcore/services/fingerprint_service.py

"""
Fingerprint generation and similarity metrics.

Two generators are provided:

* Path fingerprints hash every simple path of ``min_path`` to ``max_path``
  atoms, in both directions, as the sequence of atomic numbers and the bond
  orders joining them.
* ECFP fingerprints seed each atom with a hash of its local invariants and
  refine the identifiers ``radius`` times from the sorted identifiers of the
  neighbours. Bits from every round are kept.

Every hash sets two bits, spaced by the 32-bit golden-ratio constant.
"""

import logging
import math
import threading
from dataclasses import dataclass
from typing import List, Optional, Set

import numpy as np

from ..domain.elements import ELEM_H, is_sentinel
from ..domain.models.bond import BondDirection
from ..domain.models.fingerprint import Fingerprint, FingerprintType
from ..domain.models.molecule import Molecule
from ..exceptions import FingerprintSizeMismatchError, InvalidParametersError
from ..utils.cancellation import check_cancelled

logger = logging.getLogger(__name__)

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619
BIT_SPACING = 0x9E3779B9
BITS_PER_HASH = 2
MASK32 = 0xFFFFFFFF


def fnv1a_32(data: bytes) -> int:
    """32-bit FNV-1a hash."""
    h = FNV_OFFSET_BASIS
    for byte in data:
        h ^= byte
        h = (h * FNV_PRIME) & MASK32
    return h


def _u32_bytes(value: int) -> bytes:
    return (value & MASK32).to_bytes(4, "little")


@dataclass(frozen=True)
class FingerprintParameters:
    """Fingerprint generation settings.

    Args:
        fp_type: Generator to use
        size: Fingerprint length in bits
        min_path: Shortest path, in atoms, hashed by the path generator
        max_path: Longest path, in atoms, hashed by the path generator
        use_chirality: Include stored wedge directions in the hashed features
    """

    fp_type: FingerprintType = FingerprintType.PATH
    size: int = 2048
    min_path: int = 1
    max_path: int = 7
    use_chirality: bool = False

    def __post_init__(self):
        if not isinstance(self.fp_type, FingerprintType):
            raise InvalidParametersError(f"unknown fingerprint type: {self.fp_type!r}")
        if self.size <= 0:
            raise InvalidParametersError(f"fingerprint size must be positive, got {self.size}")
        if self.min_path < 1:
            raise InvalidParametersError(f"min_path must be at least 1, got {self.min_path}")
        if self.max_path < self.min_path:
            raise InvalidParametersError(
                f"max_path ({self.max_path}) is smaller than min_path ({self.min_path})"
            )


class FingerprintBuilder:
    """Build a fingerprint for one molecule.

    Args:
        mol: Molecule to fingerprint; it is only read
        params: Generation settings
    """

    def __init__(self, mol: Molecule, params: Optional[FingerprintParameters] = None):
        self.mol = mol
        self.params = params or FingerprintParameters()
        self._bits: Set[int] = set()
        self._cancel_event: Optional[threading.Event] = None

    def build(self, cancel_event: Optional[threading.Event] = None) -> Fingerprint:
        """Generate the fingerprint.

        Raises:
            OperationCancelledError: If ``cancel_event`` is set during the build
        """
        self._bits = set()
        self._cancel_event = cancel_event
        if self.params.fp_type == FingerprintType.PATH:
            self._build_path()
        else:
            self._build_ecfp(self.params.fp_type.radius)
        fp = Fingerprint.from_bits(self.params.fp_type, self.params.size, self._bits)
        logger.debug(f"Built {fp!r} for {self.mol.atom_count()} atoms")
        return fp

    def _set_bits_from_hash(self, h: int) -> None:
        for i in range(BITS_PER_HASH):
            seed = (h + i * BIT_SPACING) & MASK32
            self._bits.add(seed % self.params.size)

    # Path fingerprint

    def _build_path(self) -> None:
        n = self.mol.atom_count()
        visited = [False] * n
        for start in range(n):
            check_cancelled(self._cancel_event, "fingerprint build")
            for length in range(self.params.min_path, self.params.max_path + 1):
                self._walk([start], visited, length)

    def _walk(self, path: List[int], visited: List[bool], length: int) -> None:
        current = path[-1]
        if len(path) == length:
            self._set_bits_from_hash(self._hash_path(path))
            return
        visited[current] = True
        for neighbor in self.mol.get_neighbors(current):
            if not visited[neighbor]:
                path.append(neighbor)
                self._walk(path, visited, length)
                path.pop()
        visited[current] = False

    def _hash_path(self, path: List[int]) -> int:
        data = bytearray()
        for i, atom_idx in enumerate(path):
            data.append(self.mol.atoms[atom_idx].number & 0xFF)
            if i > 0:
                bond = self.mol.get_bond(self.mol.find_bond(path[i - 1], atom_idx))
                data.append(int(bond.order) & 0xFF)
                if self.params.use_chirality:
                    data.append(int(bond.direction) & 0xFF)
        return fnv1a_32(bytes(data))

    # ECFP

    def _build_ecfp(self, radius: int) -> None:
        identifiers = [self._initial_identifier(i) for i in range(self.mol.atom_count())]
        for round_ in range(radius + 1):
            check_cancelled(self._cancel_event, "fingerprint build")
            for identifier in identifiers:
                self._set_bits_from_hash(identifier)
            if round_ < radius:
                identifiers = [
                    self._updated_identifier(i, identifiers)
                    for i in range(self.mol.atom_count())
                ]

    def _initial_identifier(self, atom_idx: int) -> int:
        mol = self.mol
        atom = mol.atoms[atom_idx]
        neighbors = mol.get_neighbors(atom_idx)
        heavy = sum(1 for nei in neighbors if mol.atoms[nei].number != ELEM_H)
        explicit_h = len(neighbors) - heavy
        implicit_h = 0 if is_sentinel(atom.number) else mol.get_implicit_h(atom_idx)

        data = bytearray(
            [
                atom.number & 0xFF,
                (atom.number >> 8) & 0xFF,
                heavy & 0xFF,
                (len(neighbors) + implicit_h + explicit_h) & 0xFF,
                (atom.charge + 128) & 0xFF,
            ]
        )
        if self.params.use_chirality:
            wedges = sum(
                1
                for bond_idx in mol.get_neighbor_bonds(atom_idx)
                if mol.bonds[bond_idx].direction != BondDirection.NONE
            )
            data.append(wedges & 0xFF)
        return fnv1a_32(bytes(data))

    def _updated_identifier(self, atom_idx: int, identifiers: List[int]) -> int:
        neighbor_ids = sorted(identifiers[nei] for nei in self.mol.get_neighbors(atom_idx))
        data = bytearray(_u32_bytes(identifiers[atom_idx]))
        for nid in neighbor_ids:
            data.extend(_u32_bytes(nid))
        return fnv1a_32(bytes(data))


def generate_fingerprint(
    mol: Molecule,
    params: Optional[FingerprintParameters] = None,
    cancel_event: Optional[threading.Event] = None,
) -> Fingerprint:
    """Convenience wrapper around ``FingerprintBuilder(mol, params).build()``."""
    return FingerprintBuilder(mol, params).build(cancel_event)


# Similarity


def _popcount(words: np.ndarray) -> int:
    return int(np.unpackbits(words.astype("<u8").view(np.uint8)).sum())


def _check_sizes(fp1: Fingerprint, fp2: Fingerprint) -> None:
    if fp1.size != fp2.size:
        raise FingerprintSizeMismatchError(fp1.size, fp2.size)


def tanimoto_similarity(fp1: Fingerprint, fp2: Fingerprint) -> float:
    """|A and B| / |A or B|; 0.0 if both are empty."""
    _check_sizes(fp1, fp2)
    union = _popcount(fp1.words | fp2.words)
    if union == 0:
        return 0.0
    return _popcount(fp1.words & fp2.words) / union


def dice_similarity(fp1: Fingerprint, fp2: Fingerprint) -> float:
    """2|A and B| / (|A| + |B|); 0.0 if both are empty."""
    _check_sizes(fp1, fp2)
    total = fp1.count_bits() + fp2.count_bits()
    if total == 0:
        return 0.0
    return 2.0 * _popcount(fp1.words & fp2.words) / total


def cosine_similarity(fp1: Fingerprint, fp2: Fingerprint) -> float:
    """|A and B| / sqrt(|A| |B|); 0.0 if either is empty."""
    _check_sizes(fp1, fp2)
    count1 = fp1.count_bits()
    count2 = fp2.count_bits()
    if count1 == 0 or count2 == 0:
        return 0.0
    return _popcount(fp1.words & fp2.words) / math.sqrt(count1 * count2)


def hamming_distance(fp1: Fingerprint, fp2: Fingerprint) -> int:
    """Number of differing bits."""
    _check_sizes(fp1, fp2)
    return _popcount(fp1.words ^ fp2.words)


def euclidean_distance(fp1: Fingerprint, fp2: Fingerprint) -> float:
    return math.sqrt(hamming_distance(fp1, fp2))
