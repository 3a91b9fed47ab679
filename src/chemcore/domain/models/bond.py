#!/usr/bin/env python3
# src/chemcore/domain/models/bond.py

"""
Domain model representing a chemical bond between atoms.
"""

from dataclasses import dataclass
from enum import IntEnum


class BondOrder(IntEnum):
    """Enumeration of supported bond orders."""

    SINGLE = 1
    DOUBLE = 2
    TRIPLE = 3
    AROMATIC = 4


class BondDirection(IntEnum):
    """Stereo direction of a wedge bond, stored but not perceived."""

    NONE = 0
    UP = 1
    DOWN = 2
    EITHER = 3


@dataclass
class Bond:
    """Represents a chemical bond between two atoms, referenced by index."""

    begin: int
    end: int
    order: BondOrder = BondOrder.SINGLE
    direction: BondDirection = BondDirection.NONE

    def other_end(self, atom_idx: int) -> int:
        """Return the opposite endpoint, or -1 if ``atom_idx`` is not an endpoint."""
        if self.begin == atom_idx:
            return self.end
        if self.end == atom_idx:
            return self.begin
        return -1

    def connects(self, a: int, b: int) -> bool:
        return (self.begin == a and self.end == b) or (self.begin == b and self.end == a)
