"""Core domain models and the element table."""

from .models.atom import Atom
from .models.bond import Bond, BondDirection, BondOrder
from .models.fingerprint import Fingerprint, FingerprintType
from .models.molecule import Molecule

__all__ = [
    "Atom",
    "Bond",
    "BondDirection",
    "BondOrder",
    "Fingerprint",
    "FingerprintType",
    "Molecule",
]
