"""Domain model classes."""

from .atom import Atom
from .bond import Bond, BondDirection, BondOrder
from .fingerprint import Fingerprint, FingerprintType
from .molecule import (
    ATOM_ALIPHATIC,
    ATOM_AROMATIC,
    CONNECTIVITY_UNKNOWN,
    UNSET,
    CachedProperty,
    Molecule,
)
from .sgroups import (
    AttachmentPoint,
    DataSGroup,
    DisplayOption,
    GenericSGroup,
    MultipleGroup,
    SGroup,
    SGroups,
    SGroupSubtype,
    SGroupType,
    SRUConnectivity,
    SRUGroup,
    Superatom,
)

__all__ = [
    "Atom",
    "Bond",
    "BondDirection",
    "BondOrder",
    "Fingerprint",
    "FingerprintType",
    "Molecule",
    "CachedProperty",
    "UNSET",
    "CONNECTIVITY_UNKNOWN",
    "ATOM_AROMATIC",
    "ATOM_ALIPHATIC",
    "SGroup",
    "SGroups",
    "SGroupType",
    "SGroupSubtype",
    "SRUConnectivity",
    "DisplayOption",
    "GenericSGroup",
    "DataSGroup",
    "Superatom",
    "AttachmentPoint",
    "SRUGroup",
    "MultipleGroup",
]
