#!/usr/bin/env python3
# src/chemcore/domain/models/sgroups.py

"""
S-Groups: annotated atom/bond subsets (abbreviations, polymer units, data).

The variants form a closed set of dataclasses sharing the ``SGroup`` base.
``SGroupType`` round-trips the MDL three-letter codes used in Molfiles.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Dict, Iterator, List, Optional, Sequence, Set, Type, TypeVar

from ...exceptions import PreconditionError, SGroupNotFoundError


class SGroupType(Enum):
    GENERIC = "GEN"
    DATA = "DAT"
    SUPERATOM = "SUP"
    SRU = "SRU"
    MULTIPLE = "MUL"
    MONOMER = "MON"
    MER = "MER"
    COPOLYMER = "COP"
    CROSSLINK = "CRO"
    MODIFIED = "MOD"
    GRAFT = "GRA"
    COMPONENT = "COM"
    MIXTURE = "MIX"
    FORMULATION = "FOR"
    ANY = "ANY"

    @property
    def code(self) -> str:
        return self.value

    @classmethod
    def from_code(cls, code: str) -> "SGroupType":
        """Parse an MDL type code; unrecognised codes map to GENERIC."""
        try:
            return cls(code.strip().upper())
        except ValueError:
            return cls.GENERIC


class SGroupSubtype(Enum):
    NONE = ""
    ALTERNATING = "ALT"
    RANDOM = "RAN"
    BLOCK = "BLK"

    @classmethod
    def from_code(cls, code: str) -> "SGroupSubtype":
        try:
            return cls(code.strip().upper())
        except ValueError:
            return cls.NONE


class SRUConnectivity(IntEnum):
    HEAD_TO_HEAD = 1
    HEAD_TO_TAIL = 2
    EITHER = 3

    @property
    def code(self) -> str:
        return {1: "HH", 2: "HT", 3: "EU"}[self.value]

    @classmethod
    def from_code(cls, code: str) -> "SRUConnectivity":
        return {"HH": cls.HEAD_TO_HEAD, "EU": cls.EITHER}.get(
            code.strip().upper(), cls.HEAD_TO_TAIL
        )


class DisplayOption(IntEnum):
    UNDEFINED = -1
    EXPANDED = 0
    CONTRACTED = 1


GENERIC_TYPES = frozenset(
    {
        SGroupType.GENERIC,
        SGroupType.MONOMER,
        SGroupType.MER,
        SGroupType.COPOLYMER,
        SGroupType.CROSSLINK,
        SGroupType.MODIFIED,
        SGroupType.GRAFT,
        SGroupType.COMPONENT,
        SGroupType.MIXTURE,
        SGroupType.FORMULATION,
        SGroupType.ANY,
    }
)


@dataclass
class SGroup:
    """Fields shared by every S-Group variant.

    Attributes:
        atoms: Member atom indices
        bonds: Crossing/member bond indices
        subtype: Polymer subtype
        parent_idx: Index of the parent S-Group in the collection, -1 if none
        display_option: Expanded/contracted display state
        original_id: Identifier the group had in its source file
    """

    sgroup_type: SGroupType = SGroupType.GENERIC
    atoms: List[int] = field(default_factory=list)
    bonds: List[int] = field(default_factory=list)
    subtype: SGroupSubtype = SGroupSubtype.NONE
    parent_idx: int = -1
    display_option: DisplayOption = DisplayOption.UNDEFINED
    original_id: int = 0

    def add_atom(self, atom_idx: int) -> None:
        self.atoms.append(atom_idx)

    def add_bond(self, bond_idx: int) -> None:
        self.bonds.append(bond_idx)

    def has_atom(self, atom_idx: int) -> bool:
        return atom_idx in self.atoms

    def __str__(self) -> str:
        return (
            f"{self.sgroup_type.code} S-Group: "
            f"{len(self.atoms)} atoms, {len(self.bonds)} bonds"
        )


@dataclass
class GenericSGroup(SGroup):
    """Untyped or polymer-classification group (GEN, MON, MER, COP, ...)."""

    def __post_init__(self):
        if self.sgroup_type not in GENERIC_TYPES:
            raise PreconditionError(
                f"{self.sgroup_type.code} is not a generic S-Group type"
            )


@dataclass
class DataSGroup(SGroup):
    """Named data attached to a set of atoms."""

    sgroup_type: SGroupType = SGroupType.DATA
    name: str = ""
    value: str = ""
    units: str = ""
    field_type: str = "T"

    def __str__(self) -> str:
        return f"Data S-Group '{self.name}': {self.value}"


@dataclass
class AttachmentPoint:
    atom_idx: int
    leaving_idx: int = -1
    apid: str = ""


@dataclass
class Superatom(SGroup):
    """Abbreviation such as "Ph" standing in for its member atoms."""

    sgroup_type: SGroupType = SGroupType.SUPERATOM
    label: str = ""
    subscript: str = ""
    attachment_points: List[AttachmentPoint] = field(default_factory=list)

    def __str__(self) -> str:
        return f"Superatom '{self.label}': {len(self.atoms)} atoms"


@dataclass
class SRUGroup(SGroup):
    """Structural repeating unit of a polymer."""

    sgroup_type: SGroupType = SGroupType.SRU
    subscript: str = "n"
    connectivity: SRUConnectivity = SRUConnectivity.HEAD_TO_TAIL


@dataclass
class MultipleGroup(SGroup):
    """A group of atoms repeated ``multiplier`` times."""

    sgroup_type: SGroupType = SGroupType.MULTIPLE
    multiplier: int = 1
    parent_atoms: List[int] = field(default_factory=list)


_VARIANT_BY_TYPE: Dict[SGroupType, Type[SGroup]] = {
    SGroupType.DATA: DataSGroup,
    SGroupType.SUPERATOM: Superatom,
    SGroupType.SRU: SRUGroup,
    SGroupType.MULTIPLE: MultipleGroup,
}


def create_sgroup(sgroup_type: SGroupType) -> SGroup:
    """Instantiate the variant matching an S-Group type tag."""
    cls = _VARIANT_BY_TYPE.get(sgroup_type, GenericSGroup)
    return cls(sgroup_type=sgroup_type)


T = TypeVar("T", bound=SGroup)


class SGroups:
    """Ordered collection of a molecule's S-Groups."""

    def __init__(self):
        self._groups: List[SGroup] = []

    def __len__(self) -> int:
        return len(self._groups)

    def __iter__(self) -> Iterator[SGroup]:
        return iter(self._groups)

    def add(self, sgroup: SGroup) -> int:
        self._groups.append(sgroup)
        return len(self._groups) - 1

    def get(self, idx: int) -> SGroup:
        if not 0 <= idx < len(self._groups):
            raise SGroupNotFoundError(idx)
        return self._groups[idx]

    def remove(self, idx: int) -> None:
        """Remove a group; parent references to later groups shift down."""
        if not 0 <= idx < len(self._groups):
            raise SGroupNotFoundError(idx)
        del self._groups[idx]
        for sgroup in self._groups:
            if sgroup.parent_idx == idx:
                sgroup.parent_idx = -1
            elif sgroup.parent_idx > idx:
                sgroup.parent_idx -= 1

    def clear(self) -> None:
        self._groups.clear()

    def find_by_type(self, sgroup_type: SGroupType) -> List[int]:
        return [
            i for i, sgroup in enumerate(self._groups)
            if sgroup.sgroup_type == sgroup_type
        ]

    def _of_class(self, cls: Type[T]) -> List[T]:
        return [sgroup for sgroup in self._groups if isinstance(sgroup, cls)]

    def superatoms(self) -> List[Superatom]:
        return self._of_class(Superatom)

    def data_sgroups(self) -> List[DataSGroup]:
        return self._of_class(DataSGroup)

    def sru_groups(self) -> List[SRUGroup]:
        return self._of_class(SRUGroup)

    def multiple_groups(self) -> List[MultipleGroup]:
        return self._of_class(MultipleGroup)

    def generic_sgroups(self) -> List[GenericSGroup]:
        return self._of_class(GenericSGroup)

    def atoms_in_sgroups(self) -> Set[int]:
        return {atom_idx for sgroup in self._groups for atom_idx in sgroup.atoms}

    def remap(
        self,
        atom_mapping: Sequence[int],
        bond_mapping: Optional[Sequence[int]] = None,
    ) -> None:
        """Apply an old->new index mapping after atoms or bonds are deleted.

        Args:
            atom_mapping: New index per old atom index, -1 for deleted atoms
            bond_mapping: Same for bonds; bond lists are left alone if None
        """
        for sgroup in self._groups:
            sgroup.atoms = _remap_indices(sgroup.atoms, atom_mapping)
            if bond_mapping is not None:
                sgroup.bonds = _remap_indices(sgroup.bonds, bond_mapping)
            if isinstance(sgroup, MultipleGroup):
                sgroup.parent_atoms = _remap_indices(sgroup.parent_atoms, atom_mapping)
            elif isinstance(sgroup, Superatom):
                points = []
                for point in sgroup.attachment_points:
                    new_atom = _lookup(atom_mapping, point.atom_idx)
                    if new_atom < 0:
                        continue
                    point.atom_idx = new_atom
                    if point.leaving_idx >= 0:
                        point.leaving_idx = _lookup(atom_mapping, point.leaving_idx)
                    points.append(point)
                sgroup.attachment_points = points


def _lookup(mapping: Sequence[int], idx: int) -> int:
    return mapping[idx] if 0 <= idx < len(mapping) else -1


def _remap_indices(indices: List[int], mapping: Sequence[int]) -> List[int]:
    remapped = (_lookup(mapping, idx) for idx in indices)
    return [idx for idx in remapped if idx >= 0]
