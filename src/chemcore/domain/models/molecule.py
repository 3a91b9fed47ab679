#!/usr/bin/env python3
# src/chemcore/domain/models/molecule.py

"""
Domain model representing a molecule as an attributed graph.

Atoms and bonds live in ordered lists and reference each other by integer
index. Derived per-atom properties (connectivity, implicit hydrogens,
aromaticity, total hydrogens, valence) are computed on first access and
memoized; every mutation that can change one of them resets the affected
cache slots back to ``UNSET``.
"""

import copy
import math
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

import networkx as nx
import numpy as np

from ...exceptions import (
    AtomNotFoundError,
    BondNotFoundError,
    InvalidAtomError,
    PreconditionError,
)
from ..elements import (
    ELEM_C,
    ELEM_H,
    ELEM_N,
    ELEM_O,
    ELEM_PSEUDO,
    ELEM_RSITE,
    ELEM_TEMPLATE,
    MAX_ATOMIC_NUMBER,
    element_to_string,
    get_atomic_mass,
    is_sentinel,
)
from .atom import Atom
from .bond import Bond, BondDirection, BondOrder
from .sgroups import SGroups

UNSET = -1
CONNECTIVITY_UNKNOWN = -2

ATOM_ALIPHATIC = 0
ATOM_AROMATIC = 1

# Default valence of neutral atoms used for implicit hydrogen inference.
_DEFAULT_VALENCE = {ELEM_H: 1, ELEM_C: 4, ELEM_N: 3, ELEM_O: 2}


class CachedProperty(Enum):
    CONNECTIVITY = "connectivity"
    IMPLICIT_H = "implicit_h"
    AROMATICITY = "aromaticity"
    TOTAL_H = "total_h"
    VALENCE = "valence"


_HYDROGEN_DEPENDENT = (
    CachedProperty.IMPLICIT_H,
    CachedProperty.TOTAL_H,
    CachedProperty.VALENCE,
)


class Molecule:
    """Molecular graph with lazily computed per-atom properties.

    Attributes:
        atoms: Atoms in insertion order
        bonds: Bonds in insertion order
        name: Molecule name (Molfile header line 1)
        chiral: Chiral flag from the Molfile counts line
        properties: SD data items keyed by field name
        sgroups: S-Groups defined over this molecule's atoms
        aromatized: Whether the bond orders are in aromatic form
        revision: Counter bumped on every mutation
    """

    def __init__(self, name: str = ""):
        self.atoms: List[Atom] = []
        self.bonds: List[Bond] = []
        self.name = name
        self.chiral = False
        self.properties: Dict[str, str] = {}
        self.sgroups = SGroups()
        self.aromatized = False
        self.revision = 0
        self._adjacency: List[List[int]] = []
        self._caches: Dict[CachedProperty, List[int]] = {
            prop: [] for prop in CachedProperty
        }

    def __repr__(self) -> str:
        return (
            f"Molecule(name={self.name!r}, atoms={len(self.atoms)}, "
            f"bonds={len(self.bonds)})"
        )

    # Construction

    def add_atom(self, number: int) -> int:
        """Append an atom of a real element and return its index.

        Raises:
            InvalidAtomError: For sentinel or out-of-range atomic numbers
        """
        if is_sentinel(number):
            raise InvalidAtomError(
                f"atomic number {number} is a sentinel; use the dedicated constructor"
            )
        if not 0 < number <= MAX_ATOMIC_NUMBER:
            raise InvalidAtomError(f"invalid atomic number: {number}")
        return self._append_atom(Atom(number=number))

    def add_pseudo_atom(self, text: str) -> int:
        return self._append_atom(Atom(number=ELEM_PSEUDO, pseudo_atom_value=text))

    def add_template_atom(self, name: str, occurrence: int = -1) -> int:
        return self._append_atom(
            Atom(number=ELEM_TEMPLATE, template_name=name, template_occurrence=occurrence)
        )

    def add_rsite(self, rgroup_bits: int = 0) -> int:
        return self._append_atom(Atom(number=ELEM_RSITE, rgroup_bits=rgroup_bits))

    def _append_atom(self, atom: Atom) -> int:
        self.atoms.append(atom)
        self._adjacency.append([])
        for slots in self._caches.values():
            slots.append(UNSET)
        self.revision += 1
        return len(self.atoms) - 1

    def add_bond(self, begin: int, end: int, order: BondOrder = BondOrder.SINGLE) -> int:
        """Connect two atoms and return the new bond index.

        Raises:
            AtomNotFoundError: If either endpoint does not exist
            PreconditionError: If ``begin == end``
        """
        self._check_atom(begin)
        self._check_atom(end)
        if begin == end:
            raise PreconditionError(f"cannot bond atom #{begin} to itself")

        bond_idx = len(self.bonds)
        self.bonds.append(Bond(begin, end, BondOrder(order)))
        self._adjacency[begin].append(bond_idx)
        self._adjacency[end].append(bond_idx)

        self._invalidate_aromaticity()
        self._invalidate_atom(begin)
        self._invalidate_atom(end)
        self.revision += 1
        return bond_idx

    def flip_bond(self, parent: int, from_: int, to: int) -> None:
        """Move the bond (parent, from_) so that it joins (parent, to).

        Raises:
            BondNotFoundError: If ``parent`` and ``from_`` are not bonded
            PreconditionError: If ``to`` is ``parent`` or is already bonded to it
        """
        self._check_atom(to)
        bond_idx = self.find_bond(parent, from_)
        if bond_idx < 0:
            raise BondNotFoundError(f"no bond between atoms #{parent} and #{from_}")
        if to == parent:
            raise PreconditionError(f"cannot bond atom #{parent} to itself")
        if to != from_ and self.find_bond(parent, to) >= 0:
            raise PreconditionError(f"atoms #{parent} and #{to} are already bonded")

        bond = self.bonds[bond_idx]
        if bond.begin == from_:
            bond.begin = to
        else:
            bond.end = to
        self._adjacency[from_].remove(bond_idx)
        self._adjacency[to].append(bond_idx)

        for idx in (parent, from_, to):
            self._invalidate_atom(idx)
        self.revision += 1

    def remove_atoms(self, indices: Sequence[int]) -> List[int]:
        """Delete atoms, their incident bonds, and compact all indices.

        Returns:
            Mapping from old atom index to new atom index (-1 if deleted)
        """
        doomed = set(indices)
        for idx in doomed:
            self._check_atom(idx)

        atom_mapping: List[int] = []
        kept_atoms: List[Atom] = []
        for idx, atom in enumerate(self.atoms):
            if idx in doomed:
                atom_mapping.append(-1)
            else:
                atom_mapping.append(len(kept_atoms))
                kept_atoms.append(atom)

        bond_mapping: List[int] = []
        kept_bonds: List[Bond] = []
        for bond in self.bonds:
            if bond.begin in doomed or bond.end in doomed:
                bond_mapping.append(-1)
                continue
            bond_mapping.append(len(kept_bonds))
            bond.begin = atom_mapping[bond.begin]
            bond.end = atom_mapping[bond.end]
            kept_bonds.append(bond)

        self.atoms = kept_atoms
        self.bonds = kept_bonds
        self._adjacency = [[] for _ in kept_atoms]
        for bond_idx, bond in enumerate(kept_bonds):
            self._adjacency[bond.begin].append(bond_idx)
            self._adjacency[bond.end].append(bond_idx)
        self._caches = {prop: [UNSET] * len(kept_atoms) for prop in CachedProperty}
        self.aromatized = False
        self.sgroups.remap(atom_mapping, bond_mapping)
        self.revision += 1
        return atom_mapping

    def clear(self) -> None:
        """Remove all atoms, bonds, S-Groups and SD properties."""
        self.atoms = []
        self.bonds = []
        self._adjacency = []
        self._caches = {prop: [] for prop in CachedProperty}
        self.properties = {}
        self.sgroups.clear()
        self.aromatized = False
        self.revision += 1

    def clone(self) -> "Molecule":
        return copy.deepcopy(self)

    # Atom and bond edits

    def set_atom_charge(self, idx: int, charge: int) -> None:
        self._check_atom(idx)
        self.atoms[idx].charge = charge
        self._invalidate_atom(idx, _HYDROGEN_DEPENDENT)
        self.revision += 1

    def set_atom_isotope(self, idx: int, isotope: int) -> None:
        self._check_atom(idx)
        self.atoms[idx].isotope = isotope
        self.revision += 1

    def set_atom_radical(self, idx: int, radical: int) -> None:
        self._check_atom(idx)
        self.atoms[idx].radical = radical
        self._invalidate_atom(idx, _HYDROGEN_DEPENDENT)
        self.revision += 1

    def set_explicit_implicit_h(self, idx: int, count: Optional[int]) -> None:
        """Fix (or with ``None`` unfix) the implicit hydrogen count of an atom."""
        self._check_atom(idx)
        self.atoms[idx].explicit_implicit_h = count
        self._invalidate_atom(idx, _HYDROGEN_DEPENDENT)
        self.revision += 1

    def set_explicit_valence(self, idx: int, valence: Optional[int]) -> None:
        self._check_atom(idx)
        self.atoms[idx].explicit_valence = valence
        self._invalidate_atom(idx, (CachedProperty.VALENCE,))
        self.revision += 1

    def set_pseudo_atom(self, idx: int, text: str) -> None:
        """Turn an existing atom into a pseudo atom labelled ``text``."""
        self._check_atom(idx)
        atom = self.atoms[idx]
        atom.number = ELEM_PSEUDO
        atom.pseudo_atom_value = text
        atom.validate()
        self._invalidate_atom(idx)
        # Neighbours count hydrogen atoms in their total.
        for nei in self.get_neighbors(idx):
            self._invalidate_atom(nei, (CachedProperty.TOTAL_H,))
        self.revision += 1

    def set_rsite_bits(self, idx: int, rgroup_bits: int) -> None:
        atom = self.get_atom(idx)
        if not atom.is_rsite:
            raise PreconditionError(f"atom #{idx} is not an R-site")
        atom.rgroup_bits = rgroup_bits
        self.revision += 1

    def set_atom_xyz(self, idx: int, x: float, y: float, z: float) -> None:
        self._check_atom(idx)
        self.atoms[idx].coordinates = (float(x), float(y), float(z))
        self.revision += 1

    def set_bond_order(self, bond_idx: int, order: BondOrder) -> None:
        bond = self.get_bond(bond_idx)
        bond.order = BondOrder(order)
        self._invalidate_aromaticity()
        self._invalidate_atom(bond.begin)
        self._invalidate_atom(bond.end)
        self.revision += 1

    def set_bond_direction(self, bond_idx: int, direction: BondDirection) -> None:
        self.get_bond(bond_idx).direction = BondDirection(direction)
        self.revision += 1

    # Lookup

    def atom_count(self) -> int:
        return len(self.atoms)

    def bond_count(self) -> int:
        return len(self.bonds)

    def get_atom(self, idx: int) -> Atom:
        self._check_atom(idx)
        return self.atoms[idx]

    def get_bond(self, bond_idx: int) -> Bond:
        if not 0 <= bond_idx < len(self.bonds):
            raise BondNotFoundError(f"bond #{bond_idx} not found")
        return self.bonds[bond_idx]

    def get_neighbor_bonds(self, idx: int) -> List[int]:
        self._check_atom(idx)
        return list(self._adjacency[idx])

    def get_neighbors(self, idx: int) -> List[int]:
        self._check_atom(idx)
        return [self.bonds[b].other_end(idx) for b in self._adjacency[idx]]

    def find_bond(self, a: int, b: int) -> int:
        """Index of the bond joining ``a`` and ``b``, or -1 if there is none."""
        self._check_atom(a)
        self._check_atom(b)
        for bond_idx in self._adjacency[a]:
            if self.bonds[bond_idx].connects(a, b):
                return bond_idx
        return -1

    def get_other_bond_end(self, bond_idx: int, atom_idx: int) -> int:
        other = self.get_bond(bond_idx).other_end(atom_idx)
        if other < 0:
            raise PreconditionError(
                f"atom #{atom_idx} is not an endpoint of bond #{bond_idx}"
            )
        return other

    # Derived properties

    def cached_value(self, prop: CachedProperty, idx: int) -> int:
        """Raw cache slot for an atom; ``UNSET`` if not yet computed."""
        self._check_atom(idx)
        return self._caches[prop][idx]

    def get_atom_aromaticity(self, idx: int) -> int:
        """``ATOM_AROMATIC`` if any incident bond is aromatic, else ``ATOM_ALIPHATIC``."""
        self._check_atom(idx)
        slots = self._caches[CachedProperty.AROMATICITY]
        if slots[idx] == UNSET:
            aromatic = any(
                self.bonds[b].order == BondOrder.AROMATIC for b in self._adjacency[idx]
            )
            slots[idx] = ATOM_AROMATIC if aromatic else ATOM_ALIPHATIC
        return slots[idx]

    def get_atom_connectivity(self, idx: int) -> int:
        """Sum of incident bond orders, or ``CONNECTIVITY_UNKNOWN`` for aromatic atoms."""
        self._check_atom(idx)
        slots = self._caches[CachedProperty.CONNECTIVITY]
        if slots[idx] == UNSET:
            total = 0
            for bond_idx in self._adjacency[idx]:
                order = self.bonds[bond_idx].order
                if order == BondOrder.AROMATIC:
                    total = CONNECTIVITY_UNKNOWN
                    break
                total += int(order)
            slots[idx] = total
        return slots[idx]

    def get_implicit_h(self, idx: int) -> int:
        """Number of hydrogens implied on an atom.

        Raises:
            PreconditionError: For pseudo, R-site and template atoms without
                an explicit count
        """
        self._check_atom(idx)
        slots = self._caches[CachedProperty.IMPLICIT_H]
        if slots[idx] == UNSET:
            slots[idx] = self._compute_implicit_h(idx)
        return slots[idx]

    def _compute_implicit_h(self, idx: int) -> int:
        atom = self.atoms[idx]
        if atom.explicit_implicit_h is not None:
            return atom.explicit_implicit_h
        if is_sentinel(atom.number):
            raise PreconditionError(
                f"implicit hydrogens undefined for {element_to_string(atom.number)} "
                f"atom #{idx}"
            )
        if atom.charge != 0 or atom.number not in _DEFAULT_VALENCE:
            return 0

        connectivity = self.get_atom_connectivity(idx)
        if connectivity == CONNECTIVITY_UNKNOWN:
            if atom.number == ELEM_C:
                return max(0, 3 - len(self._adjacency[idx]))
            return 0
        return max(0, _DEFAULT_VALENCE[atom.number] - connectivity)

    def get_total_h(self, idx: int) -> int:
        """Implicit hydrogens plus bonded hydrogen atoms."""
        self._check_atom(idx)
        slots = self._caches[CachedProperty.TOTAL_H]
        if slots[idx] == UNSET:
            explicit = sum(
                1 for nei in self.get_neighbors(idx) if self.atoms[nei].number == ELEM_H
            )
            slots[idx] = self.get_implicit_h(idx) + explicit
        return slots[idx]

    def get_atom_valence(self, idx: int) -> int:
        self._check_atom(idx)
        slots = self._caches[CachedProperty.VALENCE]
        if slots[idx] == UNSET:
            atom = self.atoms[idx]
            if atom.explicit_valence is not None:
                slots[idx] = atom.explicit_valence
            else:
                order_sum = 0.0
                for bond_idx in self._adjacency[idx]:
                    order = self.bonds[bond_idx].order
                    order_sum += 1.5 if order == BondOrder.AROMATIC else int(order)
                slots[idx] = int(math.floor(order_sum)) + self.get_implicit_h(idx)
        return slots[idx]

    def total_hydrogens_count(self) -> int:
        """Hydrogen atoms plus implicit hydrogens over all real atoms."""
        count = 0
        for idx, atom in enumerate(self.atoms):
            if atom.number == ELEM_H:
                count += 1
            if not is_sentinel(atom.number):
                count += self.get_implicit_h(idx)
        return count

    def molecular_weight(self) -> float:
        """Average molecular weight including implicit hydrogens; sentinels weigh 0."""
        hydrogen = get_atomic_mass(ELEM_H)
        weight = 0.0
        for idx, atom in enumerate(self.atoms):
            if is_sentinel(atom.number):
                continue
            weight += get_atomic_mass(atom.number, atom.isotope)
            weight += self.get_implicit_h(idx) * hydrogen
        return weight

    def count_heavy_atoms(self) -> int:
        """Atoms of real elements other than hydrogen."""
        return sum(
            1
            for atom in self.atoms
            if not is_sentinel(atom.number) and atom.number != ELEM_H
        )

    def count_components(self) -> int:
        if not self.atoms:
            return 0
        return nx.number_connected_components(self.to_networkx())

    def distance(self, a: int, b: int) -> float:
        """Euclidean distance between the coordinates of two atoms."""
        self._check_atom(a)
        self._check_atom(b)
        return float(
            np.linalg.norm(
                np.subtract(self.atoms[a].coordinates, self.atoms[b].coordinates)
            )
        )

    def atom_description(self, idx: int) -> str:
        atom = self.get_atom(idx)
        if atom.is_pseudo:
            label = atom.pseudo_atom_value
        elif atom.is_template:
            label = atom.template_name
        else:
            label = element_to_string(atom.number)
        parts = [f"{label} #{idx}"]
        if atom.isotope:
            parts.append(f"isotope={atom.isotope}")
        if atom.charge:
            parts.append(f"charge={atom.charge:+d}")
        if atom.radical:
            parts.append(f"radical={atom.radical}")
        return " ".join(parts)

    def bond_description(self, bond_idx: int) -> str:
        bond = self.get_bond(bond_idx)
        begin = element_to_string(self.atoms[bond.begin].number)
        end = element_to_string(self.atoms[bond.end].number)
        return (
            f"{begin}#{bond.begin}-{end}#{bond.end} "
            f"{bond.order.name.lower()}"
        )

    # Graph views

    def to_networkx(self) -> nx.Graph:
        """Undirected networkx view with element data on nodes and bond order on edges."""
        graph = nx.Graph()
        for idx, atom in enumerate(self.atoms):
            graph.add_node(
                idx,
                number=atom.number,
                symbol=element_to_string(atom.number),
                charge=atom.charge,
                isotope=atom.isotope,
            )
        for bond_idx, bond in enumerate(self.bonds):
            graph.add_edge(bond.begin, bond.end, order=int(bond.order), index=bond_idx)
        return graph

    def ring_count(self) -> int:
        """Number of independent rings (edges - nodes + components)."""
        if not self.atoms:
            return 0
        graph = self.to_networkx()
        return (
            graph.number_of_edges()
            - graph.number_of_nodes()
            + nx.number_connected_components(graph)
        )

    def get_coordinates(self) -> List[Tuple[float, float, float]]:
        return [atom.coordinates for atom in self.atoms]

    # Internal helpers

    def _check_atom(self, idx: int) -> None:
        if not 0 <= idx < len(self.atoms):
            raise AtomNotFoundError(idx)

    def _invalidate_atom(self, idx: int, props=tuple(CachedProperty)) -> None:
        for prop in props:
            self._caches[prop][idx] = UNSET

    def _invalidate_aromaticity(self) -> None:
        self.aromatized = False
        slots = self._caches[CachedProperty.AROMATICITY]
        for i in range(len(slots)):
            slots[i] = UNSET
