#!/usr/bin/env python3
# src/chemcore/services/descriptors.py

"""
Whole-molecule descriptors: formulas, masses, polar surface area and
Lipinski-style counts.

Formulas and masses count implicit hydrogens. Pseudo and template atoms are
ignored everywhere; R-sites only show up in the gross formula.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Tuple

import networkx as nx

from ..domain.elements import (
    ELEM_C,
    ELEM_H,
    ELEM_N,
    ELEM_O,
    ELEM_RSITE,
    element_to_string,
    get_atomic_mass,
    is_sentinel,
    monoisotopic_mass as element_monoisotopic_mass,
    natural_isotopes,
)
from ..domain.models.bond import BondOrder
from ..domain.models.molecule import CONNECTIVITY_UNKNOWN, Molecule

logger = logging.getLogger(__name__)

# Isotopic peaks below this probability are dropped while convolving.
_PRUNE_BELOW = 1e-12

# Nominal mass -> (probability, mean exact mass)
_Distribution = Dict[int, Tuple[float, float]]


@dataclass
class MolecularDescriptors:
    """Descriptor summary for one molecule."""

    gross_formula: str
    molecular_formula: str
    molecular_weight: float
    monoisotopic_mass: float
    most_abundant_mass: float
    tpsa: float
    rotatable_bonds: int
    hbond_acceptors: int
    hbond_donors: int
    heavy_atoms: int
    components: int


# Formulas


def collect_gross(mol: Molecule, add_isotopes: bool = True) -> Counter:
    """Count atoms per ``(atomic_number, isotope)``, implicit hydrogens included.

    R-sites are counted under ``(ELEM_RSITE, 0)``.
    """
    counts: Counter = Counter()
    for idx, atom in enumerate(mol.atoms):
        if atom.is_rsite:
            counts[(ELEM_RSITE, 0)] += 1
            continue
        if is_sentinel(atom.number):
            continue
        isotope = atom.isotope if add_isotopes else 0
        counts[(atom.number, isotope)] += 1
        implicit_h = mol.get_implicit_h(idx)
        if implicit_h:
            counts[(ELEM_H, 0)] += implicit_h
    return counts


def _hill_key(has_carbon: bool):
    def key(entry):
        number, isotope = entry
        if has_carbon and number == ELEM_C:
            return (0, "", isotope)
        if has_carbon and number == ELEM_H:
            return (1, "", isotope)
        return (2, element_to_string(number), isotope)

    return key


def _hill_parts(counts: Counter):
    elements = [entry for entry in counts if entry[0] != ELEM_RSITE and counts[entry] > 0]
    has_carbon = any(number == ELEM_C for number, _ in elements)
    parts = []
    for number, isotope in sorted(elements, key=_hill_key(has_carbon)):
        symbol = element_to_string(number)
        if isotope:
            symbol = f"{isotope}{symbol}"
        count = counts[(number, isotope)]
        parts.append(symbol if count == 1 else f"{symbol}{count}")
    return parts


def gross_formula(mol: Molecule, add_rsites: bool = True) -> str:
    """Hill-ordered formula with space-separated terms, e.g. ``"C2 H6 O"``.

    Carbon comes first and hydrogen second when carbon is present; every
    other element follows alphabetically. Isotope-labelled atoms are listed
    after their element as separate terms (``"C 13C H4"``). R-sites are
    appended as ``R#`` when ``add_rsites`` is set.
    """
    counts = collect_gross(mol)
    parts = _hill_parts(counts)
    rsites = counts[(ELEM_RSITE, 0)]
    if add_rsites and rsites:
        parts.append("R#" if rsites == 1 else f"R#{rsites}")
    return " ".join(parts)


def molecular_formula(mol: Molecule) -> str:
    """Compact Hill formula with isotopes merged, e.g. ``"C2H6O"``."""
    return "".join(_hill_parts(collect_gross(mol, add_isotopes=False)))


# Masses


def monoisotopic_mass(mol: Molecule) -> float:
    """Sum of most-common-isotope exact masses; labelled atoms use their isotope."""
    hydrogen = element_monoisotopic_mass(ELEM_H)
    mass = 0.0
    for idx, atom in enumerate(mol.atoms):
        if is_sentinel(atom.number):
            continue
        if atom.isotope:
            mass += get_atomic_mass(atom.number, atom.isotope)
        else:
            mass += element_monoisotopic_mass(atom.number)
        mass += mol.get_implicit_h(idx) * hydrogen
    return mass


def _convolve(a: _Distribution, b: _Distribution) -> _Distribution:
    result: Dict[int, Tuple[float, float]] = {}
    for offset_a, (prob_a, mass_a) in a.items():
        for offset_b, (prob_b, mass_b) in b.items():
            prob = prob_a * prob_b
            if prob < _PRUNE_BELOW:
                continue
            offset = offset_a + offset_b
            old_prob, old_mass = result.get(offset, (0.0, 0.0))
            total = old_prob + prob
            result[offset] = (total, (old_prob * old_mass + prob * (mass_a + mass_b)) / total)
    return result


def _power(dist: _Distribution, n: int) -> _Distribution:
    result: _Distribution = {0: (1.0, 0.0)}
    while n:
        if n & 1:
            result = _convolve(result, dist)
        n >>= 1
        if n:
            dist = _convolve(dist, dist)
    return result


def most_abundant_mass(mol: Molecule) -> float:
    """Mean exact mass of the most probable nominal-mass peak.

    Natural-abundance atoms are spread over their isotopes; isotope-labelled
    atoms contribute their exact mass only.
    """
    fixed = 0.0
    natural: Counter = Counter()
    for (number, isotope), count in collect_gross(mol).items():
        if number == ELEM_RSITE:
            continue
        if isotope:
            fixed += count * get_atomic_mass(number, isotope)
        else:
            natural[number] += count

    dist: _Distribution = {0: (1.0, 0.0)}
    for number, count in sorted(natural.items()):
        element_dist = {
            mass_number: (fraction, mass)
            for mass_number, mass, fraction in natural_isotopes(number)
        }
        dist = _convolve(dist, _power(element_dist, count))

    _, mass = max(dist.values(), key=lambda peak: peak[0])
    return fixed + mass


# Polar surface area and Lipinski counts


def tpsa(mol: Molecule, include_sp: bool = False) -> float:
    """Approximate topological polar surface area from N and O environments.

    Each oxygen contributes 12.0 and each nitrogen 3.0, adjusted for positive
    charge, double bonds and aromatic bonds. With ``include_sp`` atoms of
    degree two or less carrying a multiple bond are scaled by 0.9. This is a
    coarse estimate, not a fragment-table TPSA.
    """
    total = 0.0
    for idx, atom in enumerate(mol.atoms):
        if atom.number not in (ELEM_N, ELEM_O):
            continue
        orders = [mol.get_bond(b).order for b in mol.get_neighbor_bonds(idx)]
        has_double = BondOrder.DOUBLE in orders
        has_aromatic = BondOrder.AROMATIC in orders

        if atom.number == ELEM_O:
            contrib = 12.0
            if atom.charge > 0:
                contrib -= 2.0
            if has_double:
                contrib += 2.0
            if has_aromatic:
                contrib -= 1.0
        else:
            contrib = 3.0
            if atom.charge > 0:
                contrib -= 1.0
            if has_double:
                contrib += 0.5
            if has_aromatic:
                contrib += 0.5

        if include_sp and len(orders) <= 2 and max(orders, default=0) >= BondOrder.DOUBLE:
            contrib *= 0.9
        total += max(contrib, 0.0)
    return total


def rotatable_bonds(mol: Molecule) -> int:
    """Single, non-terminal bonds that are not part of a ring."""
    if not mol.bonds:
        return 0
    chain_edges = {frozenset(edge) for edge in nx.bridges(mol.to_networkx())}
    count = 0
    for bond in mol.bonds:
        if bond.order != BondOrder.SINGLE:
            continue
        if len(mol.get_neighbor_bonds(bond.begin)) <= 1:
            continue
        if len(mol.get_neighbor_bonds(bond.end)) <= 1:
            continue
        if frozenset((bond.begin, bond.end)) in chain_edges:
            count += 1
    return count


def hbond_acceptors(mol: Molecule) -> int:
    """Neutral or anionic O and N with spare lone pairs.

    Oxygen qualifies up to a bond-order sum of 2, nitrogen up to 3. Aromatic
    atoms, whose bond-order sum is unknown, always qualify.
    """
    count = 0
    for idx, atom in enumerate(mol.atoms):
        if atom.number not in (ELEM_N, ELEM_O) or atom.charge > 0:
            continue
        connectivity = mol.get_atom_connectivity(idx)
        limit = 2 if atom.number == ELEM_O else 3
        if connectivity == CONNECTIVITY_UNKNOWN or connectivity <= limit:
            count += 1
    return count


def hbond_donors(mol: Molecule) -> int:
    """Neutral or cationic O and N carrying at least one hydrogen."""
    return sum(
        1
        for idx, atom in enumerate(mol.atoms)
        if atom.number in (ELEM_N, ELEM_O)
        and atom.charge >= 0
        and mol.get_total_h(idx) > 0
    )


def calculate_descriptors(mol: Molecule) -> MolecularDescriptors:
    descriptors = MolecularDescriptors(
        gross_formula=gross_formula(mol),
        molecular_formula=molecular_formula(mol),
        molecular_weight=mol.molecular_weight(),
        monoisotopic_mass=monoisotopic_mass(mol),
        most_abundant_mass=most_abundant_mass(mol),
        tpsa=tpsa(mol),
        rotatable_bonds=rotatable_bonds(mol),
        hbond_acceptors=hbond_acceptors(mol),
        hbond_donors=hbond_donors(mol),
        heavy_atoms=mol.count_heavy_atoms(),
        components=mol.count_components(),
    )
    logger.debug(f"Descriptors for {mol.name or 'unnamed molecule'}: {descriptors}")
    return descriptors
