#!/usr/bin/env python3
# src/chemcore/domain/elements.py

"""
Element table: atomic number <-> symbol <-> mass lookups.

Symbols, masses and most-common isotopes are read from RDKit's periodic
table; the symbol tuple is built once at import. Nothing here is
mutable after import, so the table is safe to share across threads and
worker processes.
"""

from functools import lru_cache
from types import MappingProxyType
from typing import Mapping, Tuple

from rdkit import Chem

from ..exceptions import UnknownElementError

ELEM_PSEUDO = -1
ELEM_RSITE = -2
ELEM_TEMPLATE = -3

ELEM_H = 1
ELEM_C = 6
ELEM_N = 7
ELEM_O = 8
ELEM_F = 9
ELEM_P = 15
ELEM_S = 16
ELEM_Cl = 17
ELEM_Br = 35
ELEM_I = 53

MAX_ATOMIC_NUMBER = 118

# Mass numbers searched either side of the most common isotope.
_ISOTOPE_WINDOW = 12

# Index 0 is unused so that SYMBOLS[n] is the symbol of element n.
SYMBOLS = ("",) + tuple(
    Chem.GetPeriodicTable().GetElementSymbol(number)
    for number in range(1, MAX_ATOMIC_NUMBER + 1)
)

SYMBOL_TO_NUMBER: Mapping[str, int] = MappingProxyType(
    {symbol: number for number, symbol in enumerate(SYMBOLS) if symbol}
)

_SENTINEL_NAMES = {
    ELEM_PSEUDO: "Pseudo",
    ELEM_RSITE: "RSite",
    ELEM_TEMPLATE: "Template",
}

# Elements written in lowercase inside aromatic SMILES.
AROMATIC_ORGANIC: Mapping[str, int] = MappingProxyType(
    {"c": ELEM_C, "n": ELEM_N, "o": ELEM_O, "p": ELEM_P, "s": ELEM_S}
)
AROMATIC_SYMBOL_BY_NUMBER: Mapping[int, str] = MappingProxyType(
    {number: symbol for symbol, number in AROMATIC_ORGANIC.items()}
)


def is_sentinel(number: int) -> bool:
    """Whether an atomic number denotes a pseudo/R-site/template atom."""
    return number in _SENTINEL_NAMES


def element_from_string(symbol: str) -> int:
    """Return the atomic number for an element symbol (e.g. "C" -> 6).

    Raises:
        UnknownElementError: If the symbol is not a known element
    """
    try:
        return SYMBOL_TO_NUMBER[symbol]
    except KeyError:
        raise UnknownElementError(symbol) from None


def element_to_string(number: int) -> str:
    """Return the symbol for an atomic number or sentinel."""
    if 0 < number <= MAX_ATOMIC_NUMBER:
        return SYMBOLS[number]
    if number in _SENTINEL_NAMES:
        return _SENTINEL_NAMES[number]
    return f"?{number}"


@lru_cache(maxsize=None)
def standard_mass_number(number: int) -> int:
    """Mass number of the most common isotope, used as the Molfile mass origin."""
    if not 0 < number <= MAX_ATOMIC_NUMBER:
        return 0
    return int(Chem.GetPeriodicTable().GetMostCommonIsotope(number))


@lru_cache(maxsize=None)
def _standard_weight(number: int) -> float:
    return float(Chem.GetPeriodicTable().GetAtomicWeight(number))


def get_atomic_mass(number: int, isotope: int = 0) -> float:
    """Return the atomic mass of an element.

    Args:
        number: Atomic number
        isotope: Isotope mass number, 0 for natural abundance

    Returns:
        Exact isotope mass when the isotope is known, the isotope number when
        it is not, the standard atomic weight for natural abundance, and 0.0
        for sentinels
    """
    if not 0 < number <= MAX_ATOMIC_NUMBER:
        return 0.0
    if isotope > 0:
        mass = Chem.GetPeriodicTable().GetMassForIsotope(number, isotope)
        return float(mass) if mass > 0 else float(isotope)
    return _standard_weight(number)


@lru_cache(maxsize=None)
def monoisotopic_mass(number: int) -> float:
    """Exact mass of the most common isotope; 0.0 for sentinels."""
    if not 0 < number <= MAX_ATOMIC_NUMBER:
        return 0.0
    return float(Chem.GetPeriodicTable().GetMostCommonIsotopeMass(number))


@lru_cache(maxsize=None)
def natural_isotopes(number: int) -> Tuple[Tuple[int, float, float], ...]:
    """Naturally occurring isotopes as ``(mass_number, exact_mass, fraction)``.

    Fractions sum to 1. Elements without abundance data report their most
    common isotope alone.
    """
    if not 0 < number <= MAX_ATOMIC_NUMBER:
        return ()
    table = Chem.GetPeriodicTable()
    common = standard_mass_number(number)
    found = []
    low = max(1, common - _ISOTOPE_WINDOW)
    for mass_number in range(low, common + _ISOTOPE_WINDOW + 1):
        abundance = table.GetAbundanceForIsotope(number, mass_number)
        if abundance > 0:
            mass = float(table.GetMassForIsotope(number, mass_number))
            found.append((mass_number, mass, abundance))
    if not found:
        return ((common, monoisotopic_mass(number), 1.0),)
    total = sum(abundance for _, _, abundance in found)
    return tuple((m, mass, abundance / total) for m, mass, abundance in found)
