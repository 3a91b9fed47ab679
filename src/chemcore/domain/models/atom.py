#!/usr/bin/env python3
# src/chemcore/domain/models/atom.py

"""
Domain model representing an atom in a molecular graph.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from ...exceptions import InvalidAtomError
from ..elements import ELEM_PSEUDO, ELEM_RSITE, ELEM_TEMPLATE

RADICAL_NONE = 0
RADICAL_SINGLET = 2
RADICAL_DOUBLET = 3
RADICAL_TRIPLET = 4


@dataclass
class Atom:
    """Represents an atom in a molecular graph.

    Negative atomic numbers are sentinels: ``ELEM_PSEUDO`` atoms carry
    ``pseudo_atom_value``, ``ELEM_TEMPLATE`` atoms carry ``template_name``,
    and ``ELEM_RSITE`` atoms carry their R-group membership in ``rgroup_bits``.
    """

    number: int
    charge: int = 0
    isotope: int = 0
    radical: int = RADICAL_NONE
    explicit_valence: Optional[int] = None
    explicit_implicit_h: Optional[int] = None
    pseudo_atom_value: str = ""
    template_name: str = ""
    template_occurrence: int = -1
    rgroup_bits: int = 0
    coordinates: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Check that a sentinel atomic number carries its label.

        Raises:
            InvalidAtomError: If the label is missing
        """
        if self.number == ELEM_PSEUDO and not self.pseudo_atom_value:
            raise InvalidAtomError("pseudo atom requires a label")
        if self.number == ELEM_TEMPLATE and not self.template_name:
            raise InvalidAtomError("template atom requires a template name")

    @property
    def is_pseudo(self) -> bool:
        return self.number == ELEM_PSEUDO

    @property
    def is_rsite(self) -> bool:
        return self.number == ELEM_RSITE

    @property
    def is_template(self) -> bool:
        return self.number == ELEM_TEMPLATE

    @property
    def is_real_element(self) -> bool:
        return self.number > 0

    def rgroups(self):
        """R-group numbers (1-based) encoded in ``rgroup_bits``."""
        return [bit + 1 for bit in range(32) if self.rgroup_bits & (1 << bit)]
