#!/usr/bin/env python3
# src/chemcore/io/smiles.py

"""
SMILES line notation reader and writer.

The parser is a single left-to-right pass over the input with no
backtracking. Its state is the index of the last atom written, a stack of
branch points, the table of open ring labels and the bond order waiting for
the next atom. The writer is a non-canonical depth-first serialization.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from ..domain.elements import (
    AROMATIC_ORGANIC,
    AROMATIC_SYMBOL_BY_NUMBER,
    ELEM_C,
    SYMBOL_TO_NUMBER,
    element_to_string,
)
from ..domain.models.bond import BondOrder
from ..domain.models.molecule import ATOM_AROMATIC, Molecule
from ..exceptions import PreconditionError, SmilesParseError
from ..utils.cancellation import check_cancelled

logger = logging.getLogger(__name__)

_BOND_SYMBOLS = {
    "-": BondOrder.SINGLE,
    "=": BondOrder.DOUBLE,
    "#": BondOrder.TRIPLE,
    ":": BondOrder.AROMATIC,
    "/": BondOrder.SINGLE,
    "\\": BondOrder.SINGLE,
}


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


@dataclass
class _RingOpening:
    atom_idx: int
    order: Optional[BondOrder]
    position: int


@dataclass
class _BracketAtom:
    symbol: str
    aromatic: bool
    isotope: int = 0
    hydrogens: int = 0
    charge: int = 0


class SmilesParser:
    """Parse SMILES strings into ``Molecule`` objects.

    A parser instance holds no state between calls and may be reused.
    """

    def parse(
        self, text: str, cancel_event: Optional[threading.Event] = None
    ) -> Molecule:
        """Parse a SMILES string.

        Args:
            text: SMILES string
            cancel_event: Optional event checked while parsing

        Returns:
            The parsed molecule

        Raises:
            SmilesParseError: On malformed input, with the character offset
            OperationCancelledError: If ``cancel_event`` is set
        """
        for pos, ch in enumerate(text):
            if not ch.isascii():
                raise SmilesParseError(f"non-ASCII character {ch!r}", pos)

        mol = Molecule()
        lowercase: Set[int] = set()
        branches: List[int] = []
        rings: Dict[int, _RingOpening] = {}
        last_atom = -1
        pending: Optional[BondOrder] = None

        i = 0
        n = len(text)
        while i < n:
            check_cancelled(cancel_event, "SMILES parsing")
            ch = text[i]

            if ch.isspace():
                i += 1
                continue

            if ch == "(":
                if last_atom < 0:
                    raise SmilesParseError("branch without previous atom", i)
                branches.append(last_atom)
                i += 1
                continue

            if ch == ")":
                if not branches:
                    raise SmilesParseError("unmatched ')'", i)
                last_atom = branches.pop()
                i += 1
                continue

            if ch in _BOND_SYMBOLS:
                pending = _BOND_SYMBOLS[ch]
                i += 1
                continue

            if ch == ".":
                last_atom = -1
                pending = None
                i += 1
                continue

            if _is_digit(ch) or ch == "%":
                label, next_i = self._read_ring_label(text, i)
                if last_atom < 0:
                    raise SmilesParseError("ring label without previous atom", i)
                opening = rings.pop(label, None)
                if opening is None:
                    rings[label] = _RingOpening(last_atom, pending, i)
                else:
                    order = pending or opening.order
                    if order is None:
                        order = self._implied_order(opening.atom_idx, last_atom, lowercase)
                    self._bond(mol, opening.atom_idx, last_atom, order, i)
                pending = None
                i = next_i
                continue

            if ch == "[":
                atom_idx, i = self._read_bracket_atom(mol, text, i, lowercase)
            else:
                atom_idx, i = self._read_bare_atom(mol, text, i, lowercase)

            if last_atom >= 0:
                order = pending
                if order is None:
                    order = self._implied_order(last_atom, atom_idx, lowercase)
                self._bond(mol, last_atom, atom_idx, order, i)
            pending = None
            last_atom = atom_idx

        if rings:
            first = min(rings.values(), key=lambda r: r.position)
            raise SmilesParseError("unclosed ring bonds", first.position)

        if any(bond.order == BondOrder.AROMATIC for bond in mol.bonds):
            mol.aromatized = True
        return mol

    @staticmethod
    def _implied_order(a: int, b: int, lowercase: Set[int]) -> BondOrder:
        if a in lowercase and b in lowercase:
            return BondOrder.AROMATIC
        return BondOrder.SINGLE

    @staticmethod
    def _bond(mol: Molecule, a: int, b: int, order: BondOrder, position: int) -> None:
        try:
            mol.add_bond(a, b, order)
        except PreconditionError as e:
            raise SmilesParseError(e.message, position) from e

    @staticmethod
    def _read_ring_label(text: str, i: int) -> Tuple[int, int]:
        if text[i] != "%":
            return int(text[i]), i + 1
        digits = text[i + 1:i + 3]
        if len(digits) != 2 or not all(_is_digit(d) for d in digits):
            raise SmilesParseError("'%' must be followed by two digits", i)
        return int(digits), i + 3

    def _read_bare_atom(
        self, mol: Molecule, text: str, i: int, lowercase: Set[int]
    ) -> Tuple[int, int]:
        ch = text[i]
        if ch in AROMATIC_ORGANIC:
            idx = mol.add_atom(AROMATIC_ORGANIC[ch])
            lowercase.add(idx)
            return idx, i + 1

        if ch == "*":
            return mol.add_pseudo_atom("*"), i + 1

        if not ch.isupper():
            raise SmilesParseError(f"unexpected character {ch!r}", i)

        if i + 1 < len(text):
            pair = text[i:i + 2]
            second = text[i + 1]
            if (
                second.islower()
                and second not in AROMATIC_ORGANIC
                and pair in SYMBOL_TO_NUMBER
            ):
                return mol.add_atom(SYMBOL_TO_NUMBER[pair]), i + 2

        if ch not in SYMBOL_TO_NUMBER:
            raise SmilesParseError(f"unknown element {ch!r}", i)
        return mol.add_atom(SYMBOL_TO_NUMBER[ch]), i + 1

    def _read_bracket_atom(
        self, mol: Molecule, text: str, start: int, lowercase: Set[int]
    ) -> Tuple[int, int]:
        end = text.find("]", start)
        if end < 0:
            raise SmilesParseError("unclosed bracket", start)

        label = text[start + 1:end]
        if not label:
            raise SmilesParseError("empty bracket atom", start)
        try:
            spec = self._parse_bracket(text, start, end)
        except SmilesParseError:
            # Labels such as R1 or CO2Et are kept verbatim.
            logger.debug(f"Bracket atom {label!r} at position {start} kept as pseudo atom")
            idx = mol.add_pseudo_atom(label)
            mol.set_explicit_implicit_h(idx, 0)
            return idx, end + 1

        if spec.aromatic:
            idx = mol.add_atom(AROMATIC_ORGANIC[spec.symbol])
            lowercase.add(idx)
        elif spec.symbol in SYMBOL_TO_NUMBER:
            idx = mol.add_atom(SYMBOL_TO_NUMBER[spec.symbol])
        else:
            logger.debug(
                f"Unknown element {spec.symbol!r} at position {start}, using pseudo atom"
            )
            idx = mol.add_pseudo_atom(spec.symbol)

        if spec.isotope:
            mol.set_atom_isotope(idx, spec.isotope)
        if spec.charge:
            mol.set_atom_charge(idx, spec.charge)
        mol.set_explicit_implicit_h(idx, spec.hydrogens)
        return idx, end + 1

    @staticmethod
    def _parse_bracket(text: str, start: int, end: int) -> _BracketAtom:
        i = start + 1

        j = i
        while j < end and _is_digit(text[j]):
            j += 1
        isotope = int(text[i:j]) if j > i else 0
        i = j

        if i >= end:
            raise SmilesParseError("missing element in bracket atom", i)
        ch = text[i]
        if ch in AROMATIC_ORGANIC:
            symbol, aromatic = ch, True
            i += 1
        elif ch == "*":
            symbol, aromatic = ch, False
            i += 1
        elif ch.isupper():
            aromatic = False
            if i + 1 < end and text[i + 1].islower():
                symbol = text[i:i + 2]
                i += 2
            else:
                symbol = ch
                i += 1
        else:
            raise SmilesParseError(f"invalid element in bracket atom: {ch!r}", i)

        # Stereo marks are consumed but not stored.
        while i < end and text[i] == "@":
            i += 1

        hydrogens = 0
        if i < end and text[i] == "H":
            i += 1
            j = i
            while j < end and _is_digit(text[j]):
                j += 1
            hydrogens = int(text[i:j]) if j > i else 1
            i = j

        charge = 0
        if i < end and text[i] in "+-":
            sign = 1 if text[i] == "+" else -1
            i += 1
            if i < end and text[i] == text[i - 1]:
                charge = 2 * sign
                i += 1
            else:
                j = i
                while j < end and _is_digit(text[j]):
                    j += 1
                charge = sign * (int(text[i:j]) if j > i else 1)
                i = j

        if i != end:
            raise SmilesParseError("expected ']'", i)
        return _BracketAtom(symbol, aromatic, isotope, hydrogens, charge)


class SmilesSerializer:
    """Write a ``Molecule`` as (non-canonical) SMILES.

    Atoms are visited depth-first starting at atom 0; every further
    disconnected component starts at its lowest unvisited atom and is joined
    with ``.``. Ring closure labels are numbered in the order the closing
    bonds are found and written at both ring atoms.
    """

    def serialize(self, mol: Molecule) -> str:
        visited = [False] * mol.atom_count()
        components = []
        for root in range(mol.atom_count()):
            if visited[root]:
                continue
            children, ring_marks = self._plan(mol, root, visited)
            components.append(self._write(mol, root, children, ring_marks))
        return ".".join(components)

    def _plan(self, mol: Molecule, root: int, visited: List[bool]):
        """Depth-first pass classifying bonds as tree edges or ring closures."""
        children: Dict[int, List[Tuple[int, int]]] = {}
        ring_marks: Dict[int, List[Tuple[int, int, bool]]] = {}
        used_bonds: Set[int] = set()
        ring_number = 0

        visited[root] = True
        stack = [(root, iter(mol.get_neighbor_bonds(root)))]
        while stack:
            atom_idx, bonds = stack[-1]
            bond_idx = next(bonds, None)
            if bond_idx is None:
                stack.pop()
                continue
            if bond_idx in used_bonds:
                continue
            used_bonds.add(bond_idx)
            other = mol.get_other_bond_end(bond_idx, atom_idx)
            if visited[other]:
                ring_number += 1
                ring_marks.setdefault(other, []).append((ring_number, bond_idx, False))
                ring_marks.setdefault(atom_idx, []).append((ring_number, bond_idx, True))
            else:
                visited[other] = True
                children.setdefault(atom_idx, []).append((bond_idx, other))
                stack.append((other, iter(mol.get_neighbor_bonds(other))))
        return children, ring_marks

    def _write(self, mol: Molecule, root: int, children, ring_marks) -> str:
        out: List[str] = []
        work: List[Tuple] = [("atom", root, -1)]
        while work:
            item = work.pop()
            if item[0] == "text":
                out.append(item[1])
                continue

            _, atom_idx, via_bond = item
            if via_bond >= 0:
                out.append(self._bond_symbol(mol, via_bond))
            out.append(self._atom_symbol(mol, atom_idx))
            for number, bond_idx, closing in ring_marks.get(atom_idx, []):
                if closing:
                    out.append(self._bond_symbol(mol, bond_idx))
                out.append(str(number) if number < 10 else f"%{number:02d}")

            branches = children.get(atom_idx, [])
            pending: List[Tuple] = []
            for k, (bond_idx, child) in enumerate(branches):
                if k < len(branches) - 1:
                    pending.extend(
                        [("text", "("), ("atom", child, bond_idx), ("text", ")")]
                    )
                else:
                    pending.append(("atom", child, bond_idx))
            work.extend(reversed(pending))
        return "".join(out)

    @staticmethod
    def _written_aromatic(mol: Molecule, atom_idx: int) -> bool:
        atom = mol.atoms[atom_idx]
        return (
            atom.number in AROMATIC_SYMBOL_BY_NUMBER
            and mol.get_atom_aromaticity(atom_idx) == ATOM_AROMATIC
        )

    def _bond_symbol(self, mol: Molecule, bond_idx: int) -> str:
        bond = mol.get_bond(bond_idx)
        both_aromatic = self._written_aromatic(mol, bond.begin) and self._written_aromatic(
            mol, bond.end
        )
        if bond.order == BondOrder.DOUBLE:
            return "="
        if bond.order == BondOrder.TRIPLE:
            return "#"
        if bond.order == BondOrder.AROMATIC:
            return "" if both_aromatic else ":"
        return "-" if both_aromatic else ""

    def _atom_symbol(self, mol: Molecule, atom_idx: int) -> str:
        atom = mol.atoms[atom_idx]
        if atom.is_pseudo or atom.is_template:
            label = atom.pseudo_atom_value if atom.is_pseudo else atom.template_name
            if not label.isascii() or "[" in label or "]" in label:
                raise PreconditionError(
                    f"label {label!r} of atom #{atom_idx} cannot be written as SMILES"
                )
            return f"[{label}]"
        if atom.is_rsite:
            return "[*]"

        aromatic = self._written_aromatic(mol, atom_idx)
        hydrogens = mol.get_implicit_h(atom_idx)
        if aromatic:
            symbol = AROMATIC_SYMBOL_BY_NUMBER[atom.number]
            inferred = (
                max(0, 3 - len(mol.get_neighbor_bonds(atom_idx)))
                if atom.number == ELEM_C
                else 0
            )
            if not atom.isotope and not atom.charge and hydrogens == inferred:
                return symbol
        else:
            symbol = element_to_string(atom.number)

        parts = ["["]
        if atom.isotope:
            parts.append(str(atom.isotope))
        parts.append(symbol)
        if hydrogens == 1:
            parts.append("H")
        elif hydrogens > 1:
            parts.append(f"H{hydrogens}")
        if atom.charge:
            sign = "+" if atom.charge > 0 else "-"
            magnitude = abs(atom.charge)
            parts.append(sign if magnitude == 1 else f"{sign}{magnitude}")
        parts.append("]")
        return "".join(parts)


def parse_smiles(text: str, cancel_event: Optional[threading.Event] = None) -> Molecule:
    """Convenience wrapper around ``SmilesParser().parse``."""
    return SmilesParser().parse(text, cancel_event)


def to_smiles(mol: Molecule) -> str:
    """Convenience wrapper around ``SmilesSerializer().serialize``."""
    return SmilesSerializer().serialize(mol)
