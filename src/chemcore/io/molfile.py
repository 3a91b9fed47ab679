#!/usr/bin/env python3
# src/chemcore/io/molfile.py

"""
MDL Molfile V2000 reader and writer.

Layout of the fixed-width blocks (0-based columns):

    counts line   atoms 0-3, bonds 3-6, chiral flag 12-15
    atom line     x 0-10, y 10-20, z 20-30, symbol 31-34,
                  mass difference 34-36, charge code 36-39
    bond line     atom 1 0-3, atom 2 3-6, type 6-9, stereo 9-12

Everything after the bond block up to ``M  END`` is the properties block.
"""

import io
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, TextIO, Tuple, Union

from ..domain.elements import (
    SYMBOL_TO_NUMBER,
    element_to_string,
    standard_mass_number,
)
from ..domain.models.atom import RADICAL_DOUBLET
from ..domain.models.bond import BondDirection, BondOrder
from ..domain.models.molecule import Molecule
from ..domain.models.sgroups import (
    AttachmentPoint,
    DataSGroup,
    DisplayOption,
    MultipleGroup,
    SGroup,
    SGroupSubtype,
    SGroupType,
    SRUConnectivity,
    SRUGroup,
    Superatom,
    create_sgroup,
)
from ..exceptions import MolfileFormatError, PreconditionError
from ..utils.cancellation import check_cancelled
from .line_source import LineSource

logger = logging.getLogger(__name__)

PROGRAM_NAME = "chemcore"

# Legacy atom-block charge column: code -> formal charge.
CHARGE_FROM_CODE = {1: 3, 2: 2, 3: 1, 5: -1, 6: -2, 7: -3}
CODE_FROM_CHARGE = {charge: code for code, charge in CHARGE_FROM_CODE.items()}
DOUBLET_RADICAL_CODE = 4

BOND_ORDER_FROM_CODE = {
    1: BondOrder.SINGLE,
    2: BondOrder.DOUBLE,
    3: BondOrder.TRIPLE,
    4: BondOrder.AROMATIC,
}

STEREO_FROM_CODE = {1: BondDirection.UP, 6: BondDirection.DOWN, 4: BondDirection.EITHER}
CODE_FROM_STEREO = {direction: code for code, direction in STEREO_FROM_CODE.items()}

MIN_MASS_DIFF = -3
MAX_MASS_DIFF = 4

PAIRS_PER_LINE = 8
INDICES_PER_LINE = 15

Source = Union[str, TextIO, LineSource]


def _as_line_source(source: Source) -> LineSource:
    if isinstance(source, LineSource):
        return source
    return LineSource(source)


def _chunks(items: List, size: int):
    for start in range(0, len(items), size):
        yield items[start:start + size]


class MolfileLoader:
    """Read a single V2000 connection table.

    Args:
        source: Molfile text, an open text stream, or a ``LineSource``
            shared with an enclosing SDF reader
        cancel_event: Optional event checked between atom and bond lines
    """

    def __init__(self, source: Source, cancel_event: Optional[threading.Event] = None):
        self._lines = _as_line_source(source)
        self._cancel_event = cancel_event
        self._sgroup_by_id: Dict[int, SGroup] = {}

    def load(self) -> Molecule:
        """Load one molecule.

        Raises:
            MolfileFormatError: On truncated lines or non-numeric fields
            OperationCancelledError: If the cancel event is set
        """
        self._sgroup_by_id = {}
        mol = Molecule()

        mol.name = self._lines.require_line("header").strip()
        self._lines.require_line("header")
        self._lines.require_line("header")

        counts = self._lines.require_line("counts line")
        num_atoms, num_bonds, chiral = self._parse_counts_line(counts)
        mol.chiral = chiral

        for _ in range(num_atoms):
            check_cancelled(self._cancel_event, "Molfile loading")
            self._parse_atom_line(mol, self._lines.require_line("atom block"))

        for _ in range(num_bonds):
            check_cancelled(self._cancel_event, "Molfile loading")
            self._parse_bond_line(mol, self._lines.require_line("bond block"))

        self._read_properties_block(mol)

        if any(bond.order == BondOrder.AROMATIC for bond in mol.bonds):
            mol.aromatized = True
        return mol

    # Field helpers

    def _error(self, message: str) -> MolfileFormatError:
        return MolfileFormatError(message, self._lines.line_number)

    def _int_field(
        self, line: str, start: int, end: int, what: str, default: Optional[int] = None
    ) -> int:
        text = line[start:end].strip()
        if not text:
            if default is None:
                raise self._error(f"missing {what}")
            return default
        try:
            return int(text)
        except ValueError:
            raise self._error(f"invalid {what}: {text!r}") from None

    def _float_field(self, line: str, start: int, end: int, what: str) -> float:
        text = line[start:end].strip()
        try:
            return float(text)
        except ValueError:
            raise self._error(f"invalid {what}: {text!r}") from None

    # Blocks

    def _parse_counts_line(self, line: str) -> Tuple[int, int, bool]:
        if "V3000" in line:
            raise self._error("V3000 Molfiles are not supported")
        if len(line) < 6:
            raise self._error(f"counts line too short: {line!r}")
        num_atoms = self._int_field(line, 0, 3, "atom count")
        num_bonds = self._int_field(line, 3, 6, "bond count")
        chiral = self._int_field(line, 12, 15, "chiral flag", default=0)
        return num_atoms, num_bonds, chiral == 1

    def _parse_atom_line(self, mol: Molecule, line: str) -> None:
        if len(line) < 32:
            raise self._error(f"atom line too short: {line!r}")
        x = self._float_field(line, 0, 10, "x coordinate")
        y = self._float_field(line, 10, 20, "y coordinate")
        z = self._float_field(line, 20, 30, "z coordinate")
        symbol = line[31:34].strip()
        if not symbol:
            raise self._error("missing atom symbol")
        mass_diff = self._int_field(line, 34, 36, "mass difference", default=0)
        charge_code = self._int_field(line, 36, 39, "charge code", default=0)

        if symbol == "R#":
            idx = mol.add_rsite()
        elif symbol in SYMBOL_TO_NUMBER:
            idx = mol.add_atom(SYMBOL_TO_NUMBER[symbol])
            if mass_diff:
                mol.set_atom_isotope(idx, standard_mass_number(mol.atoms[idx].number) + mass_diff)
        else:
            logger.debug(
                f"Unknown element {symbol!r} on line {self._lines.line_number}, "
                "using pseudo atom"
            )
            idx = mol.add_pseudo_atom(symbol)
        mol.set_atom_xyz(idx, x, y, z)

        if charge_code == DOUBLET_RADICAL_CODE:
            mol.set_atom_radical(idx, RADICAL_DOUBLET)
        elif charge_code in CHARGE_FROM_CODE:
            mol.set_atom_charge(idx, CHARGE_FROM_CODE[charge_code])

    def _parse_bond_line(self, mol: Molecule, line: str) -> None:
        if len(line) < 9:
            raise self._error(f"bond line too short: {line!r}")
        begin = self._int_field(line, 0, 3, "first bond atom") - 1
        end = self._int_field(line, 3, 6, "second bond atom") - 1
        bond_type = self._int_field(line, 6, 9, "bond type")
        stereo = self._int_field(line, 9, 12, "bond stereo", default=0)

        if not (0 <= begin < mol.atom_count() and 0 <= end < mol.atom_count()):
            raise self._error(f"bond references missing atom: {begin + 1}, {end + 1}")
        try:
            bond_idx = mol.add_bond(begin, end, BOND_ORDER_FROM_CODE.get(bond_type, BondOrder.SINGLE))
        except PreconditionError as e:
            raise self._error(e.message) from e
        if stereo in STEREO_FROM_CODE:
            mol.set_bond_direction(bond_idx, STEREO_FROM_CODE[stereo])

    def _read_properties_block(self, mol: Molecule) -> None:
        handlers: Dict[str, Callable[[Molecule, str], None]] = {
            "M  CHG": self._parse_charges,
            "M  ISO": self._parse_isotopes,
            "M  RAD": self._parse_radicals,
            "M  RGP": self._parse_rgroups,
            "M  STY": self._parse_sgroup_types,
            "M  SST": self._parse_sgroup_subtypes,
            "M  SAL": self._parse_sgroup_atoms,
            "M  SBL": self._parse_sgroup_bonds,
            "M  SPA": self._parse_sgroup_parent_atoms,
            "M  SPL": self._parse_sgroup_parents,
            "M  SMT": self._parse_sgroup_text,
            "M  SCN": self._parse_sgroup_connectivity,
            "M  SDS": self._parse_sgroup_display,
            "M  SDT": self._parse_data_field,
            "M  SED": self._parse_data_value,
            "M  SAP": self._parse_attachment_points,
        }
        while True:
            line = self._lines.read_line()
            if line is None:
                return
            if line.startswith("M  END"):
                return
            if line.startswith("$$$$") or line.startswith(">"):
                # Properties block without M  END inside an SD record
                self._lines.push_back(line)
                return
            if line.startswith("A  "):
                self._parse_alias(mol, line)
                continue
            handler = handlers.get(line[:6])
            if handler is not None:
                handler(mol, line)
            else:
                logger.debug(f"Skipping property line {self._lines.line_number}: {line!r}")

    # Atom property lines

    def _fields(self, line: str) -> List[int]:
        try:
            return [int(token) for token in line[6:].split()]
        except ValueError:
            raise self._error(f"non-numeric field in {line[:6]!r} line") from None

    def _atom_pairs(self, mol: Molecule, line: str) -> List[Tuple[int, int]]:
        fields = self._fields(line)
        if not fields:
            raise self._error(f"missing entry count in {line[:6]!r} line")
        count = fields[0]
        values = fields[1:]
        if len(values) < 2 * count:
            raise self._error(f"{line[:6]!r} line declares {count} entries")
        pairs = []
        for k in range(count):
            atom_idx = values[2 * k] - 1
            if not 0 <= atom_idx < mol.atom_count():
                raise self._error(f"atom {atom_idx + 1} out of range")
            pairs.append((atom_idx, values[2 * k + 1]))
        return pairs

    def _parse_charges(self, mol: Molecule, line: str) -> None:
        for atom_idx, charge in self._atom_pairs(mol, line):
            mol.set_atom_charge(atom_idx, charge)

    def _parse_isotopes(self, mol: Molecule, line: str) -> None:
        for atom_idx, isotope in self._atom_pairs(mol, line):
            mol.set_atom_isotope(atom_idx, isotope)

    def _parse_radicals(self, mol: Molecule, line: str) -> None:
        for atom_idx, radical in self._atom_pairs(mol, line):
            mol.set_atom_radical(atom_idx, radical)

    def _parse_rgroups(self, mol: Molecule, line: str) -> None:
        for atom_idx, rgroup in self._atom_pairs(mol, line):
            atom = mol.atoms[atom_idx]
            if not atom.is_rsite or rgroup < 1:
                raise self._error(f"invalid R-group assignment for atom {atom_idx + 1}")
            mol.set_rsite_bits(atom_idx, atom.rgroup_bits | (1 << (rgroup - 1)))

    def _parse_alias(self, mol: Molecule, line: str) -> None:
        atom_idx = self._int_field(line, 3, 6, "alias atom") - 1
        if not 0 <= atom_idx < mol.atom_count():
            raise self._error(f"alias for missing atom {atom_idx + 1}")
        label = self._lines.require_line("atom alias").strip()
        if label:
            mol.set_pseudo_atom(atom_idx, label)

    # S-Group lines

    def _sgroup(self, sgroup_id: int) -> SGroup:
        try:
            return self._sgroup_by_id[sgroup_id]
        except KeyError:
            raise self._error(f"reference to undeclared S-Group {sgroup_id}") from None

    def _sgroup_pairs(self, line: str) -> List[Tuple[int, str]]:
        tokens = line[6:].split()
        if not tokens or not tokens[0].isdigit():
            raise self._error(f"missing entry count in {line[:6]!r} line")
        count = int(tokens[0])
        rest = tokens[1:]
        if len(rest) < 2 * count:
            raise self._error(f"{line[:6]!r} line declares {count} entries")
        pairs = []
        for k in range(count):
            sgroup_id = rest[2 * k]
            if not sgroup_id.isdigit():
                raise self._error(f"invalid S-Group number: {sgroup_id!r}")
            pairs.append((int(sgroup_id), rest[2 * k + 1]))
        return pairs

    def _sgroup_index_list(self, mol: Molecule, line: str) -> Tuple[SGroup, List[int]]:
        fields = self._fields(line)
        if len(fields) < 2 or len(fields) - 2 < fields[1]:
            raise self._error(f"truncated {line[:6]!r} line")
        sgroup = self._sgroup(fields[0])
        return sgroup, [value - 1 for value in fields[2:2 + fields[1]]]

    def _parse_sgroup_types(self, mol: Molecule, line: str) -> None:
        for sgroup_id, code in self._sgroup_pairs(line):
            sgroup = create_sgroup(SGroupType.from_code(code))
            sgroup.original_id = sgroup_id
            mol.sgroups.add(sgroup)
            self._sgroup_by_id[sgroup_id] = sgroup

    def _parse_sgroup_subtypes(self, mol: Molecule, line: str) -> None:
        for sgroup_id, code in self._sgroup_pairs(line):
            self._sgroup(sgroup_id).subtype = SGroupSubtype.from_code(code)

    def _parse_sgroup_connectivity(self, mol: Molecule, line: str) -> None:
        for sgroup_id, code in self._sgroup_pairs(line):
            sgroup = self._sgroup(sgroup_id)
            if isinstance(sgroup, SRUGroup):
                sgroup.connectivity = SRUConnectivity.from_code(code)

    def _parse_sgroup_atoms(self, mol: Molecule, line: str) -> None:
        sgroup, atoms = self._sgroup_index_list(mol, line)
        for atom_idx in atoms:
            if not 0 <= atom_idx < mol.atom_count():
                raise self._error(f"S-Group atom {atom_idx + 1} out of range")
        sgroup.atoms.extend(atoms)

    def _parse_sgroup_bonds(self, mol: Molecule, line: str) -> None:
        sgroup, bonds = self._sgroup_index_list(mol, line)
        for bond_idx in bonds:
            if not 0 <= bond_idx < mol.bond_count():
                raise self._error(f"S-Group bond {bond_idx + 1} out of range")
        sgroup.bonds.extend(bonds)

    def _parse_sgroup_parent_atoms(self, mol: Molecule, line: str) -> None:
        sgroup, atoms = self._sgroup_index_list(mol, line)
        if isinstance(sgroup, MultipleGroup):
            sgroup.parent_atoms.extend(atoms)

    def _parse_sgroup_parents(self, mol: Molecule, line: str) -> None:
        for sgroup_id, parent in self._sgroup_pairs(line):
            if not parent.isdigit():
                raise self._error(f"invalid parent S-Group: {parent!r}")
            child = self._sgroup(sgroup_id)
            parent_group = self._sgroup(int(parent))
            child.parent_idx = next(
                i for i, sgroup in enumerate(mol.sgroups) if sgroup is parent_group
            )

    def _parse_sgroup_display(self, mol: Molecule, line: str) -> None:
        # M  SDS EXPn15 sss ...
        if line[7:10] != "EXP":
            return
        try:
            fields = [int(token) for token in line[10:].split()]
        except ValueError:
            raise self._error("non-numeric field in 'M  SDS' line") from None
        for sgroup_id in fields[1:1 + fields[0]] if fields else []:
            self._sgroup(sgroup_id).display_option = DisplayOption.EXPANDED

    def _parse_sgroup_text(self, mol: Molecule, line: str) -> None:
        sgroup = self._sgroup(self._int_field(line, 7, 10, "S-Group number"))
        text = line[11:].strip()
        if isinstance(sgroup, Superatom):
            sgroup.label = text
        elif isinstance(sgroup, SRUGroup):
            sgroup.subscript = text
        elif isinstance(sgroup, MultipleGroup):
            try:
                sgroup.multiplier = int(text)
            except ValueError:
                raise self._error(f"invalid multiplier: {text!r}") from None

    def _parse_data_field(self, mol: Molecule, line: str) -> None:
        sgroup = self._sgroup(self._int_field(line, 7, 10, "S-Group number"))
        if isinstance(sgroup, DataSGroup):
            sgroup.name = line[11:41].strip()
            sgroup.field_type = line[41:43].strip() or "T"
            sgroup.units = line[43:63].strip()

    def _parse_data_value(self, mol: Molecule, line: str) -> None:
        sgroup = self._sgroup(self._int_field(line, 7, 10, "S-Group number"))
        if isinstance(sgroup, DataSGroup):
            sgroup.value += line[11:].rstrip()

    def _parse_attachment_points(self, mol: Molecule, line: str) -> None:
        # M  SAP sssnnn aaa lll cc ...
        sgroup = self._sgroup(self._int_field(line, 7, 10, "S-Group number"))
        count = self._int_field(line, 10, 13, "attachment point count")
        for k in range(count):
            chunk = line[13 + 11 * k:24 + 11 * k]
            if len(chunk) < 8:
                raise self._error("truncated attachment point entry")
            atom_idx = self._int_field(chunk, 1, 4, "attachment atom") - 1
            leaving = self._int_field(chunk, 5, 8, "leaving atom", default=0) - 1
            if isinstance(sgroup, Superatom):
                sgroup.attachment_points.append(
                    AttachmentPoint(atom_idx, leaving, chunk[9:11].strip())
                )


class MolfileSaver:
    """Write molecules as V2000 Molfiles.

    Args:
        sink: Writable text stream
        timestamp: Time written into header line 2 (defaults to now)
    """

    def __init__(self, sink: TextIO, timestamp: Optional[datetime] = None):
        self._sink = sink
        self._timestamp = timestamp

    def save(self, mol: Molecule) -> None:
        self._write_header(mol)
        self._write_line(
            f"{mol.atom_count():3d}{mol.bond_count():3d}  0  0"
            f"{1 if mol.chiral else 0:3d}  0  0  0  0  0999 V2000"
        )
        aliases: List[Tuple[int, str]] = []
        for idx in range(mol.atom_count()):
            alias = self._write_atom_line(mol, idx)
            if alias:
                aliases.append((idx, alias))
        for bond in mol.bonds:
            self._write_line(
                f"{bond.begin + 1:3d}{bond.end + 1:3d}{int(bond.order):3d}"
                f"{CODE_FROM_STEREO.get(bond.direction, 0):3d}  0  0  0"
            )

        atoms = mol.atoms
        self._write_atom_pairs("CHG", [(i, a.charge) for i, a in enumerate(atoms) if a.charge])
        self._write_atom_pairs("ISO", [(i, a.isotope) for i, a in enumerate(atoms) if a.isotope > 0])
        self._write_atom_pairs("RAD", [(i, a.radical) for i, a in enumerate(atoms) if a.radical])
        self._write_atom_pairs(
            "RGP",
            [(i, rgroup) for i, a in enumerate(atoms) if a.is_rsite for rgroup in a.rgroups()],
        )
        for idx, alias in aliases:
            self._write_line(f"A  {idx + 1:3d}")
            self._write_line(alias)
        self._write_sgroups(mol)
        self._write_line("M  END")

    def _write_line(self, line: str) -> None:
        self._sink.write(line + "\n")

    def _write_header(self, mol: Molecule) -> None:
        stamp = (self._timestamp or datetime.now()).strftime("%m%d%y%H%M")
        has_z = any(atom.coordinates[2] != 0.0 for atom in mol.atoms)
        self._write_line(mol.name)
        self._write_line(f"  {PROGRAM_NAME:<8.8}{stamp}{'3D' if has_z else '2D'}")
        self._write_line("")

    def _write_atom_line(self, mol: Molecule, idx: int) -> Optional[str]:
        """Write one atom line; return the alias text if the label needs one."""
        atom = mol.atoms[idx]
        alias = None
        if atom.is_rsite:
            symbol = "R#"
        elif atom.is_pseudo or atom.is_template:
            label = atom.pseudo_atom_value if atom.is_pseudo else atom.template_name
            if len(label) <= 3 and label not in SYMBOL_TO_NUMBER and label != "R#":
                symbol = label
            else:
                symbol = "A"
                alias = label
        else:
            symbol = element_to_string(atom.number)

        mass_diff = 0
        if atom.isotope > 0 and atom.is_real_element:
            mass_diff = atom.isotope - standard_mass_number(atom.number)
            mass_diff = max(MIN_MASS_DIFF, min(MAX_MASS_DIFF, mass_diff))

        charge_code = CODE_FROM_CHARGE.get(atom.charge, 0)
        if charge_code == 0 and atom.charge == 0 and atom.radical == RADICAL_DOUBLET:
            charge_code = DOUBLET_RADICAL_CODE

        x, y, z = atom.coordinates
        self._write_line(
            f"{x:10.4f}{y:10.4f}{z:10.4f} {symbol:<3}{mass_diff:2d}{charge_code:3d}"
            "  0  0  0  0  0  0  0  0  0  0"
        )
        return alias

    def _write_atom_pairs(self, tag: str, pairs: List[Tuple[int, int]]) -> None:
        for chunk in _chunks(pairs, PAIRS_PER_LINE):
            body = "".join(f" {idx + 1:3d} {value:3d}" for idx, value in chunk)
            self._write_line(f"M  {tag}{len(chunk):3d}{body}")

    def _write_index_list(self, tag: str, sgroup_id: int, indices: List[int]) -> None:
        for chunk in _chunks(indices, INDICES_PER_LINE):
            body = "".join(f" {idx + 1:3d}" for idx in chunk)
            self._write_line(f"M  {tag} {sgroup_id:3d}{len(chunk):3d}{body}")

    def _write_sgroup_pairs(self, tag: str, pairs: List[Tuple[int, str]]) -> None:
        for chunk in _chunks(pairs, PAIRS_PER_LINE):
            body = "".join(f" {sgroup_id:3d} {text:<3}" for sgroup_id, text in chunk)
            self._write_line(f"M  {tag}{len(chunk):3d}{body}".rstrip())

    def _write_sgroups(self, mol: Molecule) -> None:
        groups = list(mol.sgroups)
        if not groups:
            return
        numbered = [(i + 1, sgroup) for i, sgroup in enumerate(groups)]

        self._write_sgroup_pairs("STY", [(n, sg.sgroup_type.code) for n, sg in numbered])
        self._write_sgroup_pairs(
            "SST",
            [(n, sg.subtype.value) for n, sg in numbered if sg.subtype != SGroupSubtype.NONE],
        )
        self._write_sgroup_pairs(
            "SPL",
            [(n, f"{sg.parent_idx + 1:3d}") for n, sg in numbered if sg.parent_idx >= 0],
        )
        self._write_sgroup_pairs(
            "SCN",
            [(n, sg.connectivity.code) for n, sg in numbered if isinstance(sg, SRUGroup)],
        )

        for n, sgroup in numbered:
            self._write_index_list("SAL", n, sgroup.atoms)
            self._write_index_list("SBL", n, sgroup.bonds)
            if isinstance(sgroup, MultipleGroup):
                self._write_index_list("SPA", n, sgroup.parent_atoms)
                self._write_line(f"M  SMT {n:3d} {sgroup.multiplier}")
            elif isinstance(sgroup, Superatom):
                if sgroup.label:
                    self._write_line(f"M  SMT {n:3d} {sgroup.label}")
                for chunk in _chunks(sgroup.attachment_points, 6):
                    body = "".join(
                        f" {p.atom_idx + 1:3d} {p.leaving_idx + 1:3d} {p.apid:<2}"
                        for p in chunk
                    )
                    self._write_line(f"M  SAP {n:3d}{len(chunk):3d}{body}".rstrip())
            elif isinstance(sgroup, SRUGroup):
                if sgroup.subscript:
                    self._write_line(f"M  SMT {n:3d} {sgroup.subscript}")
            elif isinstance(sgroup, DataSGroup):
                self._write_line(
                    f"M  SDT {n:3d} {sgroup.name:<30.30}{sgroup.field_type:<2.2}"
                    f"{sgroup.units:<20.20}".rstrip()
                )
                if sgroup.value:
                    self._write_line(f"M  SED {n:3d} {sgroup.value}")

        expanded = [n for n, sg in numbered if sg.display_option == DisplayOption.EXPANDED]
        for chunk in _chunks(expanded, INDICES_PER_LINE):
            body = "".join(f" {n:3d}" for n in chunk)
            self._write_line(f"M  SDS EXP{len(chunk):3d}{body}")


def parse_molfile(text: str, cancel_event: Optional[threading.Event] = None) -> Molecule:
    """Parse a Molfile held in a string."""
    return MolfileLoader(text, cancel_event).load()


def to_molfile(mol: Molecule, timestamp: Optional[datetime] = None) -> str:
    """Serialize a molecule to a Molfile string."""
    buffer = io.StringIO()
    MolfileSaver(buffer, timestamp).save(mol)
    return buffer.getvalue()


def load_molfile(
    path: Union[str, Path], cancel_event: Optional[threading.Event] = None
) -> Molecule:
    with open(path, "r") as f:
        return MolfileLoader(f, cancel_event).load()


def save_molfile(mol: Molecule, path: Union[str, Path]) -> None:
    with open(path, "w") as f:
        MolfileSaver(f).save(mol)
