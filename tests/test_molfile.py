import io
import threading
from datetime import datetime

import pytest
from rdkit import Chem

from chemcore.domain.elements import ELEM_C, ELEM_N, ELEM_O
from chemcore.domain.models import (
    AttachmentPoint,
    BondDirection,
    BondOrder,
    DataSGroup,
    DisplayOption,
    Molecule,
    MultipleGroup,
    SGroupSubtype,
    SGroupType,
    SRUConnectivity,
    SRUGroup,
    Superatom,
)
from chemcore.domain.models.atom import RADICAL_DOUBLET
from chemcore.exceptions import MolfileFormatError, OperationCancelledError
from chemcore.io.molfile import (
    MolfileLoader,
    load_molfile,
    parse_molfile,
    save_molfile,
    to_molfile,
)
from chemcore.io.smiles import parse_smiles

STAMP = datetime(2024, 1, 1)

ETHANOL = """ethanol
  handmade

  3  2  0  0  0  0  0  0  0  0999 V2000
    0.0000    0.0000    0.0000 C   0  0  0  0  0  0  0  0  0  0  0  0
    1.5000    0.0000    0.0000 C   0  0  0  0  0  0  0  0  0  0  0  0
    2.2500    1.2990    0.0000 O   0  0  0  0  0  0  0  0  0  0  0  0
  1  2  1  0  0  0  0
  2  3  1  0  0  0  0
M  END
"""


def _molfile(atom_lines, bond_lines=(), props=(), counts=None):
    counts = counts or f"{len(atom_lines):3d}{len(bond_lines):3d}  0  0  0  0  0  0  0  0999 V2000"
    lines = ["", "", "", counts, *atom_lines, *bond_lines, *props, "M  END"]
    return "\n".join(lines) + "\n"


def _atom_line(symbol, mass_diff=0, charge_code=0, x=0.0):
    return (
        f"{x:10.4f}{0.0:10.4f}{0.0:10.4f} {symbol:<3}{mass_diff:2d}{charge_code:3d}"
        "  0  0  0  0  0  0  0  0  0  0"
    )


def test_load_ethanol():
    mol = parse_molfile(ETHANOL)
    assert mol.name == "ethanol"
    assert mol.atom_count() == 3
    assert mol.bond_count() == 2
    assert [a.number for a in mol.atoms] == [ELEM_C, ELEM_C, ELEM_O]
    assert mol.atoms[2].coordinates == (2.25, 1.299, 0.0)
    assert mol.get_implicit_h(0) == 3
    assert mol.chiral is False


def test_counts_line_scenario():
    text = _molfile(
        [_atom_line("C"), _atom_line("C"), _atom_line("O")],
        ["  1  2  1  0  0  0  0", "  2  3  1  0  0  0  0"],
        counts="  3  2  0  0  0  0  0  0  0  0999 V2000",
    )
    mol = parse_molfile(text)
    assert (mol.atom_count(), mol.bond_count()) == (3, 2)


def test_chiral_flag():
    text = _molfile([_atom_line("C")], counts="  1  0  0  0  1  0  0  0  0  0999 V2000")
    assert parse_molfile(text).chiral is True


def test_bond_types_and_stereo():
    text = _molfile(
        [_atom_line("C"), _atom_line("C"), _atom_line("N"), _atom_line("C")],
        [
            "  1  2  2  0  0  0  0",
            "  2  3  3  0  0  0  0",
            "  1  4  1  1  0  0  0",
        ],
    )
    mol = parse_molfile(text)
    assert [b.order for b in mol.bonds] == [BondOrder.DOUBLE, BondOrder.TRIPLE, BondOrder.SINGLE]
    assert mol.bonds[2].direction == BondDirection.UP


def test_atom_block_charges_and_radical():
    text = _molfile([_atom_line("N", charge_code=3), _atom_line("O", charge_code=5), _atom_line("C", charge_code=4)])
    mol = parse_molfile(text)
    assert [a.charge for a in mol.atoms] == [1, -1, 0]
    assert mol.atoms[2].radical == RADICAL_DOUBLET


def test_property_block_overrides_charges():
    text = _molfile(
        [_atom_line("N", charge_code=3), _atom_line("C")],
        ["  1  2  1  0  0  0  0"],
        ["M  CHG  2   1   5   2  -1"],
    )
    mol = parse_molfile(text)
    assert [a.charge for a in mol.atoms] == [5, -1]


def test_isotopes():
    text = _molfile(
        [_atom_line("C", mass_diff=1), _atom_line("C")],
        props=["M  ISO  1   2  14"],
    )
    mol = parse_molfile(text)
    assert [a.isotope for a in mol.atoms] == [13, 14]


def test_unknown_symbol_becomes_pseudo_atom():
    mol = parse_molfile(_molfile([_atom_line("Ph")]))
    assert mol.atoms[0].is_pseudo
    assert mol.atoms[0].pseudo_atom_value == "Ph"


def test_rsite_and_rgroups():
    text = _molfile([_atom_line("R#")], props=["M  RGP  2   1   1   1   3"])
    mol = parse_molfile(text)
    atom = mol.atoms[0]
    assert atom.is_rsite
    assert atom.rgroups() == [1, 3]


def test_alias_lines():
    text = _molfile([_atom_line("A"), _atom_line("C")], props=["A    1", "Boc"])
    mol = parse_molfile(text)
    assert mol.atoms[0].pseudo_atom_value == "Boc"


def test_unknown_property_lines_are_skipped():
    text = _molfile([_atom_line("C")], props=["M  ZZZ  1   1   1"])
    assert parse_molfile(text).atom_count() == 1


def test_missing_m_end_at_end_of_input():
    text = "\n\n\n  1  0  0  0  0  0  0  0  0  0999 V2000\n" + _atom_line("C") + "\n"
    assert parse_molfile(text).atom_count() == 1


@pytest.mark.parametrize(
    "text, line_number",
    [
        ("name\n\n", 3),
        ("\n\n\n  1\n", 4),
        ("\n\n\n  x  0  0  0  0  0  0  0  0  0999 V2000\n", 4),
        ("\n\n\n  0  0  0  0  0  0  0  0  0  0999 V3000\n", 4),
        ("\n\n\n  1  0  0  0  0  0  0  0  0  0999 V2000\n    0.0000    0.0000\n", 5),
        ("\n\n\n  1  0  0  0  0  0  0  0  0  0999 V2000\n", 5),
    ],
)
def test_format_errors_report_line(text, line_number):
    with pytest.raises(MolfileFormatError) as exc_info:
        parse_molfile(text)
    assert exc_info.value.line_number == line_number
    assert str(exc_info.value).startswith(f"line {line_number}: ")


def test_bond_to_missing_atom():
    text = _molfile([_atom_line("C")], ["  1  2  1  0  0  0  0"])
    with pytest.raises(MolfileFormatError) as exc_info:
        parse_molfile(text)
    assert exc_info.value.line_number == 6


def test_bad_coordinate():
    line = "    abcdef    0.0000    0.0000 C   0  0  0  0  0  0  0  0  0  0  0  0"
    with pytest.raises(MolfileFormatError):
        parse_molfile(_molfile([line]))


def test_cancellation():
    event = threading.Event()
    event.set()
    with pytest.raises(OperationCancelledError):
        MolfileLoader(ETHANOL, event).load()


def test_saved_layout():
    mol = Molecule()
    mol.add_atom(ELEM_C)
    mol.add_atom(ELEM_C)
    mol.add_bond(0, 1)
    lines = to_molfile(mol, timestamp=STAMP).splitlines()

    assert lines[0] == ""
    assert lines[1] == "  chemcore01012400002D"
    assert lines[2] == ""
    assert lines[3] == "  2  1  0  0  0  0  0  0  0  0999 V2000"
    assert lines[4] == "    0.0000    0.0000    0.0000 C   0  0  0  0  0  0  0  0  0  0  0  0"
    assert lines[6] == "  1  2  1  0  0  0  0"
    assert lines[-1] == "M  END"


def test_saved_header_flags_3d():
    mol = Molecule("sample")
    idx = mol.add_atom(ELEM_N)
    mol.set_atom_xyz(idx, 1.0, 2.0, 3.0)
    lines = to_molfile(mol, timestamp=STAMP).splitlines()
    assert lines[0] == "sample"
    assert lines[1].endswith("3D")
    assert lines[4].startswith("    1.0000    2.0000    3.0000 N  ")


def test_charges_and_isotopes_are_written_and_clamped():
    mol = Molecule()
    c = mol.add_atom(ELEM_C)
    n = mol.add_atom(ELEM_N)
    mol.set_atom_isotope(c, 20)
    mol.set_atom_charge(n, 5)
    mol.set_atom_charge(c, -1)
    lines = to_molfile(mol, timestamp=STAMP).splitlines()

    assert lines[4][34:36] == " 4"
    assert lines[4][36:39] == "  5"
    assert lines[5][36:39] == "  0"
    assert "M  CHG  2   1  -1   2   5" in lines
    assert "M  ISO  1   1  20" in lines

    again = parse_molfile("\n".join(lines))
    assert again.atoms[0].isotope == 20
    assert [a.charge for a in again.atoms] == [-1, 5]


def test_long_property_lists_are_split():
    mol = Molecule()
    for _ in range(10):
        idx = mol.add_atom(ELEM_N)
        mol.set_atom_charge(idx, 1)
    chg_lines = [line for line in to_molfile(mol).splitlines() if line.startswith("M  CHG")]
    assert [line[6:9] for line in chg_lines] == ["  8", "  2"]
    assert all(a.charge == 1 for a in parse_molfile(to_molfile(mol)).atoms)


def test_pseudo_atoms_and_aliases_round_trip():
    mol = Molecule()
    mol.add_pseudo_atom("Ph")
    mol.add_pseudo_atom("Boc2")
    mol.add_pseudo_atom("Na")
    rsite = mol.add_rsite()
    mol.set_rsite_bits(rsite, 0b101)
    text = to_molfile(mol)
    assert "A    2" in text.splitlines()

    again = parse_molfile(text)
    assert [a.pseudo_atom_value for a in again.atoms[:3]] == ["Ph", "Boc2", "Na"]
    assert again.atoms[3].rgroups() == [1, 3]


def test_sgroups_round_trip():
    mol = parse_smiles("CC(C)OC")
    sup = Superatom(label="OMe", atoms=[3, 4], bonds=[3], subtype=SGroupSubtype.NONE)
    sup.attachment_points.append(AttachmentPoint(3, 1, "1"))
    sru = SRUGroup(atoms=[0, 1], bonds=[0], subscript="n", connectivity=SRUConnectivity.HEAD_TO_HEAD)
    sru.subtype = SGroupSubtype.ALTERNATING
    data = DataSGroup(atoms=[2], name="pKa", value="4.76", units="log")
    data.display_option = DisplayOption.EXPANDED
    mul = MultipleGroup(atoms=[0, 1, 2], parent_atoms=[0], multiplier=3)
    for sgroup in (sup, sru, data, mul):
        mol.sgroups.add(sgroup)
    data.parent_idx = 1

    again = parse_molfile(to_molfile(mol))
    groups = list(again.sgroups)
    assert [g.sgroup_type for g in groups] == [
        SGroupType.SUPERATOM,
        SGroupType.SRU,
        SGroupType.DATA,
        SGroupType.MULTIPLE,
    ]
    sup2, sru2, data2, mul2 = groups
    assert sup2.label == "OMe"
    assert sup2.atoms == [3, 4]
    assert sup2.bonds == [3]
    assert [(p.atom_idx, p.leaving_idx, p.apid) for p in sup2.attachment_points] == [(3, 1, "1")]
    assert sru2.connectivity == SRUConnectivity.HEAD_TO_HEAD
    assert sru2.subtype == SGroupSubtype.ALTERNATING
    assert sru2.subscript == "n"
    assert (data2.name, data2.value, data2.units) == ("pKa", "4.76", "log")
    assert data2.parent_idx == 1
    assert data2.display_option == DisplayOption.EXPANDED
    assert mul2.multiplier == 3
    assert mul2.parent_atoms == [0]
    assert [g.original_id for g in groups] == [1, 2, 3, 4]


def test_undeclared_sgroup_reference():
    text = _molfile([_atom_line("C")], props=["M  SAL   1  1   1"])
    with pytest.raises(MolfileFormatError):
        parse_molfile(text)


def test_loader_reads_from_stream():
    mol = MolfileLoader(io.StringIO(ETHANOL)).load()
    assert mol.atom_count() == 3


def test_file_helpers(tmp_path):
    path = tmp_path / "ethanol.mol"
    save_molfile(parse_molfile(ETHANOL), path)
    mol = load_molfile(path)
    assert mol.name == "ethanol"
    assert mol.bond_count() == 2


def test_rdkit_reads_saved_molfile():
    mol = parse_smiles("CC(=O)[O-]")
    rd_mol = Chem.MolFromMolBlock(to_molfile(mol), sanitize=False)
    assert rd_mol is not None
    assert rd_mol.GetNumAtoms() == 4
    assert rd_mol.GetNumBonds() == 3
    assert rd_mol.GetAtomWithIdx(3).GetFormalCharge() == -1
    assert rd_mol.GetBondWithIdx(1).GetBondType() == Chem.BondType.DOUBLE


def test_reads_rdkit_molfile():
    block = Chem.MolToMolBlock(Chem.MolFromSmiles("OCC[NH3+]"))
    mol = parse_molfile(block)
    assert [a.number for a in mol.atoms] == [ELEM_O, ELEM_C, ELEM_C, ELEM_N]
    assert mol.atoms[3].charge == 1
    assert mol.bond_count() == 3


@pytest.mark.parametrize(
    "smiles",
    ["CCO", "C=CC#N", "c1ccccc1", "C1CC1C(=O)N", "c1ccc2ccccc2c1"],
)
def test_save_load_preserves_topology(smiles):
    mol = parse_smiles(smiles)
    again = parse_molfile(to_molfile(mol))
    assert again.atom_count() == mol.atom_count()
    assert again.bond_count() == mol.bond_count()
    assert sorted(b.order for b in again.bonds) == sorted(b.order for b in mol.bonds)
    assert again.aromatized == mol.aromatized
