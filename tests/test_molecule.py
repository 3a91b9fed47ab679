import networkx as nx
import pytest

from chemcore.domain.elements import ELEM_C, ELEM_H, ELEM_N, ELEM_O, ELEM_PSEUDO
from chemcore.domain.models import (
    ATOM_ALIPHATIC,
    ATOM_AROMATIC,
    CONNECTIVITY_UNKNOWN,
    UNSET,
    Atom,
    BondOrder,
    CachedProperty,
    GenericSGroup,
    Molecule,
)
from chemcore.exceptions import (
    AtomNotFoundError,
    BondNotFoundError,
    InvalidAtomError,
    PreconditionError,
)


@pytest.fixture
def ethanol():
    mol = Molecule("ethanol")
    c1 = mol.add_atom(ELEM_C)
    c2 = mol.add_atom(ELEM_C)
    o = mol.add_atom(ELEM_O)
    mol.add_bond(c1, c2)
    mol.add_bond(c2, o)
    return mol


@pytest.fixture
def benzene():
    mol = Molecule("benzene")
    for _ in range(6):
        mol.add_atom(ELEM_C)
    for i in range(6):
        mol.add_bond(i, (i + 1) % 6, BondOrder.AROMATIC)
    return mol


def test_add_atom_and_bond(ethanol):
    assert ethanol.atom_count() == 3
    assert ethanol.bond_count() == 2
    assert ethanol.get_neighbors(1) == [0, 2]
    assert ethanol.find_bond(0, 1) == 0
    assert ethanol.find_bond(0, 2) == -1
    assert ethanol.get_other_bond_end(1, 2) == 1


def test_add_atom_rejects_sentinels():
    mol = Molecule()
    with pytest.raises(InvalidAtomError):
        mol.add_atom(ELEM_PSEUDO)
    with pytest.raises(InvalidAtomError):
        mol.add_atom(0)


def test_sentinel_atom_requires_label():
    with pytest.raises(InvalidAtomError):
        Atom(number=ELEM_PSEUDO)
    assert Atom(number=ELEM_PSEUDO, pseudo_atom_value="Ph").is_pseudo


def test_out_of_range_indices(ethanol):
    with pytest.raises(AtomNotFoundError):
        ethanol.add_bond(0, 5)
    with pytest.raises(IndexError):
        ethanol.get_atom(-1)
    with pytest.raises(BondNotFoundError):
        ethanol.get_bond(2)


def test_self_bond_rejected(ethanol):
    with pytest.raises(PreconditionError):
        ethanol.add_bond(1, 1)


def test_implicit_hydrogens(ethanol):
    assert [ethanol.get_implicit_h(i) for i in range(3)] == [3, 2, 1]
    assert ethanol.total_hydrogens_count() == 6


def test_implicit_h_table():
    mol = Molecule()
    n = mol.add_atom(ELEM_N)
    c = mol.add_atom(ELEM_C)
    s = mol.add_atom(16)
    mol.add_bond(n, c, BondOrder.TRIPLE)
    assert mol.get_implicit_h(n) == 0
    assert mol.get_implicit_h(c) == 1
    # Elements outside H/C/N/O get no implicit hydrogens.
    assert mol.get_implicit_h(s) == 0


def test_explicit_implicit_h_wins(ethanol):
    ethanol.set_explicit_implicit_h(0, 1)
    assert ethanol.get_implicit_h(0) == 1


def test_charged_atoms_have_no_implicit_h(ethanol):
    ethanol.set_atom_charge(2, -1)
    assert ethanol.get_implicit_h(2) == 0


def test_pseudo_atom_implicit_h_raises():
    mol = Molecule()
    idx = mol.add_pseudo_atom("R1")
    with pytest.raises(PreconditionError):
        mol.get_implicit_h(idx)
    rsite = mol.add_rsite(1)
    with pytest.raises(PreconditionError):
        mol.get_implicit_h(rsite)


def test_aromatic_atom_properties(benzene):
    for i in range(6):
        assert benzene.get_atom_aromaticity(i) == ATOM_AROMATIC
        assert benzene.get_atom_connectivity(i) == CONNECTIVITY_UNKNOWN
        assert benzene.get_implicit_h(i) == 1
        assert benzene.get_atom_valence(i) == 4


def test_aliphatic_atom_properties(ethanol):
    assert ethanol.get_atom_aromaticity(0) == ATOM_ALIPHATIC
    assert ethanol.get_atom_connectivity(1) == 2
    assert ethanol.get_atom_valence(0) == 4
    assert ethanol.get_atom_valence(2) == 2


def test_total_h_counts_hydrogen_neighbours():
    mol = Molecule()
    c = mol.add_atom(ELEM_C)
    h = mol.add_atom(ELEM_H)
    mol.add_bond(c, h)
    assert mol.get_implicit_h(c) == 3
    assert mol.get_total_h(c) == 4
    assert mol.get_implicit_h(h) == 0


def test_set_pseudo_atom_refreshes_neighbour_total_h():
    mol = Molecule()
    c = mol.add_atom(ELEM_C)
    h = mol.add_atom(ELEM_H)
    mol.add_bond(c, h)
    assert mol.get_total_h(c) == 4
    mol.set_pseudo_atom(h, "R")
    assert mol.cached_value(CachedProperty.TOTAL_H, c) == UNSET
    assert mol.get_total_h(c) == 3


def test_explicit_valence(ethanol):
    ethanol.set_explicit_valence(0, 5)
    assert ethanol.get_atom_valence(0) == 5


def test_set_charge_invalidates_cache(ethanol):
    assert ethanol.get_implicit_h(0) == 3
    assert ethanol.cached_value(CachedProperty.IMPLICIT_H, 0) == 3
    ethanol.set_atom_charge(0, 1)
    assert ethanol.cached_value(CachedProperty.IMPLICIT_H, 0) == UNSET
    assert ethanol.cached_value(CachedProperty.VALENCE, 0) == UNSET


def test_set_radical_invalidates_cache(ethanol):
    ethanol.get_total_h(1)
    ethanol.set_atom_radical(1, 3)
    assert ethanol.cached_value(CachedProperty.TOTAL_H, 1) == UNSET


def test_add_bond_invalidates_endpoints(ethanol):
    for i in range(3):
        ethanol.get_implicit_h(i)
        ethanol.get_atom_aromaticity(i)
    n = ethanol.add_atom(ELEM_N)
    ethanol.add_bond(0, n)
    assert ethanol.cached_value(CachedProperty.IMPLICIT_H, 0) == UNSET
    assert ethanol.cached_value(CachedProperty.CONNECTIVITY, 0) == UNSET
    # Other atoms keep their values, apart from aromaticity.
    assert ethanol.cached_value(CachedProperty.IMPLICIT_H, 2) == 1
    assert ethanol.cached_value(CachedProperty.AROMATICITY, 2) == UNSET
    assert ethanol.get_implicit_h(0) == 2


def test_add_bond_clears_aromatized_flag(benzene):
    benzene.aromatized = True
    extra = benzene.add_atom(ELEM_C)
    benzene.add_bond(0, extra)
    assert benzene.aromatized is False


def test_flip_bond(ethanol):
    n = ethanol.add_atom(ELEM_N)
    for i in range(4):
        ethanol.get_implicit_h(i)
    extra = ethanol.add_atom(ELEM_C)
    ethanol.get_implicit_h(extra)

    ethanol.flip_bond(1, 2, n)
    assert ethanol.find_bond(1, 2) == -1
    assert ethanol.find_bond(1, n) == 1
    assert ethanol.get_bond(1).order == BondOrder.SINGLE
    for idx in (1, 2, n):
        assert ethanol.cached_value(CachedProperty.IMPLICIT_H, idx) == UNSET
    assert ethanol.cached_value(CachedProperty.IMPLICIT_H, extra) == 4
    assert ethanol.get_implicit_h(2) == 2


def test_flip_unbonded_raises(ethanol):
    with pytest.raises(BondNotFoundError):
        ethanol.flip_bond(0, 2, 1)


def test_flip_onto_parent_raises(ethanol):
    with pytest.raises(PreconditionError):
        ethanol.flip_bond(0, 1, 0)
    assert [(b.begin, b.end) for b in ethanol.bonds] == [(0, 1), (1, 2)]
    assert ethanol.ring_count() == 0


def test_flip_onto_existing_neighbour_raises():
    mol = Molecule()
    for _ in range(3):
        mol.add_atom(ELEM_C)
    mol.add_bond(0, 1)
    mol.add_bond(0, 2)
    with pytest.raises(PreconditionError):
        mol.flip_bond(0, 1, 2)
    assert mol.get_neighbors(0) == [1, 2]
    assert mol.get_neighbors(2) == [0]


def test_set_bond_order(ethanol):
    ethanol.get_implicit_h(2)
    ethanol.set_bond_order(1, BondOrder.DOUBLE)
    assert ethanol.get_implicit_h(2) == 0
    assert ethanol.get_implicit_h(1) == 1


def test_remove_atoms_compacts(ethanol):
    sgroup = GenericSGroup(atoms=[0, 1, 2], bonds=[0, 1])
    ethanol.sgroups.add(sgroup)

    mapping = ethanol.remove_atoms([1])
    assert mapping == [0, -1, 1]
    assert ethanol.atom_count() == 2
    assert ethanol.bond_count() == 0
    assert [a.number for a in ethanol.atoms] == [ELEM_C, ELEM_O]
    assert sgroup.atoms == [0, 1]
    assert sgroup.bonds == []
    assert ethanol.get_implicit_h(0) == 4


def test_remove_atoms_remaps_bonds():
    mol = Molecule()
    for _ in range(4):
        mol.add_atom(ELEM_C)
    mol.add_bond(0, 1)
    mol.add_bond(2, 3, BondOrder.DOUBLE)
    mol.remove_atoms([0])
    assert mol.bond_count() == 1
    bond = mol.get_bond(0)
    assert (bond.begin, bond.end, bond.order) == (1, 2, BondOrder.DOUBLE)
    assert mol.get_neighbors(1) == [2]


def test_clone_is_deep(ethanol):
    ethanol.properties["source"] = "test"
    copy = ethanol.clone()
    copy.set_atom_charge(0, 1)
    copy.add_atom(ELEM_N)
    copy.properties["source"] = "changed"
    assert ethanol.atoms[0].charge == 0
    assert ethanol.atom_count() == 3
    assert ethanol.properties["source"] == "test"


def test_clear(ethanol):
    ethanol.clear()
    assert ethanol.atom_count() == 0
    assert ethanol.bond_count() == 0


def test_revision_counter(ethanol):
    before = ethanol.revision
    ethanol.set_atom_isotope(0, 13)
    assert ethanol.revision == before + 1


def test_molecular_weight(ethanol):
    assert ethanol.molecular_weight() == pytest.approx(46.069, abs=0.01)


def test_descriptions(ethanol):
    ethanol.set_atom_charge(2, -1)
    assert ethanol.atom_description(2) == "O #2 charge=-1"
    assert ethanol.bond_description(0) == "C#0-C#1 single"


def test_networkx_view(benzene, ethanol):
    graph = benzene.to_networkx()
    assert isinstance(graph, nx.Graph)
    assert graph.number_of_nodes() == 6
    assert graph.edges[0, 1]["order"] == int(BondOrder.AROMATIC)
    assert graph.nodes[0]["symbol"] == "C"
    assert benzene.ring_count() == 1
    assert ethanol.ring_count() == 0
    assert Molecule().ring_count() == 0


def test_ring_count_per_component(benzene):
    offset = benzene.atom_count()
    for _ in range(3):
        benzene.add_atom(ELEM_C)
    benzene.add_bond(offset, offset + 1)
    benzene.add_bond(offset + 1, offset + 2)
    benzene.add_bond(offset + 2, offset)
    assert benzene.ring_count() == 2
