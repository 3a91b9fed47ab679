import pytest

from chemcore.exceptions import (
    AtomNotFoundError,
    ChemCoreError,
    FingerprintSizeMismatchError,
    InvalidParametersError,
    MolfileFormatError,
    NotFoundError,
    ParseError,
    PreconditionError,
    SmilesParseError,
)


def test_smiles_error_carries_position():
    err = SmilesParseError("unmatched ')'", 4)
    assert err.position == 4
    assert "at position 4" in str(err)
    assert isinstance(err, ParseError)
    assert err.to_dict() == {
        "code": "SMILES_PARSE",
        "message": "unmatched ')' at position 4",
        "position": 4,
    }


def test_molfile_error_carries_line_number():
    err = MolfileFormatError("atom line too short", 7)
    assert err.line_number == 7
    assert str(err) == "line 7: atom line too short"


def test_hierarchy():
    assert issubclass(AtomNotFoundError, NotFoundError)
    assert issubclass(AtomNotFoundError, IndexError)
    assert issubclass(FingerprintSizeMismatchError, PreconditionError)
    assert issubclass(InvalidParametersError, ValueError)
    for cls in (ParseError, PreconditionError, NotFoundError):
        assert issubclass(cls, ChemCoreError)


def test_code_override():
    err = ChemCoreError("boom", code="CUSTOM")
    assert err.code == "CUSTOM"
    with pytest.raises(ChemCoreError):
        raise err
