"""Readers and writers for SMILES, Molfile V2000 and SD files."""

from .line_source import LineSource
from .molfile import (
    MolfileLoader,
    MolfileSaver,
    load_molfile,
    parse_molfile,
    save_molfile,
    to_molfile,
)
from .sdf import SDFReader, SDFWriter, count_records, iter_sdf, load_sdf, save_sdf
from .smiles import SmilesParser, SmilesSerializer, parse_smiles, to_smiles

__all__ = [
    "LineSource",
    "SmilesParser",
    "SmilesSerializer",
    "parse_smiles",
    "to_smiles",
    "MolfileLoader",
    "MolfileSaver",
    "parse_molfile",
    "to_molfile",
    "load_molfile",
    "save_molfile",
    "SDFReader",
    "SDFWriter",
    "iter_sdf",
    "load_sdf",
    "save_sdf",
    "count_records",
]
