"""chemcore: molecular graphs, SMILES/Molfile/SDF codecs and fingerprints."""

from .domain.models.bond import BondDirection, BondOrder
from .domain.models.fingerprint import Fingerprint, FingerprintType
from .domain.models.molecule import Molecule
from .exceptions import ChemCoreError
from .io.molfile import MolfileLoader, MolfileSaver
from .io.sdf import SDFReader, SDFWriter
from .io.smiles import SmilesParser, SmilesSerializer
from .services.fingerprint_service import (
    FingerprintBuilder,
    FingerprintParameters,
    tanimoto_similarity,
)

__version__ = "0.1.0"

__all__ = [
    "Molecule",
    "BondOrder",
    "BondDirection",
    "Fingerprint",
    "FingerprintType",
    "ChemCoreError",
    "SmilesParser",
    "SmilesSerializer",
    "MolfileLoader",
    "MolfileSaver",
    "SDFReader",
    "SDFWriter",
    "FingerprintBuilder",
    "FingerprintParameters",
    "tanimoto_similarity",
]
