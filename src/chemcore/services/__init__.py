"""Fingerprints, similarity metrics, descriptors and batch processing."""

from .batch import BatchResult, fingerprint_smiles_batch
from .descriptors import (
    MolecularDescriptors,
    calculate_descriptors,
    gross_formula,
    molecular_formula,
    monoisotopic_mass,
    most_abundant_mass,
    tpsa,
)
from .fingerprint_service import (
    FingerprintBuilder,
    FingerprintParameters,
    cosine_similarity,
    dice_similarity,
    euclidean_distance,
    generate_fingerprint,
    hamming_distance,
    tanimoto_similarity,
)

__all__ = [
    "FingerprintBuilder",
    "FingerprintParameters",
    "generate_fingerprint",
    "tanimoto_similarity",
    "dice_similarity",
    "cosine_similarity",
    "hamming_distance",
    "euclidean_distance",
    "BatchResult",
    "fingerprint_smiles_batch",
    "MolecularDescriptors",
    "calculate_descriptors",
    "gross_formula",
    "molecular_formula",
    "monoisotopic_mass",
    "most_abundant_mass",
    "tpsa",
]
