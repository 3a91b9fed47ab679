"""
Exception hierarchy for chemcore.

Every error raised by the package derives from :class:`ChemCoreError` and
carries a machine-readable ``code`` next to its message.
"""

from typing import Any, Dict, Optional


class ChemCoreError(Exception):
    """Base class for all chemcore errors.

    Attributes:
        code: Machine-readable error code (e.g. "SMILES_PARSE").
        message: Human-readable error description.
    """

    code = "CHEMCORE_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return {"code": self.code, "message": self.message}


class ParseError(ChemCoreError):
    """Raised when textual input is malformed."""

    code = "PARSE_ERROR"


class SmilesParseError(ParseError):
    """Malformed SMILES, reported with the character offset."""

    code = "SMILES_PARSE"

    def __init__(self, message: str, position: int):
        self.position = position
        super().__init__(f"{message} at position {position}")

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["position"] = self.position
        return data


class MolfileFormatError(ParseError):
    """Malformed Molfile/SDF content, reported with the 1-based line number."""

    code = "MOLFILE_FORMAT"

    def __init__(self, message: str, line_number: int):
        self.line_number = line_number
        super().__init__(f"line {line_number}: {message}")

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["line_number"] = self.line_number
        return data


class PreconditionError(ChemCoreError):
    """Raised when an operation is invoked on unsuitable input."""

    code = "PRECONDITION"


class InvalidAtomError(PreconditionError):
    """Raised when an atom violates the sentinel/label invariant."""

    code = "INVALID_ATOM"


class FingerprintSizeMismatchError(PreconditionError):
    """Raised when comparing fingerprints of different lengths."""

    code = "FINGERPRINT_SIZE_MISMATCH"

    def __init__(self, size1: int, size2: int):
        self.size1 = size1
        self.size2 = size2
        super().__init__(f"fingerprint sizes differ: {size1} != {size2}")


class NotFoundError(ChemCoreError, IndexError):
    """Raised when an index does not refer to a live object."""

    code = "NOT_FOUND"


class AtomNotFoundError(NotFoundError):
    code = "ATOM_NOT_FOUND"

    def __init__(self, index: int):
        self.index = index
        super().__init__(f"atom #{index} not found")


class BondNotFoundError(NotFoundError):
    code = "BOND_NOT_FOUND"


class SGroupNotFoundError(NotFoundError):
    code = "SGROUP_NOT_FOUND"

    def __init__(self, index: int):
        self.index = index
        super().__init__(f"S-Group index {index} out of range")


class UnknownElementError(ChemCoreError, KeyError):
    """Raised when an element symbol is not in the periodic table."""

    code = "UNKNOWN_ELEMENT"

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"unknown element: {symbol}")

    def __str__(self) -> str:
        return self.message


class InvalidParametersError(ChemCoreError, ValueError):
    """Raised when configuration values are out of range."""

    code = "INVALID_PARAMETERS"


class OperationCancelledError(ChemCoreError):
    """Raised when a long-running operation observes its cancel signal."""

    code = "CANCELLED"
