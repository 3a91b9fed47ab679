"""Molecule depiction."""

from .molecule_renderer import MoleculeRenderer, RenderOptions

__all__ = ["MoleculeRenderer", "RenderOptions"]
