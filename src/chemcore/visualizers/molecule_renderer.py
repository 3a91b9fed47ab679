#!/usr/bin/env python3
# src/chemcore/visualizers/molecule_renderer.py

"""
Simple 2D depictions of molecules (PNG, JPEG, SVG) drawn with matplotlib.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
from matplotlib.patches import Circle  # noqa: E402

from ..domain.elements import ELEM_C, element_to_string  # noqa: E402
from ..domain.models.bond import BondOrder  # noqa: E402
from ..domain.models.molecule import Molecule  # noqa: E402
from ..exceptions import InvalidParametersError  # noqa: E402

logger = logging.getLogger(__name__)

# CPK color scheme for elements
CPK_COLORS = {
    "H": "#BBBBBB",
    "C": "#222222",
    "N": "#3366CC",
    "O": "#CC3333",
    "S": "#CCCC33",
    "F": "#33AA66",
    "Cl": "#33AA66",
    "Br": "#33AA66",
    "I": "#33AA66",
    "P": "#FF8000",
    "B": "#FFB5B5",
    "default": "#888888",
}

BOND_COLOR = "#444444"
AROMATIC_BOND_COLOR = "#AA7733"
BOND_WIDTHS = {BondOrder.SINGLE: 2, BondOrder.DOUBLE: 4, BondOrder.TRIPLE: 6, BondOrder.AROMATIC: 2}
MIN_LAYOUT_RADIUS = 10.0


@dataclass
class RenderOptions:
    """Depiction settings; sizes are in pixels.

    Args:
        width: Image width
        height: Image height
        margin: Empty border around the layout circle
        atom_radius: Radius of the atom discs
        show_labels: Draw element symbols next to non-carbon atoms
        use_coordinates: Lay out atoms by their stored x/y coordinates
            instead of on a circle, when any coordinate is non-zero
        jpeg_quality: JPEG quality, 1..100
        dpi: Resolution used to convert pixels to figure inches
        background: Figure background color
    """

    width: int = 300
    height: int = 300
    margin: int = 20
    atom_radius: float = 6.0
    show_labels: bool = True
    use_coordinates: bool = False
    jpeg_quality: int = 85
    dpi: int = 100
    background: str = "white"

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise InvalidParametersError("image dimensions must be positive")
        if not 1 <= self.jpeg_quality <= 100:
            raise InvalidParametersError("jpeg_quality must be between 1 and 100")


def get_cpk_color(symbol: str) -> str:
    """Return the CPK color for a given element."""
    return CPK_COLORS.get(symbol, CPK_COLORS["default"])


def circular_layout(n_atoms: int, width: int, height: int, margin: int) -> np.ndarray:
    """Place atoms evenly on a circle centred in the image.

    Returns:
        Array of shape (n_atoms, 2) with pixel coordinates
    """
    if n_atoms == 0:
        return np.zeros((0, 2))
    radius = max(min(width, height) / 2 - margin, MIN_LAYOUT_RADIUS)
    angles = 2 * np.pi * np.arange(n_atoms) / n_atoms
    center = np.array([width // 2, height // 2], dtype=float)
    return center + radius * np.column_stack([np.cos(angles), np.sin(angles)])


def coordinate_layout(mol: Molecule, width: int, height: int, margin: int) -> np.ndarray:
    """Scale stored x/y coordinates into the image, preserving aspect ratio."""
    xy = np.array([atom.coordinates[:2] for atom in mol.atoms], dtype=float)
    if len(xy) == 0:
        return np.zeros((0, 2))
    # Image y grows downwards.
    xy[:, 1] *= -1
    lo = xy.min(axis=0)
    span = xy.max(axis=0) - lo
    usable = np.array([width - 2 * margin, height - 2 * margin], dtype=float)
    scale = np.min(usable / np.where(span > 0, span, 1.0))
    offset = (np.array([width, height], dtype=float) - span * scale) / 2
    return (xy - lo) * scale + offset


class MoleculeRenderer:
    """Render a molecule with bonds as lines and atoms as CPK-colored discs."""

    def __init__(self, mol: Molecule, options: RenderOptions = None):
        self.mol = mol
        self.options = options or RenderOptions()

    def layout(self) -> np.ndarray:
        opts = self.options
        has_coordinates = any(
            atom.coordinates[0] or atom.coordinates[1] for atom in self.mol.atoms
        )
        if opts.use_coordinates and has_coordinates:
            return coordinate_layout(self.mol, opts.width, opts.height, opts.margin)
        return circular_layout(self.mol.atom_count(), opts.width, opts.height, opts.margin)

    def save_png(self, path: Union[str, Path]) -> None:
        self._save(path, "png")

    def save_jpeg(self, path: Union[str, Path]) -> None:
        self._save(path, "jpeg", pil_kwargs={"quality": self.options.jpeg_quality})

    def save_svg(self, path: Union[str, Path]) -> None:
        self._save(path, "svg")

    def _save(self, path: Union[str, Path], fmt: str, **kwargs) -> None:
        opts = self.options
        fig = plt.figure(figsize=(opts.width / opts.dpi, opts.height / opts.dpi), dpi=opts.dpi)
        try:
            self._draw(fig)
            fig.savefig(path, format=fmt, dpi=opts.dpi, facecolor=opts.background, **kwargs)
            logger.debug(f"Rendered {self.mol!r} to {path}")
        finally:
            plt.close(fig)

    def _draw(self, fig) -> None:
        opts = self.options
        ax = fig.add_axes([0, 0, 1, 1])
        ax.set_xlim(0, opts.width)
        ax.set_ylim(opts.height, 0)
        ax.set_aspect("equal")
        ax.axis("off")

        coords = self.layout()
        # Linewidths are given in points.
        px_to_pt = 72.0 / opts.dpi

        for bond in self.mol.bonds:
            (x1, y1), (x2, y2) = coords[bond.begin], coords[bond.end]
            color = AROMATIC_BOND_COLOR if bond.order == BondOrder.AROMATIC else BOND_COLOR
            ax.plot(
                [x1, x2],
                [y1, y2],
                color=color,
                linewidth=BOND_WIDTHS[bond.order] * px_to_pt,
                solid_capstyle="round",
                zorder=1,
            )

        for idx, atom in enumerate(self.mol.atoms):
            x, y = coords[idx]
            if atom.is_pseudo:
                symbol = atom.pseudo_atom_value
            elif atom.is_template:
                symbol = atom.template_name
            else:
                symbol = element_to_string(atom.number)
            ax.add_patch(
                Circle(
                    (x, y),
                    opts.atom_radius,
                    facecolor=get_cpk_color(symbol),
                    edgecolor="#222222",
                    linewidth=px_to_pt,
                    zorder=2,
                )
            )
            if opts.show_labels and atom.number != ELEM_C:
                ax.text(
                    x + opts.atom_radius,
                    y - opts.atom_radius,
                    symbol,
                    fontsize=8,
                    ha="left",
                    va="bottom",
                    zorder=3,
                )
