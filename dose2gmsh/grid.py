#!/usr/bin/env python3
# -*- coding: utf-8 -*-

r"""

──────────────────────────────────────────────────────────────────────────────
Description
──────────────────────────────────────────────────────────────────────────────
In-memory model of a DOSXYZnrc ``3ddose`` file: a rectilinear voxel grid with
one dose and one uncertainty value per voxel.

──────────────────────────────────────────────────────────────────────────────
FILE LAYOUT
──────────────────────────────────────────────────────────────────────────────
Six lines of whitespace-separated numbers:

    1. nx ny nz                    (voxels per axis)
    2. nx + 1 x node coordinates   [cm]
    3. ny + 1 y node coordinates   [cm]
    4. nz + 1 z node coordinates   [cm]
    5. nx * ny * nz doses          [Gy·cm2]
    6. nx * ny * nz uncertainties  (fraction of the dose)

Voxel data is ordered with x varying fastest, then y, then z.

──────────────────────────────────────────────────────────────────────────────
NODE NUMBERING
──────────────────────────────────────────────────────────────────────────────
Nodes are flattened in the same x/y/z order. Each voxel becomes a hexahedron
whose corners follow the Gmsh low-order numbering (bottom face, then top):

                   v
            3----------2
            |\     ^   |\
            | \    |   | \
            |  \   |   |  \
            |   7------+---6
            |   |  +-- |-- | -> u
            0---+---\--1   |
             \  |    \  \  |
              \ |     \  \ |
               \|      w  \|
                4----------5

"""


from __future__ import annotations

import logging
import re
from typing import Iterable, Iterator, List, Tuple

import numpy as np

logger = logging.getLogger("dose2gmsh")


class Dose3dError(ValueError):
    """Base class for malformed 3ddose input."""


class Dose3dFormatError(Dose3dError):
    """Wrong number of tokens or lines, or inconsistent grid dimensions."""


class Dose3dParseError(Dose3dError):
    """A token (or its bytes) could not be read as the expected number type."""


LINE_TITLES = (
    "voxel number",
    "x-coordinate",
    "y-coordinate",
    "z-coordinate",
    "dose value",
    "uncertainty value",
)

INT_TOKEN = re.compile(r"[+-]?[0-9]+")
FLOAT_TOKEN = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)


def parse_simple_line(line: str, title: str, expect_len: int, kind=float, lineno: int = 0) -> List:
    """
    Split one line on whitespace and convert every token with ``kind``.

    Args:
        line: raw text of the line
        title: name of the field being read, used in error messages
        expect_len: exact number of tokens required
        kind: ``int`` or ``float``
        lineno: 1-based line number for error messages (0 = unknown)

    Returns:
        List of parsed values.

    Raises:
        Dose3dFormatError when the token count differs from ``expect_len``.
        Dose3dParseError when a token cannot be converted.
    """

    tokens = line.split()
    where = f" on line {lineno}" if lineno else ""

    if len(tokens) != expect_len:
        raise Dose3dFormatError(
            f"Expected {expect_len} {title} entries{where}, found {len(tokens)}."
        )

    # int()/float() alone would also take '1_0' and non-ASCII digits
    pattern = INT_TOKEN if kind is int else FLOAT_TOKEN

    values = []
    for tok in tokens:
        if not pattern.fullmatch(tok):
            raise Dose3dParseError(f"Invalid {title} '{tok}'{where}.")
        values.append(kind(tok))

    return values


def _decode_lines(raw_lines: Iterable[bytes]) -> Iterator[str]:
    """Decode byte lines as UTF-8, reporting bad bytes against the field they belong to."""
    for lineno, raw in enumerate(raw_lines, start=1):
        try:
            yield raw.decode("utf-8")
        except UnicodeDecodeError as e:
            title = LINE_TITLES[lineno - 1] if lineno <= len(LINE_TITLES) else "trailing data"
            raise Dose3dParseError(
                f"Invalid {title} on line {lineno}: {e.reason} (byte {e.start})."
            ) from None


class DoseGrid:
    """
    Dose and uncertainty data for a 3D rectilinear hexahedral mesh.

    Units follow EGSnrc: coordinates in cm, doses in Gy·cm2 (dose area product),
    uncertainties as fractions of the matching dose. All arrays are read-only.
    """

    def __init__(self, xs, ys, zs, doses, uncerts):
        self.xs = self._frozen(xs, "x-coordinate")
        self.ys = self._frozen(ys, "y-coordinate")
        self.zs = self._frozen(zs, "z-coordinate")
        self.doses = self._frozen(doses, "dose value")
        self.uncerts = self._frozen(uncerts, "uncertainty value")

        for title, arr in (("x", self.xs), ("y", self.ys), ("z", self.zs)):
            if len(arr) < 2:
                raise Dose3dFormatError(
                    f"Need at least 2 {title}-coordinates (one voxel), got {len(arr)}."
                )

        nvox = self.num_voxels
        if len(self.doses) != nvox or len(self.uncerts) != nvox:
            raise Dose3dFormatError(
                f"Grid of {self.shape} needs {nvox} doses and uncertainties, "
                f"got {len(self.doses)} and {len(self.uncerts)}."
            )

    @staticmethod
    def _frozen(values, title: str) -> np.ndarray:
        arr = np.array(values, dtype=np.float64)
        if arr.ndim != 1:
            raise Dose3dFormatError(f"{title} data must be one-dimensional, got shape {arr.shape}.")
        arr.setflags(write=False)
        return arr

    def __repr__(self) -> str:
        return f"DoseGrid(shape={self.shape})"

    # ──────────────────────────────────────────────────────────────
    # Parsing
    # ──────────────────────────────────────────────────────────────

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "DoseGrid":
        """
        Build a grid from the six logical lines of a 3ddose file.

        Blank lines after the sixth are ignored, anything else is rejected.
        """
        it: Iterator[Tuple[int, str]] = enumerate(lines, start=1)

        def next_line(title: str) -> Tuple[int, str]:
            try:
                return next(it)
            except StopIteration:
                raise Dose3dFormatError(f"Unexpected end of input while reading {title} line.") from None

        lineno, line = next_line("voxel number")
        nx, ny, nz = parse_simple_line(line, "voxel number", 3, kind=int, lineno=lineno)
        for n in (nx, ny, nz):
            if n <= 0:
                raise Dose3dParseError(f"Invalid voxel number '{n}' on line {lineno}: must be positive.")

        lineno, line = next_line("x-coordinate")
        xs = parse_simple_line(line, "x-coordinate", nx + 1, lineno=lineno)
        lineno, line = next_line("y-coordinate")
        ys = parse_simple_line(line, "y-coordinate", ny + 1, lineno=lineno)
        lineno, line = next_line("z-coordinate")
        zs = parse_simple_line(line, "z-coordinate", nz + 1, lineno=lineno)

        nvox = nx * ny * nz
        lineno, line = next_line("dose value")
        doses = parse_simple_line(line, "dose value", nvox, lineno=lineno)
        lineno, line = next_line("uncertainty value")
        uncerts = parse_simple_line(line, "uncertainty value", nvox, lineno=lineno)

        for lineno, line in it:
            if line.strip():
                raise Dose3dFormatError(f"Trailing data on line {lineno} after uncertainty values.")

        grid = cls(xs, ys, zs, doses, uncerts)
        logger.debug("Parsed %s with %d voxels and %d nodes", grid, grid.num_voxels, grid.num_nodes)
        return grid

    @classmethod
    def from_3ddose(cls, input_file) -> "DoseGrid":
        """
        Parse a 3ddose file from disk.

        Lines are split on newline characters only, the same as :func:`parse_3ddose`.
        """
        with open(input_file, "rb") as fh:
            return cls.from_lines(_decode_lines(fh))

    # ──────────────────────────────────────────────────────────────
    # Geometric queries
    # ──────────────────────────────────────────────────────────────

    @property
    def num_x(self) -> int:
        return len(self.xs) - 1

    @property
    def num_y(self) -> int:
        return len(self.ys) - 1

    @property
    def num_z(self) -> int:
        return len(self.zs) - 1

    @property
    def shape(self) -> Tuple[int, int, int]:
        return (self.num_x, self.num_y, self.num_z)

    @property
    def num_voxels(self) -> int:
        return self.num_x * self.num_y * self.num_z

    @property
    def num_nodes(self) -> int:
        return len(self.xs) * len(self.ys) * len(self.zs)

    def node_index(self, i: int, j: int, k: int) -> int:
        """Flat 0-based index of lattice node (i, j, k), x fastest."""
        if not (0 <= i <= self.num_x and 0 <= j <= self.num_y and 0 <= k <= self.num_z):
            raise IndexError(f"Node ({i}, {j}, {k}) outside lattice of {self.shape} voxels.")
        return i + len(self.xs) * j + len(self.xs) * len(self.ys) * k

    def voxel_index(self, i: int, j: int, k: int) -> int:
        """Flat 0-based index of voxel (i, j, k) into ``doses``/``uncerts``."""
        if not (0 <= i < self.num_x and 0 <= j < self.num_y and 0 <= k < self.num_z):
            raise IndexError(f"Voxel ({i}, {j}, {k}) outside grid of {self.shape} voxels.")
        return i + self.num_x * j + self.num_x * self.num_y * k

    def hex_corners(self, i: int, j: int, k: int) -> Tuple[int, ...]:
        """
        0-based node indices of voxel (i, j, k) in Gmsh hexahedron order.

        Returns:
            (base, xr, yr, yl, zl, zr, yzr, yzl)
        """
        self.voxel_index(i, j, k)  # bounds check
        row = len(self.xs)
        plane = len(self.xs) * len(self.ys)

        base = self.node_index(i, j, k)
        xr = base + 1
        yl = base + row
        yr = yl + 1
        zl = base + plane
        zr = zl + 1
        yzl = zl + row
        yzr = yzl + 1

        return (base, xr, yr, yl, zl, zr, yzr, yzl)

    def _voxel_ijk(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        # ravel of (k, j, i) meshgrid gives x-fastest ordering
        k, j, i = np.meshgrid(
            np.arange(self.num_z), np.arange(self.num_y), np.arange(self.num_x), indexing="ij"
        )
        return i.ravel(), j.ravel(), k.ravel()

    def hex_connectivity(self) -> np.ndarray:
        """
        Corner node indices for every voxel, shape (num_voxels, 8), 0-based,
        rows in voxel-index order. Same corner order as :meth:`hex_corners`.
        """
        row = len(self.xs)
        plane = len(self.xs) * len(self.ys)

        i, j, k = self._voxel_ijk()
        base = (i + row * j + plane * k).astype(np.int64)

        offsets = np.array(
            [0, 1, row + 1, row, plane, plane + 1, plane + row + 1, plane + row],
            dtype=np.int64,
        )
        return base[:, np.newaxis] + offsets[np.newaxis, :]

    def node_coordinates(self) -> np.ndarray:
        """All lattice node coordinates, shape (num_nodes, 3), node-index order."""
        z, y, x = np.meshgrid(self.zs, self.ys, self.xs, indexing="ij")
        return np.column_stack([x.ravel(), y.ravel(), z.ravel()])

    def centroids(self) -> np.ndarray:
        """Voxel centres, shape (num_voxels, 3), voxel-index order."""
        cx = (self.xs[:-1] + self.xs[1:]) / 2.0
        cy = (self.ys[:-1] + self.ys[1:]) / 2.0
        cz = (self.zs[:-1] + self.zs[1:]) / 2.0
        i, j, k = self._voxel_ijk()
        return np.column_stack([cx[i], cy[j], cz[k]])

    def is_monotonic(self) -> bool:
        """True when every coordinate axis is strictly increasing."""
        return all(bool(np.all(np.diff(arr) > 0)) for arr in (self.xs, self.ys, self.zs))


def parse_3ddose(text: str) -> DoseGrid:
    """Parse 3ddose content held in memory."""
    return DoseGrid.from_lines(text.split("\n"))
