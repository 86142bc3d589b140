#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""

─────────────────────────────────────────────────────────────
Example Usage of dose2gmsh
─────────────────────────────────────────────────────────────

This script demonstrates how to use `DoseGrid` and
`DoseConverter` to inspect a 3ddose file and convert it into
Gmsh and CSV files.

Features demonstrated:
1. Writing a small synthetic 3ddose file
2. Inspecting the parsed grid (counts, corner node ids)
3. Performing a dry-run conversion (no files written)
4. Writing both output formats

─────────────────────────────────────────────────────────────

"""

import os

import numpy as np

from dose2gmsh.converter import DoseConverter, setup_logging
from dose2gmsh.grid import DoseGrid

# ──────────────────────────────────────────────────────────────
# Configuration
# ──────────────────────────────────────────────────────────────

OUTPUT_DIR = "dose2gmsh_example"

SHAPE = (4, 3, 2)  # voxels along x, y, z

DRY_RUN = False


# ──────────────────────────────────────────────────────────────
# Helper Functions
# ──────────────────────────────────────────────────────────────


def write_synthetic_3ddose(path: str, shape=SHAPE) -> None:
    """Write a water-block-like grid with a dose falling off along z."""

    nx, ny, nz = shape
    xs = np.linspace(-2.0, 2.0, nx + 1)
    ys = np.linspace(-1.5, 1.5, ny + 1)
    zs = np.linspace(0.0, 2.0, nz + 1)

    nvox = nx * ny * nz
    depth = np.repeat(np.arange(nz), nx * ny)
    doses = 1e-12 * np.exp(-0.5 * depth)
    uncerts = np.full(nvox, 0.02)

    with open(path, "w", encoding="utf-8") as fh:
        fh.write(f"{nx} {ny} {nz}\n")
        for arr in (xs, ys, zs, doses, uncerts):
            fh.write(" ".join(repr(float(v)) for v in arr) + "\n")


def print_grid_info(grid: DoseGrid) -> None:

    print(f"Grid shape: {grid.shape}")
    print(f"Voxels: {grid.num_voxels}, nodes: {grid.num_nodes}")
    corners = [c + 1 for c in grid.hex_corners(0, 0, 0)]
    print(f"Corner node ids of the first element: {corners}")


# ──────────────────────────────────────────────────────────────
# Main Example Workflow
# ──────────────────────────────────────────────────────────────

def main():

    setup_logging(verbose=False)

    os.makedirs(OUTPUT_DIR, exist_ok=True)
    input_file = os.path.join(OUTPUT_DIR, "synthetic.3ddose")
    write_synthetic_3ddose(input_file)

    grid = DoseGrid.from_3ddose(input_file)
    print_grid_info(grid)

    DoseConverter(input_file, dry_run=True).convert(grid)

    for fmt in ("msh2", "csv"):
        converter = DoseConverter(input_file, fmt=fmt, dry_run=DRY_RUN)
        out = converter.convert(grid)
        print(f"{fmt}: {out}")


# ──────────────────────────────────────────────────────────────
# Entry Point
# ──────────────────────────────────────────────────────────────

if __name__ == "__main__":
    main()
