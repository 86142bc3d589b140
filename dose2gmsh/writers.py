#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""

Output writers for a :class:`~dose2gmsh.grid.DoseGrid`.

- ``msh2``: Gmsh MSH 2.2 ASCII, one hexahedron per voxel, dose and
  uncertainty attached as element data.
- ``csv``: one row per voxel centroid.

Floats are written with ``repr`` (shortest round-trip form), so the same grid
always produces the same bytes.

"""


from __future__ import annotations

import csv
import logging
from typing import Callable, Dict, Tuple

import numpy as np

from .grid import DoseGrid

logger = logging.getLogger("dose2gmsh")


# Gmsh element type 5 is the 8-node hexahedron; "2 0 0" = two tags, both zero
MSH_VERSION_LINE = "2.2 0 8"
HEXAHEDRON = 5
ELEMENT_TAGS = (0, 0)

DOSE_FIELD_NAME = '"Dose [Gy·cm2]"'
UNCERT_FIELD_NAME = '"Uncertainty fraction"'

CSV_HEADER = ("xc [cm]", "yc [cm]", "zc [cm]", "Dose [Gy cm2]", "Uncertainty fraction")


def _fmt(value: float) -> str:
    return repr(float(value))


def _write_nodes(fh, grid: DoseGrid) -> None:
    coords = grid.node_coordinates().tolist()

    fh.write("$Nodes\n")
    fh.write(f"{grid.num_nodes}\n")
    for idx, (x, y, z) in enumerate(coords, start=1):
        fh.write(f"{idx} {x!r} {y!r} {z!r}\n")
    fh.write("$EndNodes\n")


def _write_elements(fh, grid: DoseGrid) -> None:
    # Gmsh node ids are 1-based
    connectivity = (grid.hex_connectivity() + 1).tolist()
    header = f"{HEXAHEDRON} {len(ELEMENT_TAGS)} " + " ".join(str(t) for t in ELEMENT_TAGS)

    fh.write("$Elements\n")
    fh.write(f"{grid.num_voxels}\n")
    for idx, corners in enumerate(connectivity, start=1):
        fh.write(f"{idx} {header} " + " ".join(map(str, corners)) + "\n")
    fh.write("$EndElements\n")


def _write_element_data(fh, name: str, values: np.ndarray) -> None:
    """
    One $ElementData block: a single string tag (the field name), a single real
    tag (time = 0.0) and three integer tags (timestep, components, count).
    """
    fh.write("$ElementData\n")
    fh.write(f"1\n{name}\n")
    fh.write("1\n0.0\n")
    fh.write(f"3\n0\n1\n{len(values)}\n")
    for idx, val in enumerate(values.tolist(), start=1):
        fh.write(f"{idx} {val!r}\n")
    fh.write("$EndElementData\n")


def write_msh2(grid: DoseGrid, output) -> None:
    """
    Write the grid as a Gmsh MSH 2.2 ASCII file.

    Args:
        grid: parsed dose grid
        output: destination path (created or truncated)
    """
    with open(output, "w", encoding="utf-8", newline="\n") as fh:
        fh.write(f"$MeshFormat\n{MSH_VERSION_LINE}\n$EndMeshFormat\n")

        logger.debug("Writing %d nodes", grid.num_nodes)
        _write_nodes(fh, grid)

        logger.debug("Writing %d hexahedra", grid.num_voxels)
        _write_elements(fh, grid)

        logger.debug("Writing element data fields")
        _write_element_data(fh, DOSE_FIELD_NAME, grid.doses)
        _write_element_data(fh, UNCERT_FIELD_NAME, grid.uncerts)


def write_csv(grid: DoseGrid, output) -> None:
    """Write voxel centroids with their dose and uncertainty as CSV."""
    centroids = grid.centroids().tolist()
    doses = grid.doses.tolist()
    uncerts = grid.uncerts.tolist()

    with open(output, "w", encoding="utf-8", newline="") as fh:
        writer = csv.writer(fh, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for (x, y, z), dose, unc in zip(centroids, doses, uncerts):
            writer.writerow([_fmt(x), _fmt(y), _fmt(z), _fmt(dose), _fmt(unc)])


# format name -> (file extension, writer)
OUTPUT_FORMATS: Dict[str, Tuple[str, Callable[[DoseGrid, object], None]]] = {
    "msh2": (".msh", write_msh2),
    "csv": (".csv", write_csv),
}


def get_writer(fmt: str) -> Tuple[str, Callable[[DoseGrid, object], None]]:
    """Return ``(extension, writer)`` for a format name."""
    try:
        return OUTPUT_FORMATS[fmt]
    except KeyError:
        raise ValueError(
            f"Unknown output format '{fmt}'; choose one of: {', '.join(OUTPUT_FORMATS)}."
        ) from None


def write_grid(grid: DoseGrid, output, fmt: str = "msh2") -> None:
    """Write ``grid`` to ``output`` in the named format."""
    _, writer = get_writer(fmt)
    writer(grid, output)
