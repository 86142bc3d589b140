#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""

──────────────────────────────────────────────────────────────────────────────
Description
──────────────────────────────────────────────────────────────────────────────
This module converts DOSXYZnrc ``3ddose`` files into formats that Gmsh,
ParaView and spreadsheet tools can read.

──────────────────────────────────────────────────────────────────────────────
WHY THIS EXISTS
──────────────────────────────────────────────────────────────────────────────
- Monte Carlo dose grids are stored as an implicit rectilinear lattice, which
  mesh viewers don't understand.
- Gmsh MSH 2.2 with one hexahedron per voxel and element data for dose and
  uncertainty opens directly in Gmsh (and ParaView via meshio readers).

──────────────────────────────────────────────────────────────────────────────
IT SUPPORTS:
──────────────────────────────────────────────────────────────────────────────
 - Gmsh MSH 2.2 output (--format msh2, default) and centroid CSV (--format csv)
 - Default output name derived from the input file
 - Dry-run mode (--dry-run) to parse and print the plan without writing files

"""


from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path

from .grid import DoseGrid
from .writers import OUTPUT_FORMATS, get_writer

__version__ = "1.0.0"

INPUT_EXTENSION = ".3ddose"

FORMAT_ALIASES = {"msh": "msh2", "gmsh": "msh2"}


def setup_logging(verbose: bool) -> None:
    """
    Configure global logging.

    Args:
        verbose: If True, set DEBUG level, otherwise INFO.
    """

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%H:%M:%S",
    )


logger = logging.getLogger("dose2gmsh")


def parse_format_arg(arg: str) -> str:
    """
    Parse the --format argument into a known format name.

    Accepts 'msh2', 'csv' and the aliases 'msh'/'gmsh', case-insensitive.

    Raises:
        argparse.ArgumentTypeError on an unknown format.
    """

    fmt = arg.strip().lower()
    fmt = FORMAT_ALIASES.get(fmt, fmt)

    if fmt not in OUTPUT_FORMATS:
        raise argparse.ArgumentTypeError(
            f"Unknown format '{arg}'; choose one of: {', '.join(OUTPUT_FORMATS)}."
        )

    return fmt


def check_input_extension(input_file) -> bool:
    """
    Warn when the input file doesn't carry the usual .3ddose extension.

    Returns:
        True if the extension looks right.
    """

    suffix = Path(input_file).suffix.lower()
    if suffix != INPUT_EXTENSION:
        logger.warning(
            "Input file '%s' does not have a %s extension; trying to parse it anyway.",
            input_file,
            INPUT_EXTENSION,
        )
        return False
    return True


def resolve_output_path(input_file, output_file=None, fmt: str = "msh2") -> Path:
    """
    Work out where the converted file goes.

    The output defaults to the input path; either way its extension is set to
    the one matching ``fmt``.
    """

    ext, _ = get_writer(fmt)

    if output_file is None:
        return Path(input_file).with_suffix(ext)

    out = Path(output_file)
    if out.suffix and out.suffix.lower() != ext:
        logger.warning("Replacing extension '%s' of output file '%s' with '%s'.", out.suffix, out, ext)

    return out.with_suffix(ext)


class DoseConverter:
    """
    Convert one 3ddose file into a mesh or CSV file.

    Reading and writing are separate steps so a caller can inspect the grid in
    between, or test each half on its own.
    """

    def __init__(
        self,
        input_file,
        output_file=None,
        fmt: str = "msh2",
        dry_run: bool = False,
    ):
        self.input_file = Path(input_file)
        self.fmt = fmt
        self.output_file = resolve_output_path(self.input_file, output_file, fmt)
        self.dry_run = dry_run

    def read_data(self) -> DoseGrid:
        """
        Parse the input file. Parse and I/O errors propagate to the caller.
        """
        check_input_extension(self.input_file)

        t0 = time.time()
        grid = DoseGrid.from_3ddose(self.input_file)

        logger.info(
            "Read %s: %d x %d x %d voxels (%d nodes) in %.2fs",
            self.input_file,
            grid.num_x,
            grid.num_y,
            grid.num_z,
            grid.num_nodes,
            time.time() - t0,
        )

        if not grid.is_monotonic():
            logger.warning(
                "Node coordinates in '%s' are not strictly increasing along every axis; "
                "the output mesh may be inverted or self-intersecting.",
                self.input_file,
            )

        return grid

    def convert(self, grid: DoseGrid) -> Path:
        """
        Write ``grid`` in the configured format (unless dry-run).

        Returns:
            Path of the (planned) output file.
        """
        if self.dry_run:
            logger.info(
                "[dry-run] Would write %d elements / %d nodes as '%s' to '%s'.",
                grid.num_voxels,
                grid.num_nodes,
                self.fmt,
                self.output_file,
            )
            return self.output_file

        _, writer = get_writer(self.fmt)

        t0 = time.time()
        writer(grid, self.output_file)

        logger.info("DONE: Saved '%s' in %.2fs", self.output_file, time.time() - t0)
        return self.output_file

    def run(self) -> Path:
        """Read and convert (read_data + convert)."""
        grid = self.read_data()
        return self.convert(grid)


def convert_file(input_file, output_file=None, fmt: str = "msh2", dry_run: bool = False) -> Path:
    """Convenience wrapper: convert one file and return the output path."""
    return DoseConverter(input_file, output_file=output_file, fmt=fmt, dry_run=dry_run).run()
