#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""

──────────────────────────────────────────────────────────────────────────────
CLI QUICK START (copy–paste, then tweak)
──────────────────────────────────────────────────────────────────────────────
Convert a dose file to a Gmsh mesh (writes water_block.msh):

    dose2gmsh -i water_block.3ddose

Centroid table instead, with an explicit name and verbose logging:

    dose2gmsh -i water_block.3ddose -o results/water -f csv --verbose

Dry-run: parse and report what would be written, without writing:

    dose2gmsh -i water_block.3ddose --dry-run

Required args:

    -i / --input-file    The input 3ddose file.

Optional args:

    -o / --output-file   Output file name (default: <input_file> with the
                         format's extension). The extension is always set to
                         .msh or .csv to match --format.
    -f / --format        msh2 (default) or csv.
    --dry-run            Run everything except the actual write step.
    --verbose            Step-by-step narration.

"""


import argparse
import logging
import sys
from pathlib import Path

from .converter import DoseConverter, parse_format_arg, setup_logging, __version__

logger = logging.getLogger("dose2gmsh")


def main(argv=None) -> None:

    """
    Parse CLI args and run the conversion.
    """

    parser = argparse.ArgumentParser(description="Convert DOSXYZnrc 3ddose files to Gmsh msh (v2.2) or CSV files")

    parser.add_argument("-i", "--input-file", type=str, required=True, help="The input 3ddose file (REQUIRED)")
    parser.add_argument("-o", "--output-file", type=str, default=None, help="Output file name (default: <input_file>.msh or .csv)")
    parser.add_argument("-f", "--format", dest="fmt", type=parse_format_arg, default="msh2", help="Output format: msh2 (default) or csv")

    parser.add_argument("--dry-run", action="store_true", help="Parse the input and print the plan without writing files.")
    parser.add_argument("--verbose", action="store_true", help="Verbose logging.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    args = parser.parse_args(argv)

    for flag, value in (("--input-file", args.input_file), ("--output-file", args.output_file)):
        if value is not None and Path(value).name in ("", ".", ".."):
            parser.error(f"{flag} must name a file, got '{value}'.")

    # Configure logging early
    setup_logging(args.verbose)

    try:
        converter = DoseConverter(
            input_file=args.input_file,
            output_file=args.output_file,
            fmt=args.fmt,
            dry_run=args.dry_run,
        )
        converter.run()
    except (OSError, ValueError) as e:
        # Dose3dError is a ValueError
        logger.error("Conversion of '%s' failed: %s", args.input_file, e)
        sys.exit(1)
    except Exception as e:
        logger.exception("FATAL: Unexpected error: %s", e)
        raise


if __name__ == "__main__":
    main()
