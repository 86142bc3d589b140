"""
Unit tests for the dose2gmsh converter.

These tests verify that the converter:
1. Resolves output paths and extensions
2. Parses the --format argument
3. Performs a dry-run without writing files
4. Writes msh and csv files on a real run
5. Propagates read errors

"""

import argparse
import logging

import pytest

from dose2gmsh.converter import (
    DoseConverter,
    check_input_extension,
    convert_file,
    parse_format_arg,
    resolve_output_path,
)
from dose2gmsh.grid import Dose3dFormatError

# ──────────────────────────────────────────────────────────────
# Configuration
# ──────────────────────────────────────────────────────────────

SINGLE_VOXEL = "1 1 1\n0.0 1.0\n0.0 1.0\n0.0 1.0\n5.0\n0.1\n"


@pytest.fixture
def dose_file(tmp_path):
    path = tmp_path / "block.3ddose"
    path.write_text(SINGLE_VOXEL)
    return path


# ──────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────

def test_resolve_output_default(tmp_path):
    src = tmp_path / "water.3ddose"
    assert resolve_output_path(src) == tmp_path / "water.msh"
    assert resolve_output_path(src, fmt="csv") == tmp_path / "water.csv"


def test_resolve_output_explicit(tmp_path, caplog):
    src = tmp_path / "water.3ddose"
    assert resolve_output_path(src, tmp_path / "result", "csv") == tmp_path / "result.csv"

    with caplog.at_level(logging.WARNING, logger="dose2gmsh"):
        out = resolve_output_path(src, tmp_path / "result.txt", "msh2")
    assert out == tmp_path / "result.msh"
    assert "Replacing extension" in caplog.text


def test_check_input_extension(caplog):
    assert check_input_extension("a/b/phantom.3ddose")
    with caplog.at_level(logging.WARNING, logger="dose2gmsh"):
        assert not check_input_extension("phantom.txt")
    assert "3ddose" in caplog.text


def test_parse_format_arg():
    assert parse_format_arg("msh2") == "msh2"
    assert parse_format_arg("MSH") == "msh2"
    assert parse_format_arg(" csv ") == "csv"
    with pytest.raises(argparse.ArgumentTypeError):
        parse_format_arg("vtk")


# ──────────────────────────────────────────────────────────────
# Conversion
# ──────────────────────────────────────────────────────────────

def test_converter_init(dose_file):
    conv = DoseConverter(dose_file, fmt="csv", dry_run=True)
    assert conv.input_file == dose_file
    assert conv.output_file == dose_file.with_suffix(".csv")
    assert conv.dry_run


def test_converter_unknown_format(dose_file):
    with pytest.raises(ValueError):
        DoseConverter(dose_file, fmt="vtk")


def test_dry_run_writes_nothing(dose_file):
    out = DoseConverter(dose_file, dry_run=True).run()
    assert out == dose_file.with_suffix(".msh")
    assert not out.exists()


def test_run_msh(dose_file):
    out = convert_file(dose_file)
    assert out.exists()
    assert out.read_text(encoding="utf-8").startswith("$MeshFormat\n2.2 0 8\n")


def test_run_csv(dose_file, tmp_path):
    out = convert_file(dose_file, output_file=tmp_path / "table", fmt="csv")
    assert out == tmp_path / "table.csv"
    assert out.read_text(encoding="utf-8").splitlines()[1] == "0.5,0.5,0.5,5.0,0.1"


def test_read_error_propagates(tmp_path):
    bad = tmp_path / "bad.3ddose"
    bad.write_text("3 1 1\n0.0 1.0\n")
    with pytest.raises(Dose3dFormatError, match="x-coordinate"):
        DoseConverter(bad).run()
    assert not bad.with_suffix(".msh").exists()


def test_non_monotonic_warning(tmp_path, caplog):
    path = tmp_path / "flipped.3ddose"
    path.write_text("1 1 1\n1.0 0.0\n0.0 1.0\n0.0 1.0\n5.0\n0.1\n")
    with caplog.at_level(logging.WARNING, logger="dose2gmsh"):
        DoseConverter(path).read_data()
    assert "not strictly increasing" in caplog.text


def test_errors_left_to_caller_to_log(tmp_path, caplog):
    bad = tmp_path / "bad.3ddose"
    bad.write_text("1 1 1\n0.0 1.0\n")
    with caplog.at_level(logging.DEBUG, logger="dose2gmsh"):
        with pytest.raises(Dose3dFormatError):
            DoseConverter(bad).run()
    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]
