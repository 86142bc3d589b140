# -*- coding: utf-8 -*-

"""

dose2gmsh: 3ddose → Gmsh MSH / CSV Converter
=============================================

──────────────────────────────────────────────────────────────────────────────
Description
──────────────────────────────────────────────────────────────────────────────
dose2gmsh converts DOSXYZnrc ``3ddose`` dose grids into Gmsh MSH 2.2 meshes
(one hexahedron per voxel, dose and uncertainty as element data) or into a
flat CSV of voxel centroids.

──────────────────────────────────────────────────────────────────────────────
WHY THIS EXISTS
──────────────────────────────────────────────────────────────────────────────
- 3ddose stores a rectilinear grid implicitly: node coordinates per axis and a
  flat list of voxel values. Mesh viewers need explicit nodes and elements.
- Getting the hexahedron corner numbering wrong silently produces twisted
  elements, so it lives in one tested place.

"""

from .grid import (
    DoseGrid,
    Dose3dError,
    Dose3dFormatError,
    Dose3dParseError,
    parse_3ddose,
)

from .writers import (
    OUTPUT_FORMATS,
    write_csv,
    write_grid,
    write_msh2,
)

from .converter import (
    DoseConverter,
    convert_file,
    parse_format_arg,
    resolve_output_path,
)

__version__ = "1.0.0"
