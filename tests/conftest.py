"""
Shared fixtures: small synthetic OpenFOAM cases written to a temporary directory.

The mesh is two unit hexahedra side by side along x:

    cell 0: [0,1] x [0,1] x [0,1]    centre (0.5, 0.5, 0.5)
    cell 1: [1,2] x [0,1] x [0,1]    centre (1.5, 0.5, 0.5)

Point i + 3*j + 6*k sits at (i, j, k). Face vertex order gives area vectors
pointing out of the owner cell.

"""

import pytest

from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple, Union

# ──────────────────────────────────────────────────────────────
# Mesh definition
# ──────────────────────────────────────────────────────────────

POINTS = [(i, j, k) for k in range(2) for j in range(2) for i in range(3)]

FACES = [
    (1, 4, 10, 7),   # internal, x = 1
    (0, 6, 9, 3),    # inlet,  x = 0
    (2, 5, 11, 8),   # outlet, x = 2
    (0, 1, 7, 6),    # walls: y = 0
    (1, 2, 8, 7),
    (3, 9, 10, 4),   # y = 1
    (4, 10, 11, 5),
    (0, 3, 4, 1),    # z = 0
    (1, 4, 5, 2),
    (6, 7, 10, 9),   # z = 1
    (7, 8, 11, 10),
]

OWNER = [0, 0, 1, 0, 1, 0, 1, 0, 1, 0, 1]
NEIGHBOUR = [1]

# name, type, startFace, nFaces
PATCHES = [
    ("inlet", "patch", 1, 1),
    ("outlet", "patch", 2, 1),
    ("walls", "wall", 3, 8),
]

CELL_CENTRES = [(0.5, 0.5, 0.5), (1.5, 0.5, 0.5)]

Vector = Tuple[float, float, float]


# ──────────────────────────────────────────────────────────────
# Writers
# ──────────────────────────────────────────────────────────────

def _header(cls: str, location: str, obj: str) -> str:
    return (
        "FoamFile\n"
        "{\n"
        "    version     2.0;\n"
        "    format      ascii;\n"
        f"    class       {cls};\n"
        f"    location    \"{location}\";\n"
        f"    object      {obj};\n"
        "}\n\n"
    )


def _vec(v: Sequence[float]) -> str:
    return "(" + " ".join(repr(float(c)) for c in v) + ")"


def write_mesh(case_dir: Path, region: Optional[str] = None) -> Path:
    mesh_dir = case_dir / "constant"
    if region:
        mesh_dir = mesh_dir / region
    mesh_dir = mesh_dir / "polyMesh"
    mesh_dir.mkdir(parents=True, exist_ok=True)

    loc = str(mesh_dir.relative_to(case_dir))

    (mesh_dir / "points").write_text(
        _header("vectorField", loc, "points")
        + f"{len(POINTS)}\n(\n" + "\n".join(_vec(p) for p in POINTS) + "\n)\n"
    )
    (mesh_dir / "faces").write_text(
        _header("faceList", loc, "faces")
        + f"{len(FACES)}\n(\n"
        + "\n".join(f"{len(f)}(" + " ".join(str(v) for v in f) + ")" for f in FACES)
        + "\n)\n"
    )
    (mesh_dir / "owner").write_text(
        _header("labelList", loc, "owner")
        + f"{len(OWNER)}\n(\n" + "\n".join(str(o) for o in OWNER) + "\n)\n"
    )
    (mesh_dir / "neighbour").write_text(
        _header("labelList", loc, "neighbour")
        + f"{len(NEIGHBOUR)}\n(\n" + "\n".join(str(n) for n in NEIGHBOUR) + "\n)\n"
    )
    (mesh_dir / "boundary").write_text(
        _header("polyBoundaryMesh", loc, "boundary")
        + f"{len(PATCHES)}\n(\n"
        + "".join(
            f"    {name}\n    {{\n        type {ptype};\n        nFaces {n};\n        startFace {start};\n    }}\n"
            for name, ptype, start, n in PATCHES
        )
        + ")\n"
    )
    return mesh_dir


def write_vector_field(
    case_dir: Path,
    time_name: str,
    name: str,
    values: Union[Vector, Sequence[Vector]],
    region: Optional[str] = None,
) -> Path:
    """Write a volVectorField; a single tuple is written as a uniform field."""
    time_dir = case_dir / time_name
    if region:
        time_dir = time_dir / region
    time_dir.mkdir(parents=True, exist_ok=True)

    if isinstance(values, tuple):
        internal = f"uniform {_vec(values)};"
    else:
        internal = (
            "nonuniform List<vector>\n"
            f"{len(values)}\n(\n" + "\n".join(_vec(v) for v in values) + "\n)\n;"
        )

    path = time_dir / name
    path.write_text(
        _header("volVectorField", time_name, name)
        + "dimensions      [0 1 -1 0 0 0 0];\n\n"
        + f"internalField   {internal}\n\n"
        + "boundaryField\n{\n"
        + "    inlet\n    {\n        type            fixedValue;\n        value           uniform (1 0 0);\n    }\n"
        + "    outlet\n    {\n        type            zeroGradient;\n    }\n"
        + "    walls\n    {\n        type            noSlip;\n    }\n"
        + "}\n"
    )
    return path


def write_scalar_field(case_dir: Path, time_name: str, name: str, value: float) -> Path:
    time_dir = case_dir / time_name
    time_dir.mkdir(parents=True, exist_ok=True)
    path = time_dir / name
    path.write_text(
        _header("volScalarField", time_name, name)
        + "dimensions      [0 2 -2 0 0 0 0];\n\n"
        + f"internalField   uniform {value!r};\n\n"
        + "boundaryField\n{\n    walls\n    {\n        type            zeroGradient;\n    }\n}\n"
    )
    return path


# ──────────────────────────────────────────────────────────────
# Fixtures
# ──────────────────────────────────────────────────────────────

@pytest.fixture
def foam_case(tmp_path):
    """
    Factory building a two-cell case.

    ``fields`` maps time name -> U values (list of vectors, or one tuple for uniform).
    """
    def _foam_case(fields: Dict[str, Union[Vector, Sequence[Vector]]], region: Optional[str] = None) -> Path:
        case_dir = tmp_path / "case"
        (case_dir / "system").mkdir(parents=True, exist_ok=True)
        (case_dir / "system" / "controlDict").write_text(
            _header("dictionary", "system", "controlDict")
            + "application     icoFoam;\n"
        )
        write_mesh(case_dir, region=region)
        for time_name, values in fields.items():
            write_vector_field(case_dir, time_name, "U", values, region=region)
        return case_dir

    yield _foam_case


@pytest.fixture
def output_dir(tmp_path):
    out = tmp_path / "out"
    out.mkdir()
    return out
