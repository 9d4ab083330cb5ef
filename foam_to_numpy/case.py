# -*- coding: utf-8 -*-

"""

Reading (and writing back) the parts of an OpenFOAM case this tool needs.

──────────────────────────────────────────────────────────────────────────────
What lives here
──────────────────────────────────────────────────────────────────────────────
- ``FoamMesh``: cell count, cell centres and patches of ``constant/polyMesh``. The
  centres are computed from the mesh geometry (face-pyramid decomposition),
  the same way OpenFOAM builds ``mesh.C()``, so no ``writeCellCentres`` run is
  required beforehand.
- ``read_vector_field``: the internal field of a vector field file at a time.
- ``write_cellc``: persist cell centres as an OpenFOAM ``volVectorField``,
  patches included.

File parsing (ASCII and binary) is delegated to foamlib.

"""

from __future__ import annotations

import logging
import os
from typing import Iterator, List, Mapping, NamedTuple, Optional, Tuple

import numpy as np
from foamlib import FoamFieldFile, FoamFile

from .errors import FieldReadError, MeshReadError, OutputWriteError
from .times import TimeStep

logger = logging.getLogger("foam_to_numpy")

VSMALL = 1.0e-300
ROOTVSMALL = 1.0e-150


def _faces_by_size(faces) -> Iterator[Tuple[int, np.ndarray, np.ndarray]]:
    """
    Group faces by number of vertices.

    Yields:
        (size, face_indices, vertex_labels) with vertex_labels shaped (m, size).
    """
    if isinstance(faces, np.ndarray) and faces.ndim == 2:
        yield faces.shape[1], np.arange(len(faces)), faces.astype(np.int64)
        return

    sizes = np.fromiter((len(f) for f in faces), dtype=np.int64, count=len(faces))

    for size in np.unique(sizes):
        index = np.flatnonzero(sizes == size)
        verts = np.array([np.asarray(faces[i], dtype=np.int64) for i in index], dtype=np.int64)
        yield int(size), index, verts


def face_centres_and_areas(points: np.ndarray, faces) -> Tuple[np.ndarray, np.ndarray]:
    """
    Face centres and area vectors.

    Triangles use the vertex average. Larger polygons are split into triangles
    around the vertex average and the centre is the area-weighted mean of the
    triangle centres. Area vectors follow the right-hand rule on the vertex order.

    Args:
        points: (n_points, 3) coordinates.
        faces: sequence of vertex label lists, or an (n_faces, k) array.

    Returns:
        (centres, areas), both (n_faces, 3).
    """
    n_faces = len(faces)
    centres = np.zeros((n_faces, 3))
    areas = np.zeros((n_faces, 3))

    for size, index, verts in _faces_by_size(faces):
        if size < 3:
            raise ValueError(f"{len(index)} face(s) with fewer than 3 vertices")

        pts = points[verts]

        if size == 3:
            centres[index] = pts.mean(axis=1)
            areas[index] = 0.5 * np.cross(pts[:, 1] - pts[:, 0], pts[:, 2] - pts[:, 0])
            continue

        estimate = pts.mean(axis=1)[:, None, :]
        nxt = np.roll(pts, -1, axis=1)

        tri_centre = pts + nxt + estimate
        tri_normal = np.cross(nxt - pts, estimate - pts)
        tri_area = np.linalg.norm(tri_normal, axis=2)

        sum_n = tri_normal.sum(axis=1)
        sum_a = tri_area.sum(axis=1)
        sum_ac = (tri_area[..., None] * tri_centre).sum(axis=1)

        flat = sum_a < ROOTVSMALL
        safe_a = np.where(flat, 1.0, sum_a)

        centres[index] = np.where(flat[:, None], estimate[:, 0, :], sum_ac / (3.0 * safe_a[:, None]))
        areas[index] = np.where(flat[:, None], 0.0, 0.5 * sum_n)

    return centres, areas


def _accumulate(index: np.ndarray, values: np.ndarray, n: int) -> np.ndarray:
    if values.ndim == 1:
        return np.bincount(index, weights=values, minlength=n)
    return np.column_stack([np.bincount(index, weights=values[:, k], minlength=n) for k in range(values.shape[1])])


def cell_centres(
    face_centres: np.ndarray,
    face_areas: np.ndarray,
    owner: np.ndarray,
    neighbour: np.ndarray,
    n_cells: int,
) -> np.ndarray:
    """
    Volume-weighted cell centroids from the face-pyramid decomposition.

    Each face forms a pyramid with an estimated cell centre (mean of the cell's
    face centres). Cells with vanishing volume fall back to the estimate.

    Args:
        face_centres, face_areas: (n_faces, 3) from ``face_centres_and_areas``.
        owner: owner cell per face (n_faces,).
        neighbour: neighbour cell per internal face (n_internal_faces,).
        n_cells: number of cells.

    Returns:
        (n_cells, 3) cell centres.
    """
    n_internal = len(neighbour)
    internal_centres = face_centres[:n_internal]
    internal_areas = face_areas[:n_internal]

    n_faces_per_cell = np.bincount(owner, minlength=n_cells) + np.bincount(neighbour, minlength=n_cells)
    if np.any(n_faces_per_cell == 0):
        raise ValueError(f"{int(np.count_nonzero(n_faces_per_cell == 0))} cell(s) without faces")

    estimate = (
        _accumulate(owner, face_centres, n_cells) + _accumulate(neighbour, internal_centres, n_cells)
    ) / n_faces_per_cell[:, None]

    # pyramid volumes (times 3) and centroids, owner side then neighbour side
    own_vol = np.einsum("ij,ij->i", face_areas, face_centres - estimate[owner])
    own_ctr = 0.75 * face_centres + 0.25 * estimate[owner]

    nei_vol = np.einsum("ij,ij->i", internal_areas, estimate[neighbour] - internal_centres)
    nei_ctr = 0.75 * internal_centres + 0.25 * estimate[neighbour]

    vols = _accumulate(owner, own_vol, n_cells) + _accumulate(neighbour, nei_vol, n_cells)
    weighted = (
        _accumulate(owner, own_vol[:, None] * own_ctr, n_cells)
        + _accumulate(neighbour, nei_vol[:, None] * nei_ctr, n_cells)
    )

    centres = estimate.copy()
    ok = np.abs(vols) > VSMALL
    centres[ok] = weighted[ok] / vols[ok, None]

    return centres


def mesh_dir_for(case_dir: str, region: Optional[str] = None) -> str:
    if region:
        return os.path.join(case_dir, "constant", region, "polyMesh")
    return os.path.join(case_dir, "constant", "polyMesh")


def _read_mesh_entry(mesh_dir: str, name: str):
    path = os.path.join(mesh_dir, name)
    if not os.path.exists(path) and not os.path.exists(path + ".gz"):
        raise MeshReadError(mesh_dir, f"missing '{name}'")
    try:
        return FoamFile(path)[None]
    except Exception as e:
        logger.debug("Parsing '%s' failed", path, exc_info=True)
        raise MeshReadError(mesh_dir, f"cannot parse '{name}': {e}") from e


class Patch(NamedTuple):
    """One entry of ``polyMesh/boundary``."""
    name: str
    type: str
    start_face: int
    n_faces: int


# patch types whose field entries carry no value
CONSTRAINT_TYPES = frozenset({
    "empty",
    "cyclic",
    "cyclicAMI",
    "cyclicSlip",
    "symmetry",
    "symmetryPlane",
    "wedge",
})

# constraint types that keep their type but still carry a value
VALUED_CONSTRAINT_TYPES = frozenset({"processor", "processorCyclic"})


def parse_boundary(entries, n_faces: int) -> List[Patch]:
    """
    Turn parsed ``polyMesh/boundary`` content into patches.

    Accepts a mapping ``{name: dict}`` or a sequence of ``(name, dict)`` pairs,
    the two shapes a boundary list parses to.

    Raises:
        ValueError: malformed entry or a patch outside the face list.
    """
    if isinstance(entries, Mapping):
        items = list(entries.items())
    else:
        items = list(entries)

    patches: List[Patch] = []
    for item in items:
        try:
            name, entry = item
        except (TypeError, ValueError):
            raise ValueError(f"malformed boundary entry {item!r}") from None

        if not isinstance(entry, Mapping):
            raise ValueError(f"boundary entry '{name}' is not a dictionary")

        try:
            patch = Patch(str(name), str(entry["type"]), int(entry["startFace"]), int(entry["nFaces"]))
        except KeyError as e:
            raise ValueError(f"boundary entry '{name}' has no {e}") from None

        if patch.start_face < 0 or patch.n_faces < 0 or patch.start_face + patch.n_faces > n_faces:
            raise ValueError(
                f"patch '{patch.name}' faces {patch.start_face}..{patch.start_face + patch.n_faces} "
                f"outside {n_faces} faces"
            )
        patches.append(patch)

    return patches


class FoamMesh:
    """
    Cell count, cell centres and patches of an OpenFOAM polyMesh.

    Immutable once built; a run loads it once and reuses it for every time step.
    """

    def __init__(
        self,
        mesh_dir: str,
        cell_centres: np.ndarray,
        face_centres: Optional[np.ndarray] = None,
        patches: Tuple[Patch, ...] = (),
    ):
        self.mesh_dir = mesh_dir
        self.cell_centres = cell_centres
        self.cell_centres.setflags(write=False)
        self.face_centres = face_centres if face_centres is not None else np.zeros((0, 3))
        self.face_centres.setflags(write=False)
        self.patches = tuple(patches)

    @property
    def n_cells(self) -> int:
        return len(self.cell_centres)

    def patch_face_centres(self, patch: Patch) -> np.ndarray:
        return self.face_centres[patch.start_face:patch.start_face + patch.n_faces]

    @classmethod
    def read(cls, case_dir: str, region: Optional[str] = None) -> "FoamMesh":
        """
        Read ``constant/[region/]polyMesh`` and compute the cell centres.

        Raises:
            MeshReadError: a mesh file is missing, unparsable or inconsistent.
        """
        mesh_dir = mesh_dir_for(case_dir, region)

        if not os.path.isdir(mesh_dir):
            raise MeshReadError(mesh_dir, "directory not found")

        logger.info("Reading mesh from '%s'", mesh_dir)

        points = np.asarray(_read_mesh_entry(mesh_dir, "points"), dtype=float)
        faces = _read_mesh_entry(mesh_dir, "faces")
        owner = np.asarray(_read_mesh_entry(mesh_dir, "owner"), dtype=np.int64).ravel()
        neighbour = np.asarray(_read_mesh_entry(mesh_dir, "neighbour"), dtype=np.int64).ravel()
        boundary = _read_mesh_entry(mesh_dir, "boundary")

        if points.ndim != 2 or points.shape[1] != 3:
            raise MeshReadError(mesh_dir, f"points have shape {points.shape}, expected (n, 3)")
        if len(owner) != len(faces):
            raise MeshReadError(mesh_dir, f"{len(owner)} owners for {len(faces)} faces")
        if len(neighbour) > len(owner):
            raise MeshReadError(mesh_dir, f"{len(neighbour)} neighbours for {len(owner)} faces")
        if len(owner) == 0:
            raise MeshReadError(mesh_dir, "mesh has no faces")

        n_cells = int(max(owner.max(), neighbour.max() if len(neighbour) else -1)) + 1

        try:
            patches = parse_boundary(boundary, len(owner))
            f_ctrs, f_areas = face_centres_and_areas(points, faces)
            centres = cell_centres(f_ctrs, f_areas, owner, neighbour, n_cells)
        except (ValueError, IndexError) as e:
            raise MeshReadError(mesh_dir, str(e)) from e

        logger.info("Mesh: %d points, %d faces, %d cells, %d patches", len(points), len(owner), n_cells, len(patches))
        return cls(mesh_dir, centres, f_ctrs, patches)


def field_path(case_dir: str, time_step: TimeStep, name: str, region: Optional[str] = None) -> str:
    if region:
        return os.path.join(case_dir, time_step.label, region, name)
    return os.path.join(case_dir, time_step.label, name)


def read_vector_field(
    case_dir: str,
    time_step: TimeStep,
    name: str,
    n_cells: int,
    region: Optional[str] = None,
) -> np.ndarray:
    """
    Read the internal field of vector field ``name`` at ``time_step``.

    A ``uniform`` internal field is expanded to ``n_cells`` rows; a
    ``nonuniform`` one is returned as read. The caller checks the row count.

    Returns:
        (n, 3) float array.

    Raises:
        FieldReadError: missing file, parse failure or non-vector data.
    """
    path = field_path(case_dir, time_step, name, region)

    if not os.path.exists(path) and not os.path.exists(path + ".gz"):
        raise FieldReadError(name, time_step.label, f"file not found: {path}")

    try:
        values = FoamFieldFile(path).internal_field
    except Exception as e:
        logger.debug("Parsing '%s' failed", path, exc_info=True)
        raise FieldReadError(name, time_step.label, f"cannot parse '{path}': {e}") from e

    try:
        values = np.asarray(values, dtype=float)
    except (TypeError, ValueError) as e:
        raise FieldReadError(name, time_step.label, f"non-numeric internal field: {e}") from e

    if values.shape == (3,):
        logger.debug("Field '%s' at %s is uniform %s", name, time_step.label, values)
        return np.tile(values, (n_cells, 1))

    if values.ndim != 2 or values.shape[1] != 3:
        raise FieldReadError(name, time_step.label, f"not a vector field (shape {values.shape})")

    return values


def cellc_boundary_field(mesh: FoamMesh) -> dict:
    """
    Patch entries of the cellC field.

    Constraint patches keep their own type. Every other patch is ``calculated``
    with the centres of its faces as value.
    """
    boundary = {}
    for patch in mesh.patches:
        if patch.type in CONSTRAINT_TYPES:
            boundary[patch.name] = {"type": patch.type}
            continue

        ptype = patch.type if patch.type in VALUED_CONSTRAINT_TYPES else "calculated"
        if patch.n_faces == 0:
            boundary[patch.name] = {"type": ptype, "value": [0.0, 0.0, 0.0]}
        else:
            boundary[patch.name] = {"type": ptype, "value": np.array(mesh.patch_face_centres(patch))}
    return boundary


def write_cellc(case_dir: str, time_step: TimeStep, mesh: FoamMesh, region: Optional[str] = None) -> str:
    """
    Persist cell centres as ``<time>/[region/]cellC`` (ascii volVectorField).

    The internal field holds the cell centres and each patch the centres of
    its boundary faces, so OpenFOAM can read the file back.

    Returns:
        Path of the written field file.

    Raises:
        OutputWriteError: the file cannot be written.
    """
    path = field_path(case_dir, time_step, "cellC", region)
    location = os.path.relpath(os.path.dirname(path), case_dir)
    boundary = cellc_boundary_field(mesh)

    try:
        with FoamFieldFile(path) as field:
            field["FoamFile"] = {
                "version": 2.0,
                "format": "ascii",
                "class": "volVectorField",
                "location": f'"{location}"',
                "object": "cellC",
            }
            field.dimensions = FoamFile.DimensionSet(length=1)
            field.internal_field = np.array(mesh.cell_centres, dtype=float)
            field.boundary_field = boundary
    except OSError as e:
        raise OutputWriteError(path, e.strerror or str(e)) from e
    except Exception as e:
        logger.debug("Writing '%s' failed", path, exc_info=True)
        raise OutputWriteError(path, str(e)) from e

    logger.debug("Wrote cellC field to '%s'", path)
    return path
