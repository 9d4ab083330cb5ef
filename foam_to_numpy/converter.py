#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""

──────────────────────────────────────────────────────────────────────────────
Description
──────────────────────────────────────────────────────────────────────────────
Per-time-step conversion of OpenFOAM vector fields into flat float32 files
that NumPy can read back with a single call:

    u = np.fromfile("U_flat_0.1.bin", dtype="<f4").reshape(-1, 3)

──────────────────────────────────────────────────────────────────────────────
OUTPUT LAYOUT
──────────────────────────────────────────────────────────────────────────────
For every selected time T two files are written:

 - U_flat_T.bin       velocity     [u0x, u0y, u0z, u1x, ...]
 - cellC_flat_T.bin   cell centres [c0x, c0y, c0z, c1x, ...]

Each holds 3*n little-endian float32 values (12*n bytes) with no header.
Row i of both files is the same cell, so the two can be zipped directly.

"""


from __future__ import annotations

import logging
import os
import time
from typing import List, Optional

import numpy as np

from .case import FoamMesh, read_vector_field, write_cellc
from .errors import FieldReadError, OutputWriteError
from .times import TimeStep

FLAT_DTYPE = np.dtype("<f4")

VELOCITY = "U"
CELL_CENTRES = "cellC"


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

    # Reduce noise from libraries (adjustable)
    logging.getLogger("foamlib").setLevel(logging.WARNING)


logger = logging.getLogger("foam_to_numpy")


def flat_filename(field_name: str, time_label: str) -> str:
    return f"{field_name}_flat_{time_label}.bin"


class FrameBuffers:
    """
    The two reusable output buffers of a run.

    Both buffers are rows of one (2, 3*n) float32 array, allocated once from
    the mesh cell count and overwritten for every time step.
    """

    def __init__(self, n_cells: int):
        if n_cells <= 0:
            raise ValueError(f"Cell count must be positive, got {n_cells}")
        self.n_cells = n_cells
        self._storage = np.zeros((2, 3 * n_cells), dtype=FLAT_DTYPE)

    @property
    def u_flat(self) -> np.ndarray:
        return self._storage[0]

    @property
    def cellc_flat(self) -> np.ndarray:
        return self._storage[1]

    @property
    def frame_view(self) -> np.ndarray:
        """(2, n, 3) view: [field, cell, component]."""
        return self._storage.reshape(2, self.n_cells, 3)


def flatten_frame(u: np.ndarray, cellc: np.ndarray, buffers: FrameBuffers, time_label: str = "?") -> None:
    """
    Fill both buffers from one time step's fields in a single joint assignment.

    Both fields are checked against the buffer cell count before anything is
    written, so a short or malformed field leaves the buffers untouched and
    the two outputs can never disagree on which row is which cell.

    Args:
        u: (n, 3) velocity.
        cellc: (n, 3) cell centres.
        buffers: run buffers sized for n cells.
        time_label: used in error messages only.

    Raises:
        FieldReadError: either field does not have exactly n rows of 3 components.
    """
    n = buffers.n_cells

    for name, arr in ((VELOCITY, u), (CELL_CENTRES, cellc)):
        if arr.ndim != 2 or arr.shape[1] != 3:
            raise FieldReadError(name, time_label, f"expected (n, 3) values, got shape {arr.shape}")
        if arr.shape[0] != n:
            raise FieldReadError(name, time_label, f"{arr.shape[0]} values for a mesh of {n} cells")

    buffers.frame_view[...] = np.stack((u, cellc))


def write_flat(buffer: np.ndarray, path: str) -> None:
    """
    Write a flat buffer as raw little-endian float32.

    Raises:
        OutputWriteError: the file cannot be opened or written.
    """
    try:
        with open(path, "wb") as fh:
            buffer.astype(FLAT_DTYPE, copy=False).tofile(fh)
    except OSError as e:
        raise OutputWriteError(path, e.strerror or str(e)) from e


class FoamToNumpyConverter:
    """
    Convert single time steps of an OpenFOAM case to flat binary files.

    The converter holds configuration only; the buffers are passed in so the
    caller owns them across the whole run.
    """

    def __init__(
        self,
        case_dir: str,
        output_dir: str = ".",
        region: Optional[str] = None,
        write_cellc: bool = False,
        dry_run: bool = False,
    ):
        # Inputs & configuration
        self.case_dir = case_dir
        self.output_dir = output_dir
        self.region = region

        # side channel: also store cellC inside the case
        self.write_cellc = write_cellc

        self.dry_run = dry_run

    def output_paths(self, time_step: TimeStep) -> List[str]:
        return [
            os.path.join(self.output_dir, flat_filename(VELOCITY, time_step.label)),
            os.path.join(self.output_dir, flat_filename(CELL_CENTRES, time_step.label)),
        ]

    def read_velocity(self, time_step: TimeStep, mesh: FoamMesh) -> np.ndarray:
        logger.info("Reading field %s", VELOCITY)
        return read_vector_field(self.case_dir, time_step, VELOCITY, mesh.n_cells, self.region)

    def convert_frame(self, time_step: TimeStep, mesh: FoamMesh, buffers: FrameBuffers) -> List[str]:
        """
        Read, flatten and write one time step.

        Args:
            time_step: selected time.
            mesh: run mesh (supplies cell count and cell centres).
            buffers: run buffers, overwritten in place.

        Returns:
            Paths of the two files written (or that would be written in dry-run).

        Raises:
            FieldReadError: U is missing or does not match the mesh.
            OutputWriteError: a destination cannot be written.
        """
        logger.info("Time = %s", time_step.label)
        t0 = time.time()

        u = self.read_velocity(time_step, mesh)
        cellc = mesh.cell_centres

        flatten_frame(u, cellc, buffers, time_step.label)

        u_path, cellc_path = self.output_paths(time_step)

        if self.dry_run:
            logger.info("[dry-run] Would write '%s' and '%s' (%d values each)", u_path, cellc_path, buffers.u_flat.size)
            return [u_path, cellc_path]

        write_flat(buffers.u_flat, u_path)
        write_flat(buffers.cellc_flat, cellc_path)

        if self.write_cellc:
            write_cellc(self.case_dir, time_step, mesh, self.region)

        logger.info("DONE: Saved '%s' and '%s' in %.2fs", u_path, cellc_path, time.time() - t0)
        return [u_path, cellc_path]
