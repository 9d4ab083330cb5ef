#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""

Run loop for foam_to_numpy: one case, many time steps, strictly in order.

"""

from __future__ import annotations

from typing import List, Optional, Sequence

import logging
import os
import time

from .case import FoamMesh
from .converter import FoamToNumpyConverter, FrameBuffers
from .errors import OutputWriteError
from .times import TimeRange, resolve_times

logger = logging.getLogger("foam_to_numpy")


def run_conversion(
    case_dir: str,
    output_dir: str = ".",
    time_ranges: Optional[Sequence[TimeRange]] = None,
    latest_time: bool = False,
    no_zero: bool = False,
    include_constant: bool = False,
    region: Optional[str] = None,
    write_cellc: bool = False,
    dry_run: bool = False,
) -> List[str]:
    """
    High-level runner that converts every selected time step of one case.

    Parameters:
    - case_dir: OpenFOAM case directory.
    - output_dir: Directory receiving the .bin files. Created if missing.
    - time_ranges: Parsed -time specification, or None for the default selection.
    - latest_time, no_zero, include_constant: OpenFOAM time selection flags.
    - region: Optional mesh region name.
    - write_cellc: Also persist cellC as an OpenFOAM field inside the case.
    - dry_run: If True, read and flatten everything but write nothing.

    Behavior:
    - Times are resolved before anything is written; an empty selection raises
      NoMatchingTimes.
    - The mesh is read once and the two output buffers are sized once from it.
    - The first error aborts the run. Files from earlier time steps are kept.

    Returns:
    - Paths of the files written, in order.
    """

    t0 = time.time()

    selected = resolve_times(
        case_dir,
        time_ranges=time_ranges,
        latest_time=latest_time,
        no_zero=no_zero,
        include_constant=include_constant,
    )

    mesh = FoamMesh.read(case_dir, region=region)
    buffers = FrameBuffers(mesh.n_cells)

    if not dry_run:
        try:
            os.makedirs(output_dir, exist_ok=True)
        except OSError as e:
            raise OutputWriteError(output_dir, e.strerror or str(e)) from e

    converter = FoamToNumpyConverter(
        case_dir=case_dir,
        output_dir=output_dir,
        region=region,
        write_cellc=write_cellc,
        dry_run=dry_run,
    )

    written: List[str] = []

    for time_step in selected:
        written.extend(converter.convert_frame(time_step, mesh, buffers))

    logger.info("Converted %d time step(s) of %d cells", len(selected), mesh.n_cells)
    logger.info("Total elapsed: %.2fs", time.time() - t0)

    return [] if dry_run else written
