#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""

─────────────────────────────────────────────────────────────
Example Usage of foam_to_numpy
─────────────────────────────────────────────────────────────

This script demonstrates how to use the library API to
explore an OpenFOAM case and convert its velocity field into
flat float32 files, then load them back with NumPy.

Features demonstrated:
1. Listing and selecting time directories
2. Reading the mesh once (cell count and cell centres)
3. Converting the selected time steps
4. Loading the .bin files back as (n, 3) arrays

─────────────────────────────────────────────────────────────

"""

import os

import numpy as np

from foam_to_numpy import (
    FoamMesh,
    list_times,
    parse_time_spec,
    run_conversion,
    select_times,
)
from foam_to_numpy.converter import setup_logging

# ──────────────────────────────────────────────────────────────
# Configuration
# ──────────────────────────────────────────────────────────────

CASE_DIR = "cavity"

TIME_SPEC = "0.1:0.5"

OUTPUT_DIR = "flat_outputs"

DRY_RUN = False


# ──────────────────────────────────────────────────────────────
# Main Example Workflow
# ──────────────────────────────────────────────────────────────

def main():

    setup_logging(verbose=False)

    print("=== foam_to_numpy Example Usage ===")

    available = list_times(CASE_DIR)
    selected = select_times(available, parse_time_spec(TIME_SPEC))
    print("Available times:", ", ".join(t.label for t in available))
    print("Selected times: ", ", ".join(t.label for t in selected))

    mesh = FoamMesh.read(CASE_DIR)
    print(f"Mesh has {mesh.n_cells} cells; each file will be {12 * mesh.n_cells} bytes")

    run_conversion(
        CASE_DIR,
        output_dir=OUTPUT_DIR,
        time_ranges=parse_time_spec(TIME_SPEC),
        dry_run=DRY_RUN,
    )

    if DRY_RUN:
        return

    for t in selected:
        u = np.fromfile(os.path.join(OUTPUT_DIR, f"U_flat_{t.label}.bin"), dtype="<f4").reshape(mesh.n_cells, 3)
        c = np.fromfile(os.path.join(OUTPUT_DIR, f"cellC_flat_{t.label}.bin"), dtype="<f4").reshape(mesh.n_cells, 3)
        speed = np.linalg.norm(u, axis=1)
        fastest = int(np.argmax(speed))
        print(f"t={t.label}: max |U| = {speed[fastest]:.4g} at {tuple(c[fastest])}")


# ──────────────────────────────────────────────────────────────
# Entry Point
# ──────────────────────────────────────────────────────────────

if __name__ == "__main__":
    main()
