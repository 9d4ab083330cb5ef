#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""

──────────────────────────────────────────────────────────────────────────────
CLI QUICK START (copy–paste, then tweak)
──────────────────────────────────────────────────────────────────────────────
Example run (two time ranges, output next to the case):

    foam-to-numpy -case ./cavity -time 0.1:0.3,0.5 -o ./flat --verbose

Exploration mode :

    # Lists the time directories, marks the ones the selection picks and
    # prints the mesh cell count
    foam-to-numpy -case ./cavity -latestTime --list-times

    # Dry-run: read and flatten every selected step, but don’t write .bin files
    foam-to-numpy -case ./cavity --dry-run --verbose

Time selection (OpenFOAM conventions):

    -time SPEC         "0.1" or "0.1,0.3" or "0.1:0.5" or ":0.5" or "0.2:"
                       Single values pick the closest existing time.
    -latestTime        Select the latest time
    -noZero            Exclude the 0 directory
    -constant          Include the constant directory

Optional args:

    -case              Case directory (default: current directory)
    -region            Mesh region name
    --output-dir / -o  Where U_flat_T.bin / cellC_flat_T.bin go (default: .)
    --write-cellC      Also store cellC as an OpenFOAM field in each time directory
    --list-times       Only list time directories and the cell count, then exit
    --dry-run          Run everything except the actual write step
    --verbose          step-by-step narration

Reading the output back:

    n = <cell count>
    u = np.fromfile("U_flat_0.1.bin", dtype="<f4").reshape(n, 3)

"""


import os
import sys
import argparse
import logging
from typing import List, Optional

from .case import FoamMesh
from .converter import setup_logging
from .errors import FoamToNumpyError
from .runner import run_conversion
from .times import list_times, parse_time_spec, select_times

logger = logging.getLogger("foam_to_numpy")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="foam-to-numpy",
        description="Convert OpenFOAM U and cell centres to flat float32 binaries readable by NumPy",
    )

    # Case selection
    parser.add_argument("-case", dest="case", default=".", help="Case directory (default: current directory)")
    parser.add_argument("-region", dest="region", default=None, help="Mesh region name. Optional.")

    # Time selection
    parser.add_argument("-time", dest="time", type=parse_time_spec, default=None, help="Times like '0.1', '0.1,0.3', '0.1:0.5', ':0.5' or '0.2:'.")
    parser.add_argument("-latestTime", dest="latest_time", action="store_true", help="Select the latest time.")
    parser.add_argument("-noZero", dest="no_zero", action="store_true", help="Exclude the 0 directory.")
    parser.add_argument("-constant", dest="constant", action="store_true", help="Include the constant directory.")

    # Output
    parser.add_argument("-o", "--output-dir", dest="output_dir", default=".", help="Output directory for .bin files (default: current directory)")
    parser.add_argument("--write-cellC", dest="write_cellc", action="store_true", help="Also write cellC as an OpenFOAM field into each selected time directory.")

    parser.add_argument("--list-times", action="store_true", help="List time directories (selected ones marked with '*') and the cell count, then exit.")

    # Utility flags
    parser.add_argument("--dry-run", action="store_true", help="Read and flatten without writing files.")
    parser.add_argument("--verbose", action="store_true", help="Verbose logging.")

    return parser


def main(argv: Optional[List[str]] = None) -> None:

    """
    Parse CLI args and run the conversion.
    """

    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure logging early
    setup_logging(args.verbose)

    case_dir = os.path.abspath(args.case)

    if not os.path.isdir(case_dir):
        logger.error("Case directory not found: %s", case_dir)
        raise FileNotFoundError(f"Case directory not found: {case_dir}")

    if args.list_times:
        try:
            mesh = FoamMesh.read(case_dir, args.region)
        except FoamToNumpyError as e:
            logger.error("FATAL: %s", e)
            sys.exit(1)

        available = list_times(case_dir)
        selected = select_times(
            available,
            time_ranges=args.time,
            latest_time=args.latest_time,
            no_zero=args.no_zero,
            include_constant=args.constant,
        )

        if available:
            print("Available times ('*' = selected):")
            for t in available:
                print(" *" if t in selected else "  ", t.label)
        else:
            print("No time directories found.")
        print(f"Cells: {mesh.n_cells}")
        return

    try:
        run_conversion(
            case_dir=case_dir,
            output_dir=args.output_dir,
            time_ranges=args.time,
            latest_time=args.latest_time,
            no_zero=args.no_zero,
            include_constant=args.constant,
            region=args.region,
            write_cellc=args.write_cellc,
            dry_run=args.dry_run,
        )
    except FoamToNumpyError as e:
        logger.error("FATAL: %s", e)
        sys.exit(1)
    except Exception as e:
        logger.exception("FATAL: Unexpected error: %s", e)
        raise

    logger.info("End")


if __name__ == "__main__":
    main()
