# -*- coding: utf-8 -*-

"""

foam_to_numpy: OpenFOAM → flat NumPy binaries
=============================================

──────────────────────────────────────────────────────────────────────────────
Description
──────────────────────────────────────────────────────────────────────────────
Converts the velocity field U and the cell centres of an OpenFOAM case into
raw float32 files, one pair per time step, that load with ``np.fromfile``.

──────────────────────────────────────────────────────────────────────────────
WHY THIS EXISTS
──────────────────────────────────────────────────────────────────────────────
- OpenFOAM stores fields as text or binary dictionaries per time directory,
  which is slow and awkward to load into array tooling repeatedly.
- A flat ``[x0, y0, z0, x1, ...]`` float32 array per field is the smallest
  format that numerical and machine-learning code can memory-map directly.

"""

from .converter import (
    FoamToNumpyConverter,
    FrameBuffers,
    flatten_frame,
    write_flat,
    flat_filename,
)

from .case import (
    FoamMesh,
    read_vector_field,
    write_cellc,
)

from .times import (
    TimeStep,
    TimeRange,
    parse_time_spec,
    list_times,
    select_times,
    resolve_times,
)

from .runner import run_conversion

from .errors import (
    FoamToNumpyError,
    NoMatchingTimes,
    MeshReadError,
    FieldReadError,
    OutputWriteError,
)

__version__ = "1.0.0"
