"""
Unit tests for foam_to_numpy package import.

These tests verify that:
1. The package can be imported without errors
2. The package exposes version metadata
3. The top-level names are the objects defined in the submodules
4. Every error is a FoamToNumpyError, so one except clause catches them all

"""

import pytest

import foam_to_numpy
from foam_to_numpy import case, converter, errors, runner, times

# ──────────────────────────────────────────────────────────────
# Configuration
# ──────────────────────────────────────────────────────────────

EXPORTS = {
    converter: ["FoamToNumpyConverter", "FrameBuffers", "flatten_frame", "write_flat", "flat_filename"],
    case: ["FoamMesh", "read_vector_field", "write_cellc"],
    times: ["TimeStep", "TimeRange", "parse_time_spec", "list_times", "select_times", "resolve_times"],
    runner: ["run_conversion"],
    errors: ["FoamToNumpyError", "NoMatchingTimes", "MeshReadError", "FieldReadError", "OutputWriteError"],
}

# ──────────────────────────────────────────────────────────────
# Tests
# ──────────────────────────────────────────────────────────────

def test_import_and_version():
    """Ensure the package loads and __version__ attribute exists."""
    assert hasattr(foam_to_numpy, "__version__")
    assert isinstance(foam_to_numpy.__version__, str)


@pytest.mark.parametrize("module", list(EXPORTS), ids=lambda m: m.__name__)
def test_reexports_are_submodule_objects(module):
    for name in EXPORTS[module]:
        assert getattr(foam_to_numpy, name) is getattr(module, name), name


@pytest.mark.parametrize("name", ["NoMatchingTimes", "MeshReadError", "FieldReadError", "OutputWriteError"])
def test_errors_share_base(name):
    assert issubclass(getattr(foam_to_numpy, name), foam_to_numpy.FoamToNumpyError)
