# -*- coding: utf-8 -*-

"""

Exceptions raised by foam_to_numpy.

Every error here is fatal for a run: the CLI reports it and exits non-zero.

"""

from typing import Iterable, Optional


class FoamToNumpyError(Exception):
    """Base class for all conversion failures."""


class NoMatchingTimes(FoamToNumpyError):
    def __init__(self, case_dir: str, available: Iterable[str] = ()):
        available = list(available)
        message = f"No time directories in < {case_dir} > match the selection."
        if available:
            message += f" Available: {', '.join(available)}"
        else:
            message += " The case has no time directories."
        super().__init__(message)


class MeshReadError(FoamToNumpyError):
    def __init__(self, mesh_dir: str, reason: str):
        super().__init__(f"Cannot read mesh < {mesh_dir} >: {reason}")


class FieldReadError(FoamToNumpyError):
    def __init__(self, field_name: str, time_name: str, reason: str):
        self.field_name = field_name
        self.time_name = time_name
        super().__init__(f"Cannot read field < {field_name} > at time {time_name}: {reason}")


class OutputWriteError(FoamToNumpyError):
    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = path
        message = f"Failed to open file for writing < {path} >"
        if reason:
            message += f": {reason}"
        super().__init__(message)
