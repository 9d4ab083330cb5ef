# -*- coding: utf-8 -*-

"""

Time directory discovery and selection.

──────────────────────────────────────────────────────────────────────────────
Selection rules
──────────────────────────────────────────────────────────────────────────────
The rules mirror the OpenFOAM command-line conventions so the same
``-time``/``-latestTime``/``-noZero``/``-constant`` flags behave as users of
the solver utilities expect:

 - no option           every numeric time directory (``0`` included)
 - ``-time SPEC``      ranges select every time inside them, single values
                       select the time closest to the value
 - ``-latestTime``     the last numeric time (combined with ``-time``)
 - ``-constant``       adds ``constant``, never matched otherwise
 - ``-noZero``         drops ``0``

"""

from __future__ import annotations

import argparse
import logging
import os
import re
from typing import List, NamedTuple, Optional, Sequence

from foamlib import FoamCase

from .errors import NoMatchingTimes

logger = logging.getLogger("foam_to_numpy")

CONSTANT = "constant"

# relative tolerance for range bounds and exact values
_TOL = 1e-10


class TimeStep(NamedTuple):
    """One time directory: its on-disk name and numeric value."""

    label: str
    value: float

    @property
    def is_constant(self) -> bool:
        return self.label == CONSTANT


class TimeRange(NamedTuple):
    """
    One entry of a ``-time`` specification.

    ``lower``/``upper`` of None mean unbounded. A single value is stored with
    ``lower == upper`` and ``single=True``.
    """

    lower: Optional[float]
    upper: Optional[float]
    single: bool = False

    def contains(self, value: float) -> bool:
        if self.lower is not None and value < self.lower - _TOL * max(1.0, abs(self.lower)):
            return False
        if self.upper is not None and value > self.upper + _TOL * max(1.0, abs(self.upper)):
            return False
        return True


def _parse_bound(text: str, entry: str) -> Optional[float]:
    text = text.strip()
    if text == "":
        return None
    try:
        return float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid time value '{text}' in '{entry}'.")


def parse_time_spec(arg: str) -> List[TimeRange]:
    """
    Parse a time specification like '0.1', '0.1,0.3', '0.1:0.5', ':0.5' or '0.2:'.

    Entries may be separated by commas and/or whitespace.

    Args:
        arg: user-provided string

    Returns:
        List of TimeRange entries in the order given.

    Raises:
        argparse.ArgumentTypeError on invalid format.
    """

    entries = [e for e in re.split(r"[,\s]+", arg.strip()) if e != ""]

    if not entries:
        raise argparse.ArgumentTypeError("Empty time specification.")

    ranges = []

    for entry in entries:
        if ":" not in entry:
            value = _parse_bound(entry, entry)
            ranges.append(TimeRange(value, value, single=True))
            continue

        if entry.count(":") > 1:
            raise argparse.ArgumentTypeError(f"Invalid time range '{entry}'; use 'start:end'.")

        left, right = entry.split(":", 1)
        lower = _parse_bound(left, entry)
        upper = _parse_bound(right, entry)

        if lower is not None and upper is not None and upper < lower:
            raise argparse.ArgumentTypeError(f"Time range end must be >= start in '{entry}'.")

        ranges.append(TimeRange(lower, upper))

    return ranges


def list_times(case_dir: str) -> List[TimeStep]:
    """
    List the time directories of a case: ``constant`` (when present) first, then
    numeric time directories in ascending order.
    """
    times = []

    if os.path.isdir(os.path.join(case_dir, CONSTANT)):
        times.append(TimeStep(CONSTANT, 0.0))

    for time_dir in FoamCase(case_dir):
        times.append(TimeStep(time_dir.name, float(time_dir.time)))

    logger.debug("Found %d time directories in '%s'", len(times), case_dir)
    return times


def _closest_index(times: Sequence[TimeStep], target: float) -> int:
    best = -1
    best_diff = None
    for i, t in enumerate(times):
        if t.is_constant:
            continue
        diff = abs(t.value - target)
        if best_diff is None or diff < best_diff:
            best = i
            best_diff = diff
    return best


def select_times(
    times: Sequence[TimeStep],
    time_ranges: Optional[Sequence[TimeRange]] = None,
    latest_time: bool = False,
    no_zero: bool = False,
    include_constant: bool = False,
) -> List[TimeStep]:
    """
    Apply the selection flags to the list produced by ``list_times``.

    Args:
        times: candidate time steps, in on-disk order.
        time_ranges: parsed ``-time`` specification, or None.
        latest_time: select the latest numeric time.
        no_zero: exclude the ``0`` directory.
        include_constant: include the ``constant`` directory.

    Returns:
        Selected time steps, preserving the order of ``times``. May be empty;
        callers decide whether that is an error (see ``resolve_times``).
    """
    if not times:
        return []

    selected = [True] * len(times)

    constant_idx = -1
    zero_idx = -1
    for i, t in enumerate(times):
        if t.is_constant:
            constant_idx = i
        elif t.value == 0.0:
            zero_idx = i

    latest_idx = -1
    if latest_time:
        selected = [False] * len(times)
        latest_idx = len(times) - 1
        if latest_idx == constant_idx:
            latest_idx = -1

    if time_ranges is not None:
        selected = [
            not t.is_constant and any(r.contains(t.value) for r in time_ranges if not r.single)
            for t in times
        ]
        for r in time_ranges:
            if r.single:
                nearest = _closest_index(times, r.lower)
                if nearest >= 0:
                    selected[nearest] = True

    if latest_idx >= 0:
        selected[latest_idx] = True

    if constant_idx >= 0:
        selected[constant_idx] = include_constant

    if zero_idx >= 0 and no_zero:
        selected[zero_idx] = False

    return [t for t, keep in zip(times, selected) if keep]


def resolve_times(
    case_dir: str,
    time_ranges: Optional[Sequence[TimeRange]] = None,
    latest_time: bool = False,
    no_zero: bool = False,
    include_constant: bool = False,
) -> List[TimeStep]:
    """
    List and select the time steps of ``case_dir``.

    Raises:
        NoMatchingTimes: nothing on disk satisfies the selection.
    """
    available = list_times(case_dir)

    selected = select_times(
        available,
        time_ranges=time_ranges,
        latest_time=latest_time,
        no_zero=no_zero,
        include_constant=include_constant,
    )

    if not selected:
        raise NoMatchingTimes(case_dir, [t.label for t in available])

    logger.info("Selected times: %s", ", ".join(t.label for t in selected))
    return selected
