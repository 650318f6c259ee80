"""Rotation mapping between a piece bitmap and the expanded grid.

A sample at bitmap column ``ik``, row ``jk`` of a piece stored with rotation
``angle`` lives at the grid location below, relative to the piece origin
``(is, js)``::

    angle   column              row
    0       ik + is             jk + js
    90      jk + is             (edge-1-ik) + js
    180     (edge-1-ik) + is    (edge-1-jk) + js
    270     (edge-1-jk) + is    ik + js

Writing a piece file and reading it back both go through this same mapping.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

ROTATIONS = (0, 90, 180, 270)


def validate_angle(angle: int) -> int:
    if angle not in ROTATIONS:
        raise ValueError(f"rotation must be one of {ROTATIONS}, got {angle!r}")
    return angle


def compose(first: int, second: int) -> int:
    """Angle reached by applying ``first`` then ``second``."""

    return (validate_angle(first) + validate_angle(second)) % 360


def local_to_global(
    ik: int,
    jk: int,
    angle: int,
    edge: int,
    origin: Tuple[int, int] = (0, 0),
) -> Tuple[int, int]:
    is_, js = origin
    last = edge - 1
    if angle == 0:
        col, row = ik, jk
    elif angle == 90:
        col, row = jk, last - ik
    elif angle == 180:
        col, row = last - ik, last - jk
    elif angle == 270:
        col, row = last - jk, ik
    else:
        validate_angle(angle)
    return col + is_, row + js


def rotation_map(angle: int, edge: int) -> Tuple[np.ndarray, np.ndarray]:
    """Grid column and row offsets for every bitmap sample.

    Both arrays have shape ``(edge, edge)`` and are indexed ``[jk, ik]``, so
    ``grid[js + rows, is + cols]`` gathers a piece bitmap in one step.
    """

    validate_angle(angle)
    jk, ik = np.indices((edge, edge))
    last = edge - 1
    if angle == 0:
        return ik, jk
    if angle == 90:
        return jk, last - ik
    if angle == 180:
        return last - ik, last - jk
    return last - jk, ik


__all__ = ["ROTATIONS", "validate_angle", "compose", "local_to_global", "rotation_map"]
