"""
Sticker layout of the sudoku cube and face grid extraction.
Every outer face carries its own solved sudoku grid; a cubie's stickers are
looked up from its initial position, so they travel with the cubie.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from cube import AXES, HALF_ORDER, CUBE_ORDER, check_axis

logger = logging.getLogger("faces")

NO_STICKER = 0

FACE_PLANES = [
    ("Front", "z", HALF_ORDER),
    ("Right", "x", HALF_ORDER),
    ("Back", "z", -HALF_ORDER),
    ("Left", "x", -HALF_ORDER),
    ("Top", "y", HALF_ORDER),
    ("Bottom", "y", -HALF_ORDER),
]
FACE_NAMES = [name for name, _, _ in FACE_PLANES]

STICKER_COLORS = {
    "Right": "#b90000",  # red
    "Left": "#ff5900",  # orange
    "Top": "#ffffff",  # white
    "Bottom": "#ffd500",  # yellow
    "Front": "#009b48",  # green
    "Back": "#0045ad",  # blue
}


def sudoku_grid(shift):
    """
    Solved 9x9 sudoku, digits permuted by `shift` so each face gets its own grid.
    """
    grid = np.zeros((CUBE_ORDER, CUBE_ORDER), dtype=int)
    for r in range(CUBE_ORDER):
        for c in range(CUBE_ORDER):
            base = (r * 3 + r // 3 + c) % 9
            grid[r, c] = (base + shift) % 9 + 1
    return grid


SUDOKU_GRIDS = {
    "Right": sudoku_grid(0),
    "Left": sudoku_grid(1),
    "Top": sudoku_grid(2),
    "Bottom": sudoku_grid(3),
    "Front": sudoku_grid(4),
    "Back": sudoku_grid(5),
}


@dataclass(frozen=True)
class FaceInfo:
    """Sticker on one local face of a cubie."""

    name: str
    color: str
    number: int


def face_info(initial_position, local_normal) -> Optional[FaceInfo]:
    """
    Sticker facing along `local_normal` for a cubie created at `initial_position`,
    or None when that side of the cubie is bare.
    """
    px, py, pz = (int(v) for v in initial_position)
    nx, ny, nz = (float(v) for v in local_normal)
    # grid indices 0..8
    x, y, z = px + HALF_ORDER, py + HALF_ORDER, pz + HALF_ORDER
    last = CUBE_ORDER - 1

    if nx > 0.5 and px == HALF_ORDER:
        name, number = "Right", SUDOKU_GRIDS["Right"][last - y][z]
    elif nx < -0.5 and px == -HALF_ORDER:
        name, number = "Left", SUDOKU_GRIDS["Left"][last - y][last - z]
    elif ny > 0.5 and py == HALF_ORDER:
        name, number = "Top", SUDOKU_GRIDS["Top"][z][x]
    elif ny < -0.5 and py == -HALF_ORDER:
        name, number = "Bottom", SUDOKU_GRIDS["Bottom"][last - z][x]
    elif nz > 0.5 and pz == HALF_ORDER:
        name, number = "Front", SUDOKU_GRIDS["Front"][last - y][x]
    elif nz < -0.5 and pz == -HALF_ORDER:
        name, number = "Back", SUDOKU_GRIDS["Back"][last - y][last - x]
    else:
        return None
    return FaceInfo(name=name, color=STICKER_COLORS[name], number=int(number))


def outward_normal(axis, value):
    """Global unit normal of the face plane `axis = value`."""
    normal = np.zeros(3, dtype=int)
    normal[AXES.index(axis)] = int(np.sign(value))
    return normal


def get_digit(cubie, axis, value) -> int:
    """
    Digit the cubie currently shows on the face plane `axis = value`.
    The global normal is carried into the cubie's frame with the inverse orientation.
    """
    local_normal = cubie.orientation.T @ outward_normal(axis, value)
    info = face_info(cubie.initial_position, local_normal)
    if info is None:
        logger.debug("get_digit: no sticker on cubie %s facing %s=%s", cubie.id, axis, value)
        return NO_STICKER
    return info.number


def extract_face_grid(cube, axis, value):
    """
    9x9 grid of the digits on the plane `axis = value`.
    Rows and columns follow the two remaining axes in x, y, z order; consumers
    must not rely on which way up the grid is.
    """
    check_axis(axis)
    first, second = (AXES.index(other) for other in AXES if other != axis)
    face_cubies = sorted(
        cube.get_cubies(axis=axis, layer=value),
        key=lambda c: (int(c.position[first]), int(c.position[second])),
    )
    if len(face_cubies) != CUBE_ORDER * CUBE_ORDER:
        raise ValueError(f"Face {axis}={value} holds {len(face_cubies)} cubies")
    digits = [get_digit(cubie, axis, value) for cubie in face_cubies]
    return np.array(digits, dtype=int).reshape(CUBE_ORDER, CUBE_ORDER)


def face_grids(cube) -> Dict[str, np.ndarray]:
    """
    Raw grids of the six outer faces keyed by face name.
    """
    return {
        name: extract_face_grid(cube, axis, value) for name, axis, value in FACE_PLANES
    }
