"""
Module to fingerprint and validate the sudoku cube.

The Sudobix encoding is the six face grids, each canonicalized over its four
rotations, concatenated in a fixed face order (486 digits). The canonical state
is the smallest encoding over a fixed set of whole-cube rotations.

Notes:
  SUDOBIX_SYMMETRIES holds only 6 of the cube's 24 rotations and is not closed
  under composition: the solved cube and the solved cube turned 90 degrees about x
  get different canonical strings over those 6. canonical_state therefore uses the
  full ROTATION_GROUP unless a symmetry set is passed in.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List

import numpy as np

from cube import IDENTITY, CUBE_ORDER, axis_angle_matrix, quarter_turn
from faces import FACE_PLANES, extract_face_grid

logger = logging.getLogger("sudobix")

DIGITS = frozenset(range(1, 10))
BOX = 3

SUDOBIX_SYMMETRIES = [
    IDENTITY,
    axis_angle_matrix((1, 0, 0), np.pi / 2),
    axis_angle_matrix((0, 1, 0), np.pi / 2),
    axis_angle_matrix((0, 0, 1), np.pi / 2),
    axis_angle_matrix((1, 1, 1), -2 * np.pi / 3),
    axis_angle_matrix((1, 1, 1), 2 * np.pi / 3),
]


def _rotation_group():
    """Close the quarter turns about x and y under composition."""
    generators = [quarter_turn("x"), quarter_turn("y")]
    group = [IDENTITY]
    seen = {IDENTITY.tobytes()}
    frontier = [IDENTITY]
    while frontier:
        found = []
        for matrix in frontier:
            for generator in generators:
                product = generator @ matrix
                if product.tobytes() not in seen:
                    seen.add(product.tobytes())
                    group.append(product)
                    found.append(product)
        frontier = found
    return group


ROTATION_GROUP = _rotation_group()


@dataclass(frozen=True)
class Fingerprint:
    """Sudobix encoding of the literal orientation and its canonical form."""

    encoding: str
    canonical: str

    def short(self, length=16) -> str:
        """Leading digits of the canonical string, for display."""
        return self.canonical[:length]


def rotate_grid(grid):
    """Rotate a square grid a quarter turn: cell (r, c) moves to (c, n-1-r)."""
    return np.rot90(np.asarray(grid), k=-1)


def serialize(grid) -> str:
    """Row-major digit string of the grid."""
    return "".join(str(int(digit)) for digit in np.asarray(grid).flatten())


def canonical_grid(grid) -> str:
    """
    Lexicographically smallest serialization among the grid's four rotations.
    """
    candidates = []
    current = np.asarray(grid)
    for _ in range(4):
        candidates.append(serialize(current))
        current = rotate_grid(current)
    return min(candidates)


def build_encoding(cube) -> str:
    """
    Concatenate the canonical grids of the six faces in FACE_PLANES order.
    """
    return "".join(
        canonical_grid(extract_face_grid(cube, axis, value))
        for _, axis, value in FACE_PLANES
    )


def canonical_state(cube, symmetries=None) -> str:
    """
    Smallest encoding over the whole-cube rotations in `symmetries`.
    Each rotation is applied to a copy; the cube itself is never touched.
    """
    if symmetries is None:
        symmetries = ROTATION_GROUP
    encodings = [build_encoding(cube.transformed(matrix)) for matrix in symmetries]
    return min(encodings)


def compute_sudobix(cube, symmetries=None) -> Fingerprint:
    """
    Compute the fingerprint of the cube's current state.
    """
    encoding = build_encoding(cube)
    canonical = canonical_state(cube, symmetries)
    logger.info("Sudobix encoding: %s", encoding)
    logger.info("Canonical state: %s", canonical)
    return Fingerprint(encoding=encoding, canonical=canonical)


def _units(grid) -> List[np.ndarray]:
    """Rows, columns and 3x3 boxes of the grid."""
    units = [grid[r, :] for r in range(CUBE_ORDER)]
    units.extend(grid[:, c] for c in range(CUBE_ORDER))
    for br in range(0, CUBE_ORDER, BOX):
        for bc in range(0, CUBE_ORDER, BOX):
            units.append(grid[br : br + BOX, bc : bc + BOX].flatten())
    return units


def validate_sudoku(grid) -> bool:
    """
    True iff every row, column and 3x3 box holds the digits 1-9 exactly once.
    """
    grid = np.asarray(grid)
    if grid.shape != (CUBE_ORDER, CUBE_ORDER):
        return False
    return all(
        len(unit) == 9 and set(int(d) for d in unit) == DIGITS for unit in _units(grid)
    )


def check_validity(cube) -> Dict[str, bool]:
    """
    Sudoku legality of each raw (non-canonicalized) face grid.
    """
    validity = {}
    for name, axis, value in FACE_PLANES:
        validity[name] = validate_sudoku(extract_face_grid(cube, axis, value))
    logger.debug("check_validity: %s", validity)
    return validity
