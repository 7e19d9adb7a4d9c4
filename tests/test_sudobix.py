from random import Random

import numpy as np
import pytest

from cube import Cube, RotationCommand, is_rotation, quarter_turn
from faces import FACE_NAMES, SUDOKU_GRIDS, face_grids, sudoku_grid
from sudobix import (
    ROTATION_GROUP,
    SUDOBIX_SYMMETRIES,
    Fingerprint,
    build_encoding,
    canonical_grid,
    canonical_state,
    check_validity,
    compute_sudobix,
    rotate_grid,
    serialize,
    validate_sudoku,
)


@pytest.fixture(scope="module")
def solved_canonical():
    return canonical_state(Cube())


def test_rotate_grid_moves_cells():
    grid = np.arange(81).reshape(9, 9)
    rotated = rotate_grid(grid)
    for r in range(9):
        for c in range(9):
            assert rotated[c][8 - r] == grid[r][c]
    assert np.array_equal(rotate_grid(rotate_grid(rotate_grid(rotated))), grid)


def test_canonical_grid_ignores_rotation():
    grid = np.array(Random(1).choices(range(1, 10), k=81)).reshape(9, 9)
    expected = canonical_grid(grid)
    current = grid
    for _ in range(4):
        current = rotate_grid(current)
        assert canonical_grid(current) == expected
    assert expected <= serialize(grid)


def test_serialize():
    grid = sudoku_grid(0)
    text = serialize(grid)
    assert len(text) == 81
    assert text.startswith("123456789456789123")


def test_encoding_has_486_digits(scrambled):
    encoding = build_encoding(scrambled)
    assert len(encoding) == 486
    assert set(encoding) <= set("123456789")


def test_validate_sudoku():
    grid = sudoku_grid(4)
    assert validate_sudoku(grid)
    assert validate_sudoku(grid.T)

    zero = grid.copy()
    zero[3][3] = 0
    assert not validate_sudoku(zero)

    swapped = grid.copy()
    swapped[0][0], swapped[0][1] = swapped[0][1], swapped[0][0]
    assert not validate_sudoku(swapped)

    assert not validate_sudoku(grid[:8])


def test_solved_cube_is_valid(cube):
    validity = check_validity(cube)
    assert list(validity) == FACE_NAMES
    assert all(validity.values())


def test_turn_and_undo_restores_faces(cube):
    before = face_grids(cube)
    cube.apply_rotation(RotationCommand("y", 4, 1))
    cube.apply_rotation(RotationCommand("y", 4, -1))
    after = face_grids(cube)
    for name in FACE_NAMES:
        assert np.array_equal(before[name], after[name])
    assert all(check_validity(cube).values())


def test_outer_turn_keeps_its_faces_valid(cube):
    cube.apply_rotation(RotationCommand("y", 4, 1))
    validity = check_validity(cube)
    assert validity["Top"]
    assert validity["Bottom"]


def test_rotation_group():
    assert len(ROTATION_GROUP) == 24
    assert len({m.tobytes() for m in ROTATION_GROUP}) == 24
    assert all(is_rotation(m) for m in ROTATION_GROUP)
    assert np.array_equal(ROTATION_GROUP[0], np.eye(3, dtype=int))


def test_symmetry_set():
    assert len(SUDOBIX_SYMMETRIES) == 6
    group = {m.tobytes() for m in ROTATION_GROUP}
    for matrix in SUDOBIX_SYMMETRIES:
        assert is_rotation(matrix)
        assert matrix.astype(int).tobytes() in group
    # +90 degrees about x takes y to z
    assert (SUDOBIX_SYMMETRIES[1] @ np.array([0, 1, 0])).tolist() == [0, 0, 1]
    # the 120 degree turns cycle the axes
    cycle = SUDOBIX_SYMMETRIES[5] @ np.array([1, 0, 0])
    assert cycle.tolist() == [0, 1, 0]


@pytest.mark.parametrize("index", range(6))
def test_canonical_state_ignores_whole_cube_rotation(solved_canonical, index):
    turned = Cube().transformed(SUDOBIX_SYMMETRIES[index])
    assert canonical_state(turned) == solved_canonical


def test_canonical_state_of_scrambled_cube_ignores_rotation(scrambled):
    expected = canonical_state(scrambled)
    turned = scrambled.transformed(quarter_turn("z") @ quarter_turn("x", -1))
    assert canonical_state(turned) == expected


def test_canonical_state_leaves_cube_untouched(scrambled):
    before = scrambled.state_key()
    canonical_state(scrambled, SUDOBIX_SYMMETRIES)
    assert scrambled.state_key() == before


def test_full_group_is_never_worse_than_six(scrambled):
    full = canonical_state(scrambled)
    six = canonical_state(scrambled, SUDOBIX_SYMMETRIES)
    assert full <= six
    assert six <= build_encoding(scrambled)


def test_compute_sudobix(cube, solved_canonical):
    fingerprint = compute_sudobix(cube)
    assert isinstance(fingerprint, Fingerprint)
    assert fingerprint.encoding == build_encoding(cube)
    assert fingerprint.canonical == solved_canonical
    assert fingerprint.canonical <= fingerprint.encoding
    assert fingerprint.short() == fingerprint.canonical[:16]


def test_encoding_of_solved_cube_uses_face_grids(cube):
    encoding = build_encoding(cube)
    # the front face is read as a quarter turn of its layout grid
    assert encoding[:81] == canonical_grid(SUDOKU_GRIDS["Front"])
