from random import Random

import numpy as np
import pytest

from cube import (
    AXES,
    HALF_ORDER,
    IDENTITY,
    Cube,
    Cubie,
    RotationCommand,
    apply_rotation,
    is_rotation,
    parse_move,
    parse_sequence,
    quarter_turn,
    random_commands,
)

LAYERS = range(-HALF_ORDER, HALF_ORDER + 1)


def test_solved_cube_has_one_cubie_per_lattice_point(cube):
    assert len(cube) == 729
    assert len({c.id for c in cube}) == 729
    positions = {tuple(c.position.tolist()) for c in cube}
    assert len(positions) == 729
    assert all(max(abs(v) for v in p) <= HALF_ORDER for p in positions)
    assert cube.is_solved()


@pytest.mark.parametrize("axis", AXES)
@pytest.mark.parametrize("layer", LAYERS)
def test_every_slice_holds_81_cubies(cube, axis, layer):
    assert len(cube.get_cubies(axis=axis, layer=layer)) == 81


@pytest.mark.parametrize("axis", AXES)
@pytest.mark.parametrize("layer", LAYERS)
def test_four_quarter_turns_are_identity(cube, axis, layer):
    before = cube.state_key()
    command = RotationCommand(axis, layer, 1)
    for _ in range(4):
        cube.apply_rotation(command)
    assert cube.state_key() == before


@pytest.mark.parametrize("direction", [1, -1])
def test_four_turns_identity_on_scrambled_cube(scrambled, direction):
    before = scrambled.state_key()
    command = RotationCommand("z", -3, direction)
    for _ in range(4):
        scrambled.apply_rotation(command)
    assert scrambled.state_key() == before


@pytest.mark.parametrize("axis", AXES)
@pytest.mark.parametrize("layer", [-4, 0, 2])
def test_inverse_restores_state(scrambled, axis, layer):
    before = scrambled.state_key()
    command = RotationCommand(axis, layer, -1)
    scrambled.apply_rotation(command)
    assert scrambled.state_key() != before
    scrambled.apply_rotation(command.inverse())
    assert scrambled.state_key() == before


def test_rotation_touches_only_the_selected_layer(cube):
    before = {c.id: tuple(c.position.tolist()) for c in cube}
    affected = apply_rotation(cube, RotationCommand("x", 2, 1))
    moved_ids = {c.id for c in affected}
    assert len(moved_ids) == 81
    for cubie in cube:
        if cubie.id in moved_ids:
            assert cubie.coordinate("x") == 2
        else:
            assert tuple(cubie.position.tolist()) == before[cubie.id]
            assert np.array_equal(cubie.orientation, IDENTITY)


def test_quarter_turn_direction():
    # direction +1 is a -90 degree turn about the axis
    assert quarter_turn("y", 1).tolist() == [[0, 0, -1], [0, 1, 0], [1, 0, 0]]
    assert (quarter_turn("x", 1) @ np.array([0, 1, 0])).tolist() == [0, 0, -1]
    assert (quarter_turn("x", -1) @ np.array([0, 1, 0])).tolist() == [0, 0, 1]
    assert (quarter_turn("z", 1) @ np.array([1, 0, 0])).tolist() == [0, -1, 0]


def test_corner_cubie_follows_top_turn(cube):
    corner = cube.get_cubies(position_filter={(4, 4, 4)})[0]
    cube.apply_rotation(RotationCommand("y", 4, 1))
    assert corner.position.tolist() == [-4, 4, 4]
    assert corner.orientation.tolist() == quarter_turn("y", 1).tolist()
    assert corner.initial_position == (4, 4, 4)


def test_positions_stay_on_lattice_and_orientations_in_group(scrambled):
    for cubie in scrambled:
        assert cubie.position.dtype.kind == "i"
        assert all(-HALF_ORDER <= v <= HALF_ORDER for v in cubie.position.tolist())
        assert is_rotation(cubie.orientation)
        # position is always the orientation applied to the starting point
        expected = cubie.orientation @ np.array(cubie.initial_position)
        assert cubie.position.tolist() == expected.tolist()


def test_float_rotation_is_snapped():
    cubie = Cubie(0, (4, -3, 2))
    angle = np.pi / 2
    almost = np.array(
        [[1, 0, 0], [0, np.cos(angle), -np.sin(angle)], [0, np.sin(angle), np.cos(angle)]]
    )
    for _ in range(400):
        cubie.rotate(almost)
    assert cubie.position.tolist() == [4, -3, 2]
    assert np.array_equal(cubie.orientation, IDENTITY)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"axis": "w", "layer": 0, "direction": 1},
        {"axis": "x", "layer": 5, "direction": 1},
        {"axis": "x", "layer": -5, "direction": 1},
        {"axis": "x", "layer": 1.5, "direction": 1},
        {"axis": "x", "layer": 0, "direction": 0},
        {"axis": "x", "layer": 0, "direction": 2},
        {"axis": "x", "layer": 0, "direction": True},
        {"axis": "x", "layer": 0, "direction": 1.0},
        {"axis": "x", "layer": 0, "direction": "1"},
    ],
)
def test_invalid_command_raises(kwargs):
    with pytest.raises(ValueError):
        RotationCommand(**kwargs)


def test_command_helpers():
    command = RotationCommand("x", -2, -1)
    assert str(command) == "x-2'"
    assert str(command.inverse()) == "x-2"
    assert command.reverses(command.inverse())
    assert not command.reverses(command)
    assert not command.reverses(RotationCommand("x", -1, 1))
    assert not command.reverses(None)


def test_parse_move():
    assert parse_move("y4") == [RotationCommand("y", 4, 1)]
    assert parse_move("x-2'") == [RotationCommand("x", -2, -1)]
    assert parse_move("Z02") == [RotationCommand("z", 0, 1)] * 2
    for bad in ("q1", "y", "y5", "x-", "y4''"):
        with pytest.raises(ValueError):
            parse_move(bad)


def test_parse_sequence_ignores_brackets_and_commas():
    commands = parse_sequence("(y4, x-2') [z02]")
    assert [str(c) for c in commands] == ["y4", "x-2'", "z0", "z0"]
    assert parse_sequence("") == []


def test_sequence_then_inverse_restores(cube):
    cube.sequence("y4 x-2' z0 y4")
    assert not cube.is_solved()
    cube.sequence("y4' z0' x-2 y4'")
    assert cube.is_solved()


def test_random_commands_never_undo_previous():
    previous = RotationCommand("y", 0, 1)
    commands = random_commands(500, Random(11), previous=previous)
    assert len(commands) == 500
    assert not commands[0].reverses(previous)
    for before, after in zip(commands, commands[1:]):
        assert not after.reverses(before)


def test_random_commands_are_reproducible():
    assert random_commands(40, Random(5)) == random_commands(40, Random(5))


def test_stickers_follow_initial_position():
    assert len(Cubie(0, (4, 4, 4)).stickers()) == 3
    assert Cubie(0, (4, 0, -4)).stickers() == [(1, 0, 0), (0, 0, -1)]
    assert Cubie(0, (0, -4, 0)).stickers() == [(0, -1, 0)]
    assert Cubie(0, (1, 2, 3)).stickers() == []


def test_copy_is_independent(cube):
    clone = cube.copy()
    clone.apply_rotation(RotationCommand("x", 4, 1))
    assert cube.is_solved()
    assert not clone.is_solved()


def test_whole_cube_transform(cube):
    turned = cube.transformed(quarter_turn("x"))
    assert cube.is_solved()
    assert not turned.is_solved()
    for _ in range(3):
        turned.rotate_cube("x", 1)
    assert turned.is_solved()
