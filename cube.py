"""
Module to simulate a 9x9x9 sudoku cube made of unit cubies.
This module provides a class `Cube` that holds all 729 cubies of the lattice.
Each cubie keeps an integer position in [-4, 4]^3 and an orientation matrix from the
24-element rotation group of the cube; its initial position never changes and decides
which stickers it carries.
This module only handles cube movements, and does not include any solving algorithms.

Notes:
  move notation is <axis><layer>[modifier], for example:
    y4   = top layer, direction +1
    x-2' = third slice from the left, direction -1
    z02  = standing middle slice twice
"""

# --- Standard imports ---
import logging
import re
from dataclasses import dataclass
from random import Random
from typing import List, Optional

import numpy as np


logger = logging.getLogger("cube")

CUBE_ORDER = 9
HALF_ORDER = CUBE_ORDER // 2
AXES = ("x", "y", "z")
DIRECTIONS = (1, -1)
AXIS_VECTORS = {
    "x": np.array([1, 0, 0]),
    "y": np.array([0, 1, 0]),
    "z": np.array([0, 0, 1]),
}
IDENTITY = np.eye(3, dtype=int)

MOVE_PATTERN = re.compile(r"^([xyz])(-?\d)('|2)?$")


def check_axis(axis):
    """Raise ValueError unless axis is one of x, y, z."""
    if axis not in AXES:
        raise ValueError(f"Invalid axis {axis!r}: {AXES}")


def check_layer(layer):
    """Raise ValueError unless layer is an integer slice index in [-4, 4]."""
    if isinstance(layer, bool) or not isinstance(layer, (int, np.integer)):
        raise ValueError(f"Invalid layer {layer!r}: must be an integer")
    if not -HALF_ORDER <= layer <= HALF_ORDER:
        raise ValueError(f"Invalid layer {layer}: [-{HALF_ORDER}, {HALF_ORDER}]")


@dataclass(frozen=True)
class RotationCommand:
    """A single 90 degree turn of one slice."""

    axis: str  # 'x' | 'y' | 'z'
    layer: int  # -4 .. 4
    direction: int  # +1 | -1

    def __post_init__(self):
        check_axis(self.axis)
        check_layer(self.layer)
        if isinstance(self.direction, bool) or not isinstance(self.direction, int):
            raise ValueError(f"Invalid direction {self.direction!r}: must be an integer")
        if self.direction not in DIRECTIONS:
            raise ValueError(f"Invalid direction {self.direction!r}: {DIRECTIONS}")

    def inverse(self) -> "RotationCommand":
        """Return the command that undoes this one."""
        return RotationCommand(self.axis, self.layer, -self.direction)

    def reverses(self, other: Optional["RotationCommand"]) -> bool:
        """True if this command cancels `other` (same slice, opposite direction)."""
        if other is None:
            return False
        return (
            self.axis == other.axis
            and self.layer == other.layer
            and self.direction == -other.direction
        )

    def __str__(self):
        suffix = "" if self.direction == 1 else "'"
        return f"{self.axis}{self.layer}{suffix}"


def axis_angle_matrix(axis_vector, angle):
    """
    Rotation matrix for `angle` radians about `axis_vector` (Rodrigues formula).
    The result is snapped to integers, so only angles that map the lattice onto
    itself (multiples of 90 degrees about an axis, 120 degrees about a diagonal)
    are meaningful here.
    """
    k = np.asarray(axis_vector, dtype=float)
    k = k / np.linalg.norm(k)
    cross = np.array(
        [
            [0.0, -k[2], k[1]],
            [k[2], 0.0, -k[0]],
            [-k[1], k[0], 0.0],
        ]
    )
    matrix = (
        np.cos(angle) * np.eye(3)
        + np.sin(angle) * cross
        + (1.0 - np.cos(angle)) * np.outer(k, k)
    )
    return np.rint(matrix).astype(int)


def quarter_turn(axis, direction=1):
    """
    Matrix for one slice turn: -direction * 90 degrees about the axis.
    """
    check_axis(axis)
    return axis_angle_matrix(AXIS_VECTORS[axis], -direction * np.pi / 2)


def is_rotation(matrix) -> bool:
    """True if matrix is an integer proper rotation (member of the cube's rotation group)."""
    matrix = np.asarray(matrix)
    if matrix.shape != (3, 3) or not np.array_equal(matrix, np.rint(matrix)):
        return False
    return bool(
        np.array_equal(matrix @ matrix.T, IDENTITY)
        and round(float(np.linalg.det(matrix))) == 1
    )


class Cubie:
    """
    Class representing a single cubie in the cube.
    Each cubie has an id, a lattice position and an orientation.
    """

    def __init__(self, cubie_id, position, orientation=None, initial_position=None):
        self.id = cubie_id
        self.position = np.array(position, dtype=int)
        if orientation is None:
            orientation = IDENTITY
        self.orientation = np.array(orientation, dtype=int)
        if initial_position is None:
            initial_position = position
        self._initial_position = tuple(int(v) for v in initial_position)

    @property
    def initial_position(self):
        """Position at construction, the key for the cubie's stickers."""
        return self._initial_position

    def rotate(self, matrix):
        """
        Rotate the cubie about the cube center.
        Position and orientation are snapped back onto the integer lattice after the turn.
        """
        self.position = np.rint(matrix @ self.position).astype(int)
        self.orientation = np.rint(matrix @ self.orientation).astype(int)

    def coordinate(self, axis) -> int:
        """Rounded current coordinate along the axis."""
        return int(round(self.position[AXES.index(axis)]))

    def stickers(self):
        """
        Local normals that carry a sticker.
        Interior cubies have none, corner cubies have three.
        """
        normals = []
        for idx, value in enumerate(self.initial_position):
            if abs(value) == HALF_ORDER:
                normal = [0, 0, 0]
                normal[idx] = 1 if value > 0 else -1
                normals.append(tuple(normal))
        return normals

    def copy(self):
        """Return an independent copy of the cubie."""
        return Cubie(
            self.id,
            self.position.copy(),
            self.orientation.copy(),
            self.initial_position,
        )

    def __repr__(self):
        return (
            f"Cubie(id={self.id}, "
            + f"position={self.position.tolist()}, "
            + f"orientation={self.orientation.tolist()})"
        )

    def __str__(self):
        return f"{self.id} {tuple(self.position.tolist())} {self.initial_position}"


def apply_rotation(cube, command: RotationCommand):
    """
    Turn one slice of the cube by 90 degrees.
    Slice membership is decided for the whole layer before any cubie moves.
    Returns the affected cubies.
    """
    matrix = quarter_turn(command.axis, command.direction)
    affected = cube.get_cubies(axis=command.axis, layer=command.layer)
    for cubie in affected:
        cubie.rotate(matrix)
    logger.debug("apply_rotation: %s moved %d cubies", command, len(affected))
    return affected


def parse_move(token) -> List[RotationCommand]:
    """
    Parse a single move token into rotation commands.
    "2" expands to two commands.
    """
    match = MOVE_PATTERN.match(token.strip().lower())
    if match is None:
        raise ValueError(f"Invalid move {token!r}")
    axis, layer, modifier = match.groups()
    layer = int(layer)
    if modifier == "2":
        return [RotationCommand(axis, layer, 1), RotationCommand(axis, layer, 1)]
    direction = -1 if modifier == "'" else 1
    return [RotationCommand(axis, layer, direction)]


def parse_sequence(sequence) -> List[RotationCommand]:
    """
    Parse a sequence of moves separated by spaces or commas.
    Brackets are ignored.
    """
    for bracket in "()[]{}":
        sequence = sequence.replace(bracket, "")
    sequence = sequence.replace(" ", ",")
    moves = [move.strip() for move in sequence.split(",") if move.strip()]
    commands = []
    for move in moves:
        commands.extend(parse_move(move))
    return commands


def random_commands(count, rng=None, previous=None) -> List[RotationCommand]:
    """
    Random rotation commands where no command undoes the one right before it.
    `previous` is the command already queued ahead of the first one, if any.
    """
    if rng is None:
        rng = Random()
    commands = []
    last = previous
    for _ in range(count):
        while True:
            command = RotationCommand(
                axis=rng.choice(AXES),
                layer=rng.randint(-HALF_ORDER, HALF_ORDER),
                direction=rng.choice(DIRECTIONS),
            )
            if not command.reverses(last):
                break
        commands.append(command)
        last = command
    return commands


class Cube:
    """
    Class representing the 9x9x9 sudoku cube.
    The cube is initialized with a solved state, and the user can perform rotations on the cube.
    """

    def __init__(self, **kwargs):
        """
        Initialize the cube.
        Parameters:
        - cubies: a list of cubies to adopt instead of a solved cube (optional).
        - debug: A boolean flag to enable debug logging (default is False).
        """
        self.debug = kwargs.get("debug", False)
        if self.debug:
            self.loglevel(logging.DEBUG)
        self.cubies: List[Cubie] = []
        if "cubies" in kwargs:
            self.cubies = kwargs["cubies"]
        else:
            self.reset()

    def loglevel(self, level=logging.INFO):
        """
        Set the logging level for the cube.
        This is useful for debugging and logging cube operations.
        """
        logger.setLevel(level)

    def reset(self):
        """
        Reset the cube to its solved state.
        Every lattice point gets a fresh cubie at identity orientation.
        """
        self.cubies = []
        cubie_id = 0
        for x in range(-HALF_ORDER, HALF_ORDER + 1):
            for y in range(-HALF_ORDER, HALF_ORDER + 1):
                for z in range(-HALF_ORDER, HALF_ORDER + 1):
                    self.cubies.append(Cubie(cubie_id, (x, y, z)))
                    cubie_id += 1
        logger.debug("reset: %d cubies", len(self.cubies))

    def get_cubies(self, axis=None, layer=None, position_filter=None):
        """
        Get a list of cubies that match the specified filters.
        axis and layer select a slice by rounded current position,
        position_filter is a collection of (x, y, z) tuples.
        """
        if axis is not None:
            check_axis(axis)
        if layer is not None:
            check_layer(layer)
        cubies = []
        for cubie in self:
            if axis is not None and layer is not None and cubie.coordinate(axis) != layer:
                continue
            if position_filter and tuple(cubie.position.tolist()) not in position_filter:
                continue
            cubies.append(cubie)
        return cubies

    def apply_rotation(self, command: RotationCommand):
        """
        Commit one slice rotation.
        """
        return apply_rotation(self, command)

    def transform(self, matrix):
        """
        Rotate every cubie of the cube with the same matrix.
        """
        for cubie in self.cubies:
            cubie.rotate(matrix)

    def transformed(self, matrix):
        """
        Return a copy of the cube with every cubie rotated by matrix.
        """
        cube = self.copy()
        cube.transform(matrix)
        return cube

    def rotate_cube(self, axis="y", direction=1):
        """
        Rotate the whole cube a quarter turn around a specified axis.
        """
        logger.debug("rotate_cube: %s %s", axis, direction)
        self.transform(quarter_turn(axis.lower(), direction))

    def sequence(self, sequence):
        """
        Apply a sequence of rotations to the cube.
        The sequence should be a string of moves (e.g., "y4, x-2' z02").
        """
        logger.debug("sequence: %s", sequence)
        commands = parse_sequence(sequence)
        for command in commands:
            self.apply_rotation(command)
        return commands

    def is_solved(self):
        """
        Check if every cubie sits at its initial position with identity orientation.
        """
        return all(
            tuple(cubie.position.tolist()) == cubie.initial_position
            and np.array_equal(cubie.orientation, IDENTITY)
            for cubie in self.cubies
        )

    def state_key(self):
        """
        Hashable snapshot of every cubie's position and orientation.
        """
        return tuple(
            (
                cubie.id,
                tuple(cubie.position.tolist()),
                tuple(cubie.orientation.flatten().tolist()),
            )
            for cubie in self.cubies
        )

    def copy(self):
        """Return an independent copy of the cubie collection (listeners are not copied)."""
        return Cube(cubies=[cubie.copy() for cubie in self.cubies], debug=self.debug)

    def __len__(self):
        return len(self.cubies)

    def __repr__(self):
        return f"Cube(order={CUBE_ORDER}, cubies={len(self.cubies)}, debug={self.debug})"

    def __iter__(self):
        """
        Return an iterator for the cubies in the cube.
        """
        return iter(self.cubies)
