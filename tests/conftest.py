from random import Random

import pytest

from cube import Cube, random_commands
from puzzle import PuzzleConfig, SudobixPuzzle


@pytest.fixture
def cube():
    return Cube()


@pytest.fixture
def scrambled():
    cube = Cube()
    for command in random_commands(25, Random(7)):
        cube.apply_rotation(command)
    return cube


@pytest.fixture
def puzzle():
    return SudobixPuzzle(PuzzleConfig(seed=3))
