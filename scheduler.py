"""
Module to sequence slice rotations one at a time.

The scheduler is either Idle or Animating one command. Progress is purely
visual; the cube only changes when a command's progress reaches 1 and it is
committed.
"""

import logging
from collections import deque
from dataclasses import dataclass
from random import Random
from typing import Callable, Iterable, List, Optional, Union

from cube import Cube, RotationCommand, random_commands

logger = logging.getLogger("scheduler")

TURN_DURATION = 0.5  # seconds per 90 degree turn
SHUFFLE_MOVES = 40


@dataclass(frozen=True)
class Idle:
    """No command pending."""


@dataclass
class Animating:
    """One command in flight."""

    command: RotationCommand
    progress: float = 0.0


SchedulerState = Union[Idle, Animating]


class RotationScheduler:
    """
    FIFO queue of rotation commands, consumed one per completed animation.
    """

    def __init__(
        self,
        cube: Optional[Cube] = None,
        turn_duration: float = TURN_DURATION,
        shuffle_moves: int = SHUFFLE_MOVES,
        rng: Optional[Random] = None,
    ):
        logger.debug(
            "__init__(turn_duration=%s, shuffle_moves=%s)", turn_duration, shuffle_moves
        )
        if turn_duration <= 0:
            raise ValueError(f"turn_duration must be positive: {turn_duration}")
        self.cube = cube if cube is not None else Cube()
        self.turn_duration = turn_duration
        self.shuffle_moves = shuffle_moves
        self.rng = rng if rng is not None else Random()
        self.state: SchedulerState = Idle()
        self._queue: deque[RotationCommand] = deque()
        self._commit_listeners: List[Callable[[RotationCommand], None]] = []

    # ---- queries ----
    @property
    def pending(self) -> int:
        """Queued commands, the one in flight included."""
        return len(self._queue)

    @property
    def is_animating(self) -> bool:
        """True while a command is in flight."""
        return isinstance(self.state, Animating)

    @property
    def progress(self) -> float:
        """Fraction of the in-flight turn, 0 when idle."""
        if isinstance(self.state, Animating):
            return self.state.progress
        return 0.0

    @property
    def current(self) -> Optional[RotationCommand]:
        """The command in flight, if any."""
        if isinstance(self.state, Animating):
            return self.state.command
        return None

    def queued(self) -> List[RotationCommand]:
        """Copy of the queue, head first."""
        return list(self._queue)

    def is_moving(self, cubie) -> bool:
        """
        True if the cubie belongs to the slice being animated.
        Membership uses committed positions only.
        """
        command = self.current
        if command is None:
            return False
        return cubie.coordinate(command.axis) == command.layer

    def add_commit_listener(self, fn: Callable[[RotationCommand], None]):
        """Call fn with each command right after it is committed."""
        self._commit_listeners.append(fn)

    # ---- commands ----
    def enqueue(self, command: RotationCommand):
        """
        Append a command; start it right away when idle.
        """
        logger.debug("enqueue: %s", command)
        self._queue.append(command)
        if isinstance(self.state, Idle):
            self._begin_next()

    def enqueue_many(self, commands: Iterable[RotationCommand]):
        """Append several commands in order."""
        for command in commands:
            self.enqueue(command)

    def tick(self, elapsed: float) -> Optional[RotationCommand]:
        """
        Advance the in-flight animation by `elapsed` seconds.
        Commits at most one command and returns it.
        """
        if elapsed < 0:
            raise ValueError(f"elapsed must not be negative: {elapsed}")
        if not isinstance(self.state, Animating):
            return None
        self.state.progress += elapsed / self.turn_duration
        if self.state.progress < 1:
            return None
        return self._commit()

    def drain(self) -> List[RotationCommand]:
        """
        Commit every queued command right away, in order.
        """
        committed = []
        while isinstance(self.state, Animating):
            committed.append(self._commit())
        return committed

    def shuffle(self) -> List[RotationCommand]:
        """
        Queue a random sequence where no command undoes the one before it.
        """
        previous = self._queue[-1] if self._queue else None
        commands = random_commands(self.shuffle_moves, self.rng, previous=previous)
        logger.info("shuffle: queueing %d moves", len(commands))
        self.enqueue_many(commands)
        return commands

    def reset(self) -> Cube:
        """
        Drop the queue and any turn in flight, and rebuild a solved cube.
        """
        logger.info("reset: dropping %d queued moves", len(self._queue))
        self._queue.clear()
        self.state = Idle()
        self.cube = Cube(debug=self.cube.debug)
        return self.cube

    # ---- internals ----
    def _begin_next(self):
        if self._queue:
            self.state = Animating(command=self._queue[0])
        else:
            self.state = Idle()

    def _commit(self) -> RotationCommand:
        command = self._queue.popleft()
        self.cube.apply_rotation(command)
        logger.debug("commit: %s (%d left)", command, len(self._queue))
        self._begin_next()
        for fn in list(self._commit_listeners):
            fn(command)
        return command
