"""
Module holding the sudoku cube puzzle state for the presentation layer
"""

import json
import logging
from dataclasses import asdict, dataclass, fields
from random import Random
from typing import Dict, Optional, Tuple

from cube import HALF_ORDER, RotationCommand, check_axis, check_layer, parse_sequence
from scheduler import SHUFFLE_MOVES, TURN_DURATION, RotationScheduler
from sudobix import ROTATION_GROUP, SUDOBIX_SYMMETRIES, Fingerprint, check_validity, compute_sudobix

logger = logging.getLogger("puzzle")


@dataclass
class PuzzleConfig:
    """Configuration for the puzzle."""

    turn_duration: float = TURN_DURATION
    shuffle_moves: int = SHUFFLE_MOVES
    max_queue: int = 5
    seed: Optional[int] = None
    full_symmetry: bool = True
    debug: bool = False


def load_config(name: str = "sudobix") -> PuzzleConfig:
    """
    Load configuration from <name>.json, writing the defaults when the file is missing.
    """
    logger.debug("load_config(name=%s)", name)
    try:
        with open(f"{name}.json", "r", encoding="utf-8") as f:
            raw = json.load(f)
            logger.info("Config loaded")
    except FileNotFoundError as e:
        logger.warning("Config file not found: %s", e)
        cfg = PuzzleConfig()
        logger.info("Using default config")
        save_config(cfg, name)
        return cfg
    known = {f.name for f in fields(PuzzleConfig)}
    for key in sorted(set(raw) - known):
        logger.warning("Ignoring unknown config key: %s", key)
    cfg = PuzzleConfig(**{key: value for key, value in raw.items() if key in known})
    check_config(cfg)
    logger.debug("Loaded configuration for %s: %s", name, cfg)
    return cfg


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def check_config(cfg: PuzzleConfig):
    """
    Raise ValueError when a config value has the wrong type or is out of range.
    """
    if not (_is_int(cfg.turn_duration) or isinstance(cfg.turn_duration, float)):
        raise ValueError(f"turn_duration must be a number: {cfg.turn_duration!r}")
    if cfg.turn_duration <= 0:
        raise ValueError(f"turn_duration must be positive: {cfg.turn_duration}")
    for key in ("shuffle_moves", "max_queue"):
        value = getattr(cfg, key)
        if not _is_int(value) or value < 0:
            raise ValueError(f"{key} must be a non-negative integer: {value!r}")
    if cfg.seed is not None and not _is_int(cfg.seed):
        raise ValueError(f"seed must be an integer or null: {cfg.seed!r}")
    for key in ("full_symmetry", "debug"):
        if not isinstance(getattr(cfg, key), bool):
            raise ValueError(f"{key} must be true or false: {getattr(cfg, key)!r}")


def save_config(cfg: PuzzleConfig, name: str = "sudobix"):
    """
    Save the configuration to <name>.json
    """
    logger.debug("save_config(name=%s)", name)
    with open(f"{name}.json", "w", encoding="utf-8") as f:
        json.dump(asdict(cfg), f, indent=4)


class SudobixPuzzle:
    """
    Owns the cube, its rotation queue and the values derived from them.
    Derived values are refreshed or cleared whenever a rotation commits.
    """

    def __init__(self, config: Optional[PuzzleConfig] = None):
        self.cfg = config if config is not None else PuzzleConfig()
        if self.cfg.debug:
            logging.getLogger().setLevel(logging.DEBUG)
        self.scheduler = RotationScheduler(
            turn_duration=self.cfg.turn_duration,
            shuffle_moves=self.cfg.shuffle_moves,
            rng=Random(self.cfg.seed),
        )
        self.scheduler.add_commit_listener(self._on_commit)
        self.active_slice: Tuple[str, int] = ("y", 0)
        self.fingerprint: Optional[Fingerprint] = None
        self.validity: Dict[str, bool] = {}
        self.last_move: Optional[RotationCommand] = None
        self.check_validity()

    # ---- queries ----
    @property
    def cube(self):
        """The cube currently owned by the scheduler."""
        return self.scheduler.cube

    @property
    def cubies(self):
        """Cubies for rendering placement."""
        return self.scheduler.cube.cubies

    @property
    def pending(self) -> int:
        """Queued commands, the one in flight included."""
        return self.scheduler.pending

    @property
    def is_animating(self) -> bool:
        """True while a turn is in flight."""
        return self.scheduler.is_animating

    @property
    def progress(self) -> float:
        """Visual progress of the turn in flight."""
        return self.scheduler.progress

    @property
    def queue_full(self) -> bool:
        """True when more than max_queue commands are waiting."""
        return self.scheduler.pending > self.cfg.max_queue

    @property
    def symmetries(self):
        """Whole-cube rotations tried by the canonical state."""
        if self.cfg.full_symmetry:
            return ROTATION_GROUP
        return SUDOBIX_SYMMETRIES

    # ---- commands ----
    def select_slice(self, axis: str, layer: int):
        """Select the slice the controls act on. The cube is not touched."""
        check_axis(axis)
        check_layer(layer)
        self.active_slice = (axis, layer)

    def shift_layer(self, delta: int):
        """Move the selected layer by delta, clamped to the cube."""
        axis, layer = self.active_slice
        layer = max(-HALF_ORDER, min(HALF_ORDER, layer + delta))
        self.select_slice(axis, layer)

    def queue_rotation(self, axis: str, layer: int, direction: int) -> RotationCommand:
        """Queue a slice turn."""
        command = RotationCommand(axis, layer, direction)
        self.scheduler.enqueue(command)
        return command

    def queue_sequence(self, sequence: str):
        """Queue every move of a sequence such as "y4 x-2' z02"."""
        commands = parse_sequence(sequence)
        self.scheduler.enqueue_many(commands)
        return commands

    def rotate_slice(self, axis: str, layer: int, direction: int) -> RotationCommand:
        """Turn a slice; the turn always goes through the queue."""
        return self.queue_rotation(axis, layer, direction)

    def rotate_active(self, direction: int) -> RotationCommand:
        """Turn the selected slice."""
        axis, layer = self.active_slice
        return self.rotate_slice(axis, layer, direction)

    def shuffle(self):
        """Queue a random shuffle unless the queue is already full."""
        if self.queue_full:
            logger.warning("Shuffle ignored, %d moves already queued", self.pending)
            return []
        return self.scheduler.shuffle()

    def reset(self):
        """Back to a solved cube with nothing queued."""
        self.scheduler.reset()
        self.fingerprint = None
        self.last_move = None
        self.check_validity()

    def tick(self, elapsed: float) -> Optional[RotationCommand]:
        """Advance the animation clock."""
        return self.scheduler.tick(elapsed)

    def drain(self):
        """Commit everything queued right away."""
        return self.scheduler.drain()

    def compute_sudobix(self) -> Fingerprint:
        """Compute and keep the fingerprint of the current state."""
        self.fingerprint = compute_sudobix(self.cube, self.symmetries)
        return self.fingerprint

    def check_validity(self) -> Dict[str, bool]:
        """Recompute and keep the per-face sudoku validity."""
        self.validity = check_validity(self.cube)
        return self.validity

    def _on_commit(self, command: RotationCommand):
        self.last_move = command
        self.fingerprint = None
        self.check_validity()
