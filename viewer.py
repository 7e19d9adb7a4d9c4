"""
Terminal viewer for the sudoku cube.
"""

import logging
import select
import sys
import termios
import time
import tty
from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.layout import Layout
from rich.live import Live
from rich.text import Text
from rich.align import Align

from cube import AXES, CUBE_ORDER
from faces import FACE_NAMES, STICKER_COLORS, NO_STICKER, face_grids
from puzzle import SudobixPuzzle

logger = logging.getLogger("viewer")

# Keys: x/y/z select axis. Arrow keys:
#  - LEFT/RIGHT => select layer -/+
#  - UP/DOWN    => turn selected slice direction +1/-1
# Other keys: s = shuffle, r = reset, h = compute fingerprint, q = quit

KEY_UP = "KEY_UP"
KEY_DOWN = "KEY_DOWN"
KEY_LEFT = "KEY_LEFT"
KEY_RIGHT = "KEY_RIGHT"

TURN_KEYS = {
    KEY_UP: 1,
    KEY_DOWN: -1,
}

LAYER_KEYS = {
    KEY_LEFT: -1,
    KEY_RIGHT: +1,
}

FRAME_SECONDS = 1 / 30


def read_key(timeout: Optional[float] = None) -> Optional[str]:
    """Read a single keypress (including arrows) in raw mode and return a token.
    Returns plain characters for normal keys (e.g., 'q', 'x').
    Returns KEY_* tokens for arrow keys, None if nothing was pressed within timeout.
    """
    fd = sys.stdin.fileno()
    old = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        ready, _, _ = select.select([sys.stdin], [], [], timeout)
        if not ready:
            return None
        ch1 = sys.stdin.read(1)
        if ch1 == "\x1b":
            # Escape sequence
            ch2 = sys.stdin.read(1)
            if ch2 == "[":
                ch3 = sys.stdin.read(1)
                if ch3 == "A":
                    return KEY_UP
                if ch3 == "B":
                    return KEY_DOWN
                if ch3 == "C":
                    return KEY_RIGHT
                if ch3 == "D":
                    return KEY_LEFT
            return "\x1b"
        return ch1
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)


def _cell(digit) -> str:
    return "." if digit == NO_STICKER else str(int(digit))


def render_face(grid, name: str, valid: Optional[bool] = None):
    """Render one 9x9 face as a table of three 3x3 blocks per row."""
    if valid is None:
        mark = "…"
    else:
        mark = "✓" if valid else "✗"
    table = Table(
        title=f"{name} {mark}",
        title_style="bold red" if valid is False else "bold",
        show_header=False,
        box=box.SQUARE,
        expand=False,
        pad_edge=False,
        style=STICKER_COLORS.get(name, "white"),
    )
    for _ in range(3):
        table.add_column(justify="center")
    for r in range(CUBE_ORDER):
        blocks = [
            " ".join(_cell(d) for d in grid[r][c : c + 3]) for c in range(0, CUBE_ORDER, 3)
        ]
        table.add_row(*blocks, end_section=r in (2, 5))
    return table


def render_status(puzzle: SudobixPuzzle) -> Text:
    """Footer line with queue, slice and fingerprint state."""
    axis, layer = puzzle.active_slice
    status = "Running" if puzzle.is_animating else "Idle"
    parts = [
        f"Queue: {puzzle.pending} ({status})",
        f"Slice: {axis.upper()}{layer:+d}",
    ]
    if puzzle.is_animating:
        parts.append(f"Turn: {puzzle.scheduler.current} {puzzle.progress:0.0%}")
    if puzzle.last_move is not None:
        parts.append(f"Last: {puzzle.last_move}")
    if puzzle.fingerprint is not None:
        parts.append(f"Canonical: {puzzle.fingerprint.short()}...")
    return Text("   ".join(parts), style="dim", no_wrap=True, overflow="ellipsis")


def render_ui(puzzle: SudobixPuzzle):
    """
    Build and return a Rich renderable with the six faces,
    validity marks and queue state.
    """
    layout = Layout()
    layout.split_column(
        Layout(name="header", size=4),
        Layout(name="body"),
        Layout(name="footer", size=1),
    )

    title = Text(
        "Sudobix: 9x9x9 Sudoku Cube\n"
        "[x/y/z] axis   ←/→ layer   ↑/↓ turn slice\n"
        "[s] shuffle   [r] reset   [h] fingerprint   [q] quit",
        style="bold",
        no_wrap=False,
    )
    layout["header"].update(Align.center(title, vertical="middle"))

    grids = face_grids(puzzle.cube)
    layout["body"].split_column(Layout(name="upper"), Layout(name="lower"))
    for row_name, names in (("upper", FACE_NAMES[:3]), ("lower", FACE_NAMES[3:])):
        layout["body"][row_name].split_row(
            *[
                Layout(
                    Align.center(
                        render_face(grids[name], name, puzzle.validity.get(name)),
                        vertical="middle",
                    ),
                    name=name,
                )
                for name in names
            ]
        )
    layout["footer"].update(Align.center(render_status(puzzle), vertical="middle"))

    return Panel(layout, border_style="cyan")


def handle_key(puzzle: SudobixPuzzle, key: Optional[str]) -> bool:
    """function to handle captured keypresses"""
    if key is None:
        return True
    if key == "q":
        return False
    if key in AXES:
        puzzle.select_slice(key, puzzle.active_slice[1])
    elif key in LAYER_KEYS:
        puzzle.shift_layer(LAYER_KEYS[key])
    elif key in TURN_KEYS:
        logger.debug("Turning slice %s direction %s", puzzle.active_slice, TURN_KEYS[key])
        puzzle.rotate_active(TURN_KEYS[key])
    elif key == "s":
        puzzle.shuffle()
    elif key == "r":
        puzzle.reset()
    elif key == "h":
        puzzle.compute_sudobix()
    else:
        logger.debug("Unbound key: %r", key)
    return True


def run(puzzle: SudobixPuzzle):
    """
    Main loop: read keys, tick the scheduler, redraw.
    """
    console = Console(
        force_terminal=True,  # ensure Rich treats this as an interactive TTY
    )
    last = time.monotonic()
    with Live(
        render_ui(puzzle),
        console=console,
        refresh_per_second=4,
        auto_refresh=False,
        screen=True,  # draw in an alternate screen buffer
        transient=True,  # leave the terminal clean on exit;
    ) as live:
        while True:
            key = read_key(timeout=FRAME_SECONDS)
            if not handle_key(puzzle, key):
                break
            now = time.monotonic()
            committed = puzzle.tick(now - last)
            last = now
            if key is not None or committed is not None or puzzle.is_animating:
                live.update(render_ui(puzzle), refresh=True)
