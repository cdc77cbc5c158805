"""
Interactive file selection: progress bar, prompt session and the y/n/p/q loop.
"""

from __future__ import annotations

import math
import sys
from enum import Enum
from typing import List, Optional, Sequence, TextIO

from colorama import Fore, Style

from .core import echo, match_paths

BAR_WIDTH = 30
INVALID_INPUT_MSG = "Invalid input. Please enter y, n, p, or q."


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def render_progress(current: int, total: int, width: int = BAR_WIDTH) -> str:
    """Return ``[███░░░] 50% (1/2)`` for *current* out of *total*."""
    if total <= 0:
        return f"[{'░' * width}] 0% (0/0)"
    filled = max(0, min(width, _round_half_up(width * current / total)))
    bar = "█" * filled + "░" * (width - filled)
    percentage = _round_half_up(100 * current / total)
    return f"[{bar}] {percentage}% ({current}/{total})"


class PromptSession:
    """
    Exclusive owner of the interactive input stream while files are selected.

    Use as a context manager; once closed, no further prompts can be issued.
    Only streams the session opened itself are closed on exit, so wrapping
    ``sys.stdin`` leaves it open for the rest of the process.
    """

    def __init__(
        self,
        input_stream: Optional[TextIO] = None,
        output_stream: Optional[TextIO] = None,
        owns_input: bool = False,
    ) -> None:
        self.input = input_stream if input_stream is not None else sys.stdin
        self.output = output_stream if output_stream is not None else sys.stdout
        self._owns_input = owns_input
        self.closed = False

    def __enter__(self) -> "PromptSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._owns_input:
            self.input.close()

    def write(self, text: str) -> None:
        self.output.write(text)
        self.output.flush()

    def echo(self, msg: str, color: str = "") -> None:
        echo(msg, color, file=self.output)

    def ask(self, prompt: str) -> Optional[str]:
        """Show *prompt* and read one line; ``None`` means end of input."""
        if self.closed:
            raise RuntimeError("prompt session is closed")
        self.write(prompt)
        line = self.input.readline()
        if not line:
            return None
        return line.rstrip("\r\n")


class SelectionState(Enum):
    PROMPTING = "prompting"
    MATCHING_PATTERN = "matching_pattern"
    DONE = "done"


def select_files(candidates: Sequence[str], session: PromptSession) -> List[str]:
    """
    Walk *candidates* once, asking the user about each file.

    ``y`` accepts, ``n`` skips, ``q`` stops, and ``p`` reads a glob pattern
    whose matches among the undecided files are all accepted at once. The
    cursor never moves backwards, so a declined file is never offered again.
    """
    total = len(candidates)
    selected: List[str] = []
    chosen = set()
    cursor = 0
    state = SelectionState.PROMPTING

    session.echo("Select files to include:", Fore.BLUE)

    while state is not SelectionState.DONE:
        if state is SelectionState.PROMPTING:
            # batch matches need not be contiguous; skip ones already taken
            while cursor < total and candidates[cursor] in chosen:
                cursor += 1
            if cursor >= total:
                state = SelectionState.DONE
                continue

            path = candidates[cursor]
            session.write("\r" + render_progress(cursor + 1, total))
            answer = session.ask(f"{Fore.YELLOW}\nInclude {path}? (y/n/p/q) {Style.RESET_ALL}")
            if answer is None:
                state = SelectionState.DONE
                continue

            choice = answer.strip().lower()
            if choice == "y":
                selected.append(path)
                chosen.add(path)
                cursor += 1
            elif choice == "n":
                cursor += 1
            elif choice == "p":
                state = SelectionState.MATCHING_PATTERN
            elif choice == "q":
                state = SelectionState.DONE
            else:
                session.echo(INVALID_INPUT_MSG, Fore.RED)

        elif state is SelectionState.MATCHING_PATTERN:
            pattern = session.ask(f"{Fore.CYAN}Enter glob pattern: {Style.RESET_ALL}")
            if pattern is None:
                state = SelectionState.DONE
                continue

            try:
                matched = match_paths(candidates[cursor:], pattern.strip())
            except ValueError as e:
                session.echo(f"Invalid pattern: {e}", Fore.RED)
                matched = []

            added = [p for p in matched if p not in chosen]
            selected.extend(added)
            chosen.update(added)
            cursor += len(matched)
            session.echo(f"Added {len(added)} files matching the pattern.", Fore.GREEN)
            state = SelectionState.PROMPTING

    session.write("\n")
    return selected
