"""
Reduce a discovery result to the target(s) an action runs against.

- no target: fatal
- one target: used directly, no prompt
- several, batch requested: every target in turn, failures logged and recorded
- several, interactive: a numbered table on stderr and a prompt on stdin
"""
from __future__ import annotations

import subprocess
import sys
from typing import Callable, List, Optional, Sequence, TextIO, TypeVar

from rich.console import Console
from rich.table import Table

from jumpkit.core.errors import JumpkitError, NoResourcesFound, SelectionAborted
from jumpkit.core.models import Outcome
from jumpkit.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

PROMPT = "enter a valid instance number: "

# Errors that stop one target in a batch without stopping the batch
BATCH_ERRORS = (JumpkitError, subprocess.SubprocessError, OSError)


def render_table(targets: Sequence[T], columns: Sequence[str], row: Callable[[T], Sequence[str]], console: Console) -> None:
    table = Table(box=None, show_edge=False, pad_edge=False)
    table.add_column("#", justify="right")
    for column in columns:
        table.add_column(column)
    for idx, target in enumerate(targets):
        table.add_row(str(idx), *[value or "" for value in row(target)])
    console.print(table)


def parse_choice(answer: str, count: int) -> Optional[int]:
    try:
        idx = int(answer.strip())
    except ValueError:
        return None
    if 0 <= idx < count:
        return idx
    return None


def choose(
    targets: Sequence[T],
    columns: Sequence[str],
    row: Callable[[T], Sequence[str]],
    stdin: Optional[TextIO] = None,
    console: Optional[Console] = None,
) -> T:
    """Render ``targets`` and block until a valid index is entered."""
    stdin = stdin or sys.stdin
    console = console or Console(stderr=True, highlight=False)

    render_table(targets, columns, row, console)
    while True:
        console.print(PROMPT, end="")
        answer = stdin.readline()
        if not answer:
            raise SelectionAborted("no selection made (end of input)")
        idx = parse_choice(answer, len(targets))
        if idx is not None:
            return targets[idx]


def apply_all(targets: Sequence[T], action: Callable[[T], object], describe: Callable[[T], str] = str) -> List[Outcome]:
    outcomes: List[Outcome] = []
    for target in targets:
        try:
            action(target)
        except BATCH_ERRORS as e:
            logger.error(f"{describe(target)}: {e}")
            outcomes.append(Outcome(target, e))
        else:
            outcomes.append(Outcome(target))
    return outcomes


def select_and_apply(
    targets: Sequence[T],
    action: Callable[[T], object],
    columns: Sequence[str],
    row: Callable[[T], Sequence[str]],
    batch: bool = False,
    describe: Callable[[T], str] = str,
    stdin: Optional[TextIO] = None,
    console: Optional[Console] = None,
) -> List[Outcome]:
    if len(targets) == 0:
        raise NoResourcesFound("no instances found.")

    if len(targets) == 1:
        action(targets[0])
        return [Outcome(targets[0])]

    if batch:
        return apply_all(targets, action, describe)

    target = choose(targets, columns, row, stdin=stdin, console=console)
    action(target)
    return [Outcome(target)]
