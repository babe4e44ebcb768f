from __future__ import annotations

from typing import Dict, List, Sequence

SCRIPT_ROOT = "/opt/bench"

# verb -> canonical remote command, remaining args are appended
COMMANDS: Dict[str, str] = {
    "bash": f"{SCRIPT_ROOT}/exec bash",
    "exec": f"{SCRIPT_ROOT}/exec",
    "jstack": f"{SCRIPT_ROOT}/jstack",
    "jmap": f"{SCRIPT_ROOT}/jmap",
    "logs": f"{SCRIPT_ROOT}/logs",
}

SESSION_FLAGS = "-tC"  # pseudo-terminal + compression


def resolve_command(verb: str) -> str:
    return COMMANDS.get(verb, verb)


def prepare_args(args: Sequence[str]) -> List[str]:
    """Turn pass-through arguments into ssh arguments.

    >>> prepare_args(["logs", "-f"])
    ['-tC', '/opt/bench/logs', '-f']
    """
    if not args:
        return []
    verb, rest = args[0], list(args[1:])
    return [SESSION_FLAGS, resolve_command(verb), *rest]
