from __future__ import annotations

import shlex

from .config import SHELLS
from .errors import UsageError
from .log import NO_COMMENTS, SH_COMMENTS


def _check(shell: str) -> None:
    if shell not in SHELLS:
        raise UsageError(f"Unknown target shell '{shell}'")


def set_line(shell: str, name: str, value: str) -> str:
    _check(shell)
    if shell == "bash":
        return f"export {name}={shlex.quote(value)}"
    if shell == "csh":
        return f'setenv {name} "{value}";'
    return f"{name}={shlex.quote(value)}"


def unset_line(shell: str, name: str) -> str:
    _check(shell)
    if shell == "bash":
        return f"unset {name}"
    if shell == "csh":
        return f"unsetenv {name};"
    return f"{name}="


def comment_style(shell: str) -> tuple[str | None, str | None]:
    """Comment delimiters that keep diagnostics inert when the output is eval'd."""
    _check(shell)
    return NO_COMMENTS if shell == "none" else SH_COMMENTS
