"""Resolve the login password from exactly one input source.

Sources, in the order they are considered:

* ``--password VALUE`` -- used verbatim, special characters included.
* ``--password-stdin`` -- one line read from standard input; only the
  line terminator is removed so leading/trailing spaces survive.
* an interactive, no-echo prompt when stdin is a terminal.
"""

from __future__ import annotations

import getpass
import sys
from typing import Callable, Optional, TextIO

from vmscli.exceptions import ValidationError


def resolve_password(
    password: Optional[str],
    *,
    password_provided: bool,
    from_stdin: bool,
    stdin: Optional[TextIO] = None,
    prompt: Callable[[str], str] = getpass.getpass,
    interactive: Optional[bool] = None,
) -> str:
    """Return the password from the single active source.

    Args:
        password: Value of ``--password`` (ignored unless *password_provided*).
        password_provided: Whether ``--password`` was given at all.
        from_stdin: Whether ``--password-stdin`` was given.
        stdin: Stream to read from; defaults to :data:`sys.stdin`.
        prompt: No-echo prompt function used when neither flag is set.
        interactive: Whether prompting is allowed; defaults to ``stdin.isatty()``.

    Raises:
        ValidationError: If both flags are set, the chosen source yields an
            empty password, or a prompt is needed but not possible.
    """
    stream = stdin if stdin is not None else sys.stdin

    if password_provided and from_stdin:
        raise ValidationError("--password and --password-stdin are mutually exclusive")

    if password_provided:
        if not password:
            raise ValidationError("password is required")
        return password

    if from_stdin:
        value = _strip_line_ending(stream.readline())
        if not value:
            raise ValidationError("password from stdin is empty")
        return value

    if interactive is None:
        interactive = hasattr(stream, "isatty") and stream.isatty()
    if not interactive:
        raise ValidationError(
            "password is required: use --password, --password-stdin, or run interactively"
        )
    value = prompt("Password: ")
    if not value:
        raise ValidationError("password is required")
    return value


def _strip_line_ending(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line
