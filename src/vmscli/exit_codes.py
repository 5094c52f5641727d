"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to an error category and is referenced by the
corresponding :class:`~vmscli.exceptions.VmsError` subclass, so wrapper
scripts can tell a rejected password from a network outage without parsing
stderr.

Example::

    $ vmscli auth login -u me@example.com --password-stdin < pw.txt
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the portal rejected the credentials
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""Invalid arguments: empty username/password, unknown store kind, conflicting flags."""

EXIT_AUTH_FAILURE = 3
"""The portal rejected the login or requires interactive SSO/MFA."""

EXIT_NOT_FOUND = 4
"""No stored credentials were found in the selected backend."""

EXIT_SERVER_ERROR = 5
"""The portal answered with an HTTP error status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
