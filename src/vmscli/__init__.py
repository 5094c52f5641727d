"""vmscli -- command-line login for a cookie-session VMS portal.

The portal has no public API: users sign in through an HTML form and the
server hands back path-scoped session cookies.  This package drives that
handshake from the terminal and remembers the user's credentials between
runs, either in the OS keyring or in a permission-protected file.

Typical workflow::

    vmscli config set base_url https://portal.example.com
    vmscli auth login -u me@example.com   # prompts for the password
    vmscli auth status                    # re-login with stored credentials

Modules:
    app: Typer application and console-script entry point.
    models: Pydantic models and enums shared across the package.
    config: XDG-aware configuration and precedence resolution.
    client: ``httpx.Client`` construction and HTTP error mapping.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
