"""Built-in CLI sub-commands for vmscli.

* :mod:`~vmscli.commands.auth` -- log in, check the session, manage stored
  credentials.
* :mod:`~vmscli.commands.config` -- view and modify global settings.

Each module exports a :class:`typer.Typer` sub-application registered on the
root app by :func:`vmscli.app.main`.
"""
