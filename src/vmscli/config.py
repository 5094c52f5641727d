"""Configuration management with XDG paths, atomic writes, and precedence resolution.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.vmscli/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- a single :class:`~vmscli.models.GlobalConfig` JSON
  file at :func:`get_config_path`.  The credentials file lives next to it
  (:func:`get_credentials_path`).
* **Precedence resolution** -- :func:`resolve_base_url` merges the CLI flag,
  ``VMSCLI_BASE_URL`` and the config file; :func:`credential_store_override`
  reads ``VMSCLI_CREDENTIAL_STORE`` once at the program boundary.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from vmscli.exceptions import ConfigError
from vmscli.models import GlobalConfig

_APP_NAME = "vmscli"
_CONFIG_FILENAME = "config.json"
_CREDENTIALS_FILENAME = "credentials.yaml"

BASE_URL_ENV_VAR = "VMSCLI_BASE_URL"
CREDENTIAL_STORE_ENV_VAR = "VMSCLI_CREDENTIAL_STORE"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, without creating it.

    On Linux/BSD: ``$XDG_CONFIG_HOME/vmscli/`` (default ``~/.config/vmscli/``).
    On macOS/Windows: ``~/.vmscli/``.

    The directory is created lazily by whoever writes into it, so that the
    credential store can create it with owner-only permissions.
    """
    if _is_xdg_platform():
        return _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    return _fallback_base_dir()


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/vmscli/`` (default ``~/.local/share/vmscli/``).
    On macOS/Windows: ``~/.vmscli/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def get_credentials_path() -> Path:
    """Path to the file-backend credentials, a sibling of :func:`get_config_path`."""
    return get_config_path().parent / _CREDENTIALS_FILENAME


# --- Atomic file writes ---


def atomic_write(path: Path, data: str, mode: Optional[int] = None) -> None:
    """Write *data* to *path* atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems.  When *mode* is
    given the temp file is chmod-ed before any content is written, so the
    data is never readable with looser permissions.  The temp file is removed
    on any failure.
    """
    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        if mode is not None:
            os.chmod(tmp_path, mode)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def load_global_config() -> GlobalConfig:
    """Load the global configuration.

    Returns:
        The deserialised :class:`~vmscli.models.GlobalConfig`, or a default
        instance when the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = get_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text)
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json")
    atomic_write(path, json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def resolve_base_url(cli_base_url: Optional[str] = None, config: Optional[GlobalConfig] = None) -> str:
    """Resolve the portal base URL.

    Precedence (high to low):
        1. ``--base-url`` CLI flag
        2. ``VMSCLI_BASE_URL`` environment variable
        3. ``base_url`` in the global config file

    Returns:
        The base URL without a trailing slash.

    Raises:
        ConfigError: If no source provides a base URL.
    """
    value = cli_base_url or os.environ.get(BASE_URL_ENV_VAR, "").strip()
    if not value:
        if config is None:
            config = load_global_config()
        value = config.base_url or ""
    if not value:
        raise ConfigError(
            f"No portal base URL configured (use --base-url, {BASE_URL_ENV_VAR}, "
            "or 'vmscli config set base_url <url>')"
        )
    return value.rstrip("/")


def credential_store_override() -> str:
    """Return the raw ``VMSCLI_CREDENTIAL_STORE`` value ("" when unset)."""
    return os.environ.get(CREDENTIAL_STORE_ENV_VAR, "")
