"""
Initializes the Dynaconf settings object for the mmdb_updater library.
This module is the single source of truth for all configuration.

Values can be overridden with environment variables prefixed ``MMDB_``,
e.g. ``MMDB_UPDATER__LICENSE_KEY`` or ``MMDB_UPDATER__TIMEOUT``.
"""

from pathlib import Path
from dynaconf import Dynaconf

PACKAGE_ROOT = Path(__file__).parent

settings = Dynaconf(
    root_path=PACKAGE_ROOT,
    settings_files=["config/settings.toml"],
    secrets="config/.secrets.toml",
    envvar_prefix="MMDB",
)
