"""
Configuration management for snapshot assertions.

A :class:`SnapshotConfig` is built once from an ordered list of options and is
immutable afterwards. Each option is a plain callable that returns an updated
copy of the config, so options compose and can be tested one at a time::

    config = new_config(snap_directory("/tmp/snaps"), context_lines(3))

Defaults can also be read from a JSON file through :class:`ConfigManager`.
"""
from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_DIRECTORY_NAME = "__snapshots__"
DEFAULT_CONTEXT = 10
DEFAULT_EXTENSION = ".snap"
DEFAULT_CONFIG_FILE = "snapshot_config.json"


@dataclass(frozen=True)
class SnapshotConfig:
    """Settings for one snapshot assertion."""

    # Full path to the snapshot directory
    directory: str
    # Lines of context shown around each change in a diff
    context: int = DEFAULT_CONTEXT
    # False for binary formats where a line diff is meaningless
    diffable: bool = True
    # Suffix of every snapshot file
    extension: str = DEFAULT_EXTENSION
    # Mismatches whose diff matches this pattern are not failures
    ignore: Optional[re.Pattern[str]] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "directory": self.directory,
            "context": self.context,
            "diffable": self.diffable,
            "extension": self.extension,
            "ignore": self.ignore.pattern if self.ignore is not None else None,
        }


ConfigOption = Callable[[SnapshotConfig], SnapshotConfig]


def new_config(*options: ConfigOption) -> SnapshotConfig:
    """Create a config from ``options`` applied in order.

    The directory defaults to ``__snapshots__`` under the current working
    directory, with 10 context lines, diffable output and the ``.snap``
    extension.

    Raises:
        ConfigError: if the working directory cannot be determined or an
            option rejects its value.
    """
    try:
        cwd = os.getcwd()
    except OSError as e:
        raise ConfigError(f"Unable to determine the working directory: {e}") from e

    config = SnapshotConfig(directory=os.path.join(cwd, DEFAULT_DIRECTORY_NAME))
    for option in options:
        config = option(config)
    return config


def snap_directory(directory: str | os.PathLike[str]) -> ConfigOption:
    """Store snapshots in ``directory`` (made absolute against the cwd)."""
    path = os.path.abspath(os.fspath(directory))

    def apply(config: SnapshotConfig) -> SnapshotConfig:
        return replace(config, directory=path)

    return apply


def context_lines(n: int) -> ConfigOption:
    """Show at most ``n`` lines of context around each change."""
    if isinstance(n, bool) or not isinstance(n, int) or n < 0:
        raise ConfigError(f"Context lines must be a non-negative integer, got {n!r}")

    def apply(config: SnapshotConfig) -> SnapshotConfig:
        return replace(config, context=n)

    return apply


def diffable(flag: bool) -> ConfigOption:
    """Mark output as diffable or not.

    Set this to False for binary formats (images, PDF files, ...) where a line
    diff of the contents would be noise.
    """

    def apply(config: SnapshotConfig) -> SnapshotConfig:
        return replace(config, diffable=bool(flag))

    return apply


def snap_extension(extension: str) -> ConfigOption:
    """Use ``extension`` instead of ``.snap`` for snapshot files.

    Handy for binary snapshots that should open in a viewer, e.g. ``.png``.
    """

    def apply(config: SnapshotConfig) -> SnapshotConfig:
        return replace(config, extension=extension)

    return apply


def ignore_regex(pattern: str) -> ConfigOption:
    """Ignore mismatches whose diff text matches ``pattern``.

    Meant for output with volatile fields such as embedded creation dates. A
    match anywhere in the diff suppresses the whole failure.

    Raises:
        ConfigError: if ``pattern`` is not a valid regular expression.
    """
    try:
        compiled = re.compile(pattern)
    except (re.error, TypeError) as e:
        raise ConfigError(f"Invalid ignore pattern {pattern!r}: {e}") from e

    def apply(config: SnapshotConfig) -> SnapshotConfig:
        return replace(config, ignore=compiled)

    return apply


def options_from_dict(data: dict[str, Any], base_dir: Optional[Path] = None) -> list[ConfigOption]:
    """Translate a config file mapping into options.

    A relative ``directory`` is resolved against ``base_dir`` when given.
    """
    options: list[ConfigOption] = []

    for key in data:
        if key not in ("directory", "context", "diffable", "extension", "ignore"):
            logger.warning(f"Ignoring unknown config key: {key}")

    directory = data.get("directory")
    if directory:
        path = Path(directory)
        if not path.is_absolute() and base_dir is not None:
            path = base_dir / path
        options.append(snap_directory(path))
    if data.get("context") is not None:
        options.append(context_lines(data["context"]))
    if data.get("diffable") is not None:
        options.append(diffable(data["diffable"]))
    if data.get("extension"):
        options.append(snap_extension(data["extension"]))
    if data.get("ignore"):
        options.append(ignore_regex(data["ignore"]))

    return options


class ConfigManager:
    """Manages configuration loading and saving."""

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = Path(config_path or DEFAULT_CONFIG_FILE)
        self.config = self._load()

    def _load(self) -> SnapshotConfig:
        if not self.config_path.exists():
            return new_config()

        try:
            with open(self.config_path, "r") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load config from {self.config_path}: {e}")
            return new_config()

        if not isinstance(data, dict):
            logger.warning(f"Config file {self.config_path} does not hold a JSON object, using defaults")
            return new_config()

        return new_config(*options_from_dict(data, base_dir=self.config_path.parent.resolve()))

    def get_config(self) -> SnapshotConfig:
        """Get the current configuration."""
        return self.config

    def update_config(self, *options: ConfigOption) -> SnapshotConfig:
        """Apply ``options`` on top of the current configuration."""
        for option in options:
            self.config = option(self.config)
        return self.config

    def save_config(self) -> None:
        """Save configuration to file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w") as f:
            json.dump(self.config.to_dict(), f, indent=2)

    def create_default_config(self) -> None:
        """Create a default configuration file."""
        self.config = new_config()
        self.save_config()
        logger.info(f"Created default configuration at {self.config_path}")
