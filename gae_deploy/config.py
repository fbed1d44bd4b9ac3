"""Assembly of the configuration for a single deployment run.

The host build tool supplies a configuration file with a list of plugin
entries and named environment blocks:

```yaml
plugins:
  - - google-app-engine
    - secrets:
        - DATABASE_PASSWORD
environment:
  production:
    NODE_ENV: production
```

The deploy plugin entry is looked up by `PLUGIN_ID` and combined with the
command line overrides into a `ResolvedConfig`, which is the only input the
deployment pipeline reads.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import Any

import aiofiles
import yaml
from mashumaro import DataClassDictMixin

from .descriptor import read_descriptor
from .exceptions import InputException, MissingPluginConfig

__all__ = [
    "PLUGIN_ID",
    "DEFAULT_APP_FILE",
    "DEFAULT_CONFIG_FILE",
    "PluginConfig",
    "HostConfig",
    "CliOverrides",
    "ResolvedConfig",
    "find_plugin_config",
    "read_host_config",
    "assemble",
]

_LOGGER = logging.getLogger(__name__)

PLUGIN_ID = "google-app-engine"
DEFAULT_APP_FILE = "./app.yml"
DEFAULT_CONFIG_FILE = "./deploy.yaml"
PRODUCTION = "production"


@dataclass
class PluginConfig(DataClassDictMixin):
    """Options of the deploy plugin entry in the host configuration."""

    secrets: list[str] = field(default_factory=list)
    """Names of environment variables injected into the descriptor."""


@dataclass
class HostConfig(DataClassDictMixin):
    """Configuration of the hosting build tool."""

    plugins: list[Any] = field(default_factory=list)
    """Plugin entries, either `name` or `[name, {options}]`."""

    environment: dict[str, Any] = field(default_factory=dict)
    """Named blocks of plain environment variables."""

    @property
    def production(self) -> dict[str, Any]:
        """Return the production environment block."""
        block = self.environment.get(PRODUCTION)
        if block is None:
            return {}
        if not isinstance(block, dict):
            raise InputException(
                f"Invalid environment.{PRODUCTION} expected a mapping: {block}"
            )
        return block


@dataclass(frozen=True)
class CliOverrides:
    """Values supplied on the command line, None when not given."""

    app_file: str | None = None
    key_file: str | None = None
    project_id: str | None = None
    version: str | None = None
    cron_file: str | None = None


@dataclass(frozen=True)
class ResolvedConfig:
    """All settings for one deployment run."""

    app_file_name: str
    """Path of the descriptor, relative to `cwd` unless absolute."""

    app_file: dict[str, Any] | None
    """The parsed descriptor, or None when it is missing or unparsable."""

    secrets: tuple[str, ...] = ()
    """Declared secret names."""

    project: str | None = None
    key_file: str | None = None
    version: str | None = None
    cron_file: str | None = None

    cwd: Path = field(default_factory=Path.cwd)
    """Directory used to resolve relative paths and to run commands."""

    secret_vars: dict[str, str] = field(default_factory=dict)
    """Resolved secret values, empty until the secrets stage has run."""

    @property
    def app_file_path(self) -> Path:
        """Return the absolute path of the descriptor."""
        return self.cwd / self.app_file_name


def _plugin_entry(entry: Any) -> tuple[Any, Any]:
    """Split a plugin entry into its name and options."""
    if isinstance(entry, str):
        return entry, None
    if isinstance(entry, (list, tuple)) and entry:
        return entry[0], entry[1] if len(entry) > 1 else None
    return None, None


def find_plugin_config(
    plugins: Sequence[Any], plugin_id: str = PLUGIN_ID
) -> PluginConfig:
    """Return the options of the plugin entry named `plugin_id`."""
    for entry in plugins:
        name, options = _plugin_entry(entry)
        if name != plugin_id:
            continue
        if options is None:
            return PluginConfig()
        if not isinstance(options, dict):
            raise InputException(
                f"Invalid options for plugin '{plugin_id}' expected a mapping: "
                f"{options}"
            )
        secrets = options.get("secrets")
        if secrets is not None and (
            not isinstance(secrets, list)
            or not all(isinstance(secret, str) for secret in secrets)
        ):
            raise InputException(
                f"Invalid secrets for plugin '{plugin_id}' expected a list of "
                f"names: {secrets}"
            )
        return PluginConfig.from_dict({"secrets": secrets or []})
    raise MissingPluginConfig(plugin_id)


async def read_host_config(path: Path) -> HostConfig:
    """Return the host configuration stored in the file at `path`."""
    try:
        async with aiofiles.open(str(path)) as config_file:
            content = await config_file.read()
    except OSError as err:
        raise InputException(f"Unable to read configuration {path}: {err}") from err
    try:
        doc = yaml.safe_load(content)
    except yaml.YAMLError as err:
        raise InputException(f"Invalid configuration {path}: {err}") from err
    if not isinstance(doc, dict):
        raise InputException(
            f"Invalid configuration {path} expected a mapping: {doc}"
        )
    plugins = doc.get("plugins") or []
    if not isinstance(plugins, list):
        raise InputException(f"Invalid configuration {path} plugins must be a list")
    environment = doc.get("environment") or {}
    if not isinstance(environment, dict):
        raise InputException(
            f"Invalid configuration {path} environment must be a mapping"
        )
    return HostConfig.from_dict({"plugins": plugins, "environment": environment})


async def assemble(
    host_config: HostConfig,
    overrides: CliOverrides,
    cwd: Path | None = None,
) -> ResolvedConfig:
    """Combine the host configuration and overrides into a ResolvedConfig.

    The plugin entry is checked before any file is read.
    """
    plugin_config = find_plugin_config(host_config.plugins)
    cwd = cwd or Path.cwd()
    app_file_name = overrides.app_file or DEFAULT_APP_FILE
    app_file = await read_descriptor(cwd / app_file_name)
    _LOGGER.debug(
        "Assembled configuration for %s with %d secret(s)",
        app_file_name,
        len(plugin_config.secrets),
    )
    return ResolvedConfig(
        app_file_name=app_file_name,
        app_file=app_file,
        secrets=tuple(plugin_config.secrets),
        project=overrides.project_id or None,
        key_file=overrides.key_file or None,
        version=overrides.version or None,
        cron_file=overrides.cron_file or None,
        cwd=cwd,
    )
