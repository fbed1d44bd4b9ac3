"""Orchestrator for a single App Engine deployment.

The deployment runs as a fixed sequence of stages. Each stage must complete
before the next begins and the first failure ends the run:

- The plugin configuration and descriptor are assembled and checked
- Declared secrets are resolved from the environment snapshot
- The service account key file must exist
- The descriptor is rewritten with the merged `env_variables`
- `gcloud` authenticates, selects the project, deploys the app and then
  optionally deploys the cron file

The descriptor is written before any `gcloud` command runs and is not restored
if a later stage fails.
"""

from collections.abc import Generator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, replace
from enum import StrEnum
import logging
from pathlib import Path
from time import perf_counter
from typing import Any

from . import command
from .command import Command
from .config import CliOverrides, HostConfig, ResolvedConfig, assemble
from .descriptor import mutate_descriptor, write_descriptor
from .exceptions import MissingAppDescriptor, MissingKeyFile
from .gcloud import Gcloud
from .secrets import resolve_secrets

__all__ = [
    "Stage",
    "DeployOptions",
    "Deployer",
    "deploy",
]

_LOGGER = logging.getLogger(__name__)


class Stage(StrEnum):
    """Pipeline stages, in the order they are reached."""

    CONFIG_ASSEMBLED = "ConfigAssembled"
    DESCRIPTOR_LOADED = "DescriptorLoaded"
    SECRETS_RESOLVED = "SecretsResolved"
    KEY_FILE_VALIDATED = "KeyFileValidated"
    DESCRIPTOR_MUTATED = "DescriptorMutated"
    AUTHENTICATED = "Authenticated"
    PROJECT_SELECTED = "ProjectSelected"
    DEPLOYED = "Deployed"
    CRON_DEPLOYED = "CronDeployed"
    COMPLETE = "Complete"


@dataclass
class DeployOptions:
    """Options that change how the deployment is carried out."""

    dry_run: bool = False
    """Write the descriptor but skip the gcloud commands."""


class Deployer:
    """Runs the deployment stages for a ResolvedConfig."""

    def __init__(
        self,
        config: ResolvedConfig,
        production: Mapping[str, Any],
        environ: Mapping[str, str],
        gcloud: Gcloud | None = None,
        options: DeployOptions | None = None,
    ) -> None:
        """Initialize Deployer."""
        self.config = config
        self.production = production
        self.environ = environ
        self.gcloud = gcloud or Gcloud(cwd=config.cwd)
        self.options = options or DeployOptions()
        self.stage = Stage.CONFIG_ASSEMBLED
        self.skipped: list[Command] = []

    @contextmanager
    def _enter(self, stage: Stage) -> Generator[None, None, None]:
        """Record the stage once the body completes without error."""
        _LOGGER.debug("[Stage] > %s", stage)
        t1 = perf_counter()
        try:
            yield
            self.stage = stage
        finally:
            t2 = perf_counter()
            _LOGGER.debug("[Stage] < %s (%0.2fs)", stage, (t2 - t1))

    def _commands(self, key_file: str) -> list[tuple[Stage, Command]]:
        config = self.config
        commands = [
            (
                Stage.AUTHENTICATED,
                self.gcloud.auth_activate_service_account(key_file),
            ),
            (Stage.PROJECT_SELECTED, self.gcloud.config_set_project(config.project)),
            (
                Stage.DEPLOYED,
                self.gcloud.app_deploy(config.app_file_name, version=config.version),
            ),
        ]
        if config.cron_file:
            commands.append(
                (Stage.CRON_DEPLOYED, self.gcloud.app_deploy_cron(config.cron_file))
            )
        return commands

    def _check_descriptor(self) -> dict[str, Any]:
        if not self.config.app_file:
            raise MissingAppDescriptor(self.config.app_file_name)
        return self.config.app_file

    def _check_key_file(self) -> str:
        key_file = self.config.key_file
        if not key_file or not (self.config.cwd / key_file).exists():
            raise MissingKeyFile(key_file)
        return key_file

    async def run(self) -> None:
        """Run all remaining stages, raising on the first failure."""
        config = self.config

        with self._enter(Stage.DESCRIPTOR_LOADED):
            app_file = self._check_descriptor()

        with self._enter(Stage.SECRETS_RESOLVED):
            if config.secrets:
                config = replace(
                    config, secret_vars=resolve_secrets(config.secrets, self.environ)
                )
                self.config = config

        with self._enter(Stage.KEY_FILE_VALIDATED):
            key_file = self._check_key_file()

        with self._enter(Stage.DESCRIPTOR_MUTATED):
            document = mutate_descriptor(app_file, self.production, config.secret_vars)
            await write_descriptor(config.app_file_path, document)

        commands = self._commands(key_file)
        if self.options.dry_run:
            for _, cmd in commands:
                _LOGGER.info("Dry run, skipping: %s", cmd)
                self.skipped.append(cmd)
            return

        for stage, cmd in commands:
            with self._enter(stage):
                _LOGGER.info("Running: %s", cmd.string)
                await command.run(cmd)

        self.stage = Stage.COMPLETE
        _LOGGER.info("Deployment of %s complete", config.app_file_name)


async def deploy(
    host_config: HostConfig,
    overrides: CliOverrides,
    environ: Mapping[str, str],
    cwd: Path | None = None,
    gcloud: Gcloud | None = None,
    options: DeployOptions | None = None,
) -> Deployer:
    """Assemble the configuration and run the deployment to completion.

    The returned Deployer holds the last stage reached and, for a dry run, the
    commands that were skipped.
    """
    config = await assemble(host_config, overrides, cwd=cwd)
    deployer = Deployer(
        config,
        host_config.production,
        environ,
        gcloud=gcloud,
        options=options,
    )
    await deployer.run()
    return deployer
