"""Gae-deploy deploy action."""

from argparse import (
    ArgumentParser,
    _SubParsersAction as SubParsersAction,
    BooleanOptionalAction,
)
import logging
import os
import pathlib
from typing import cast

from gae_deploy import config, orchestrator

_LOGGER = logging.getLogger(__name__)


class DeployAction:
    """Gae-deploy deploy action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "deploy",
                help="Deploy the application to Google App Engine",
                description="""Injects the production environment and secrets
                    into the app.yml file, then authenticates with gcloud, selects
                    the project and deploys the app and optional cron file.""",
            ),
        )
        args.add_argument(
            "--config",
            dest="config_file",
            type=pathlib.Path,
            default=pathlib.Path(config.DEFAULT_CONFIG_FILE),
            help="Build configuration file with the plugins and environment blocks",
        )
        args.add_argument(
            "--app-file",
            type=str,
            default=None,
            help="(optional) Google Cloud Platform's app.yml file used to config "
            f"the deploy (default {config.DEFAULT_APP_FILE})",
        )
        args.add_argument(
            "--key-file",
            type=str,
            default=None,
            help="(optional) the Google Cloud JSON key file",
        )
        args.add_argument(
            "--project-id",
            type=str,
            default=None,
            help="(optional) the Google Cloud project ID",
        )
        args.add_argument(
            "--version",
            type=str,
            default=None,
            help="(optional) the version identifier of the deployed app",
        )
        args.add_argument(
            "--cron-file",
            type=str,
            default=None,
            help="(optional) specify cron's file to deploy as well",
        )
        args.add_argument(
            "--dry-run",
            type=bool,
            action=BooleanOptionalAction,
            default=False,
            help="Write the app.yml file but only print the gcloud commands",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        config_file: pathlib.Path,
        app_file: str | None,
        key_file: str | None,
        project_id: str | None,
        version: str | None,
        cron_file: str | None,
        dry_run: bool,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        _LOGGER.debug("Reading build configuration %s", config_file)
        host_config = await config.read_host_config(config_file)
        overrides = config.CliOverrides(
            app_file=app_file,
            key_file=key_file,
            project_id=project_id,
            version=version,
            cron_file=cron_file,
        )
        deployer = await orchestrator.deploy(
            host_config,
            overrides,
            dict(os.environ),
            options=orchestrator.DeployOptions(dry_run=dry_run),
        )
        for cmd in deployer.skipped:
            print(cmd.string)

