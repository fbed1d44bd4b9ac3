"""Library for generating `gcloud` commands used to deploy to App Engine.

Each method returns a `Command` that can be awaited with `command.run`:
```python
from gae_deploy import command
from gae_deploy.gcloud import Gcloud

gcloud = Gcloud(cwd=Path("/path/to/project"))
await command.run(gcloud.auth_activate_service_account("key.json"))
await command.run(gcloud.config_set_project("my-project"))
await command.run(gcloud.app_deploy("./app.yml"))
```
"""

import logging
from pathlib import Path

from .command import Command

__all__ = [
    "GCLOUD_BIN",
    "Gcloud",
]

_LOGGER = logging.getLogger(__name__)

GCLOUD_BIN = "gcloud"


class Gcloud:
    """Builds commands for the Google Cloud command line tool."""

    def __init__(
        self,
        bin: str = GCLOUD_BIN,
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        """Initialize Gcloud."""
        self._bin = bin
        self._cwd = cwd
        self._env = env

    def _command(self, args: list[str]) -> Command:
        return Command([self._bin] + args, cwd=self._cwd, env=self._env)

    def auth_activate_service_account(self, key_file: str) -> Command:
        """Authenticate with the service account key file."""
        return self._command(
            ["auth", "activate-service-account", "--key-file", key_file]
        )

    def config_set_project(self, project: str | None) -> Command:
        """Set the active project.

        A missing project is passed as an empty argument and left for gcloud
        to reject.
        """
        return self._command(["config", "set", "project", project or ""])

    def app_deploy(self, app_file_name: str, version: str | None = None) -> Command:
        """Deploy the application and promote it, stopping the previous version."""
        args = [
            "app",
            "deploy",
            app_file_name,
            "--quiet",
            "--stop-previous-version",
            "--promote",
        ]
        if version:
            args.extend(["--version", version])
        return self._command(args)

    def app_deploy_cron(self, cron_file: str) -> Command:
        """Deploy the cron configuration."""
        return self._command(["app", "deploy", cron_file, "--quiet"])
