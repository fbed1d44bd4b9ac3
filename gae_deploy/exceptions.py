"""Exceptions related to gae-deploy."""

from collections.abc import Sequence

__all__ = [
    "DeployException",
    "InputException",
    "MissingPluginConfig",
    "MissingAppDescriptor",
    "MissingEnvironmentVariable",
    "MissingKeyFile",
    "CommandException",
    "ExternalCommandFailed",
]

DOCUMENTATION_URL = (
    "https://github.com/nicolascava/felfire-google-app-engine#configuration"
)


class DeployException(Exception):
    """Generic base exception used for this library."""


class InputException(DeployException):
    """Raised when the input files or values are not formatted as expected."""


class MissingPluginConfig(InputException):
    """Raised when the host configuration has no entry for the deploy plugin."""

    def __init__(self, plugin_id: str) -> None:
        super().__init__(
            f"Missing plugin's configuration properties for '{plugin_id}'. See all "
            f"mandatory properties in the documentation: {DOCUMENTATION_URL}."
        )
        self.plugin_id = plugin_id


class MissingAppDescriptor(InputException):
    """Raised when the application descriptor is absent or does not parse."""

    def __init__(self, app_file_name: str) -> None:
        super().__init__(
            f"There is no '{app_file_name}' at the root of your project. Please "
            "define one to deploy to Google App Engine."
        )
        self.app_file_name = app_file_name


class MissingEnvironmentVariable(InputException):
    """Raised when one or more declared secrets are not in the environment."""

    def __init__(self, names: Sequence[str]) -> None:
        super().__init__(f"Environment variable doesn't exist: {', '.join(names)}.")
        self.names = list(names)

    @property
    def name(self) -> str:
        """The first missing variable."""
        return self.names[0]


class MissingKeyFile(InputException):
    """Raised when the service account key file is not set or does not exist."""

    def __init__(self, key_file: str | None) -> None:
        detail = f" '{key_file}'" if key_file else ""
        super().__init__(
            f"Missing key file{detail}. Unable to authenticate on Google Cloud "
            "Platform."
        )
        self.key_file = key_file


class CommandException(DeployException):
    """Raised when there is a failure running a subcommand."""


class ExternalCommandFailed(CommandException):
    """Raised when the external deploy tool exits non-zero or fails to start."""

    def __init__(
        self,
        cmd: str,
        returncode: int | None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        if returncode is None:
            errors = [f"Command '{cmd}' failed to start"]
        else:
            errors = [f"Command '{cmd}' failed with return code {returncode}"]
        if stdout:
            errors.append(stdout)
        if stderr:
            errors.append(stderr)
        super().__init__("\n".join(errors))
        self.cmd = cmd
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
