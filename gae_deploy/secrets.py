"""Module for resolving declared secrets from an environment snapshot."""

from collections.abc import Iterable, Mapping
import logging

from .exceptions import MissingEnvironmentVariable

__all__ = [
    "resolve_secrets",
]

_LOGGER = logging.getLogger(__name__)


def resolve_secrets(
    secrets: Iterable[str], environ: Mapping[str, str]
) -> dict[str, str]:
    """Return a mapping of each declared secret name to its environment value.

    A variable that is set to the empty string counts as present. Every
    declared name is checked before failing, so that all missing variables
    are reported in a single error.
    """
    secret_vars: dict[str, str] = {}
    missing: list[str] = []
    for name in secrets:
        if name in secret_vars or name in missing:
            continue
        if name not in environ:
            missing.append(name)
            continue
        secret_vars[name] = environ[name]
    if missing:
        raise MissingEnvironmentVariable(missing)
    _LOGGER.debug("Resolved %d secret(s)", len(secret_vars))
    return secret_vars
