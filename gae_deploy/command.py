"""Library for issuing commands using asyncio and returning the result.

Commands are run one at a time and awaited to completion. There is no timeout:
the caller is suspended until the subprocess exits.
"""

import asyncio
from abc import ABC, abstractmethod
import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .exceptions import ExternalCommandFailed

_LOGGER = logging.getLogger(__name__)


__all__ = [
    "Task",
    "Command",
    "run",
]


class Task(ABC):
    """An instance of a async task to execute."""

    @abstractmethod
    async def run(self) -> bytes:
        """Execute the task and return the result."""


def format_path(path: Path) -> str:
    """Format path for debugging."""
    if path.is_absolute():
        cwd = Path.cwd()
        if path.is_relative_to(cwd):
            rel_path = str(path.relative_to(cwd))
            return f"{rel_path} (abs)"
    return str(path)


@dataclass
class Command(Task):
    """An instance of a command to run."""

    cmd: list[str]
    """Array of command line arguments."""

    cwd: Path | None = None
    """Current working directory."""

    env: dict[str, str] | None = None
    """Environment variables for the subprocess, on top of the process environment."""

    @property
    def string(self) -> str:
        """Render the command as a single string."""
        return " ".join([shlex.quote(arg) for arg in self.cmd])

    def __str__(self) -> str:
        """Render as a debug string."""
        cwd: str = ""
        if self.cwd:
            cwd = f"({format_path(self.cwd)}) "
        return f"{cwd}{self.string}"

    async def run(self) -> bytes:
        """Run the command, returning stdout."""
        _LOGGER.debug("Running command: %s", self)
        env = {
            **os.environ,
            **(self.env if self.env else {}),
        }
        try:
            proc = await asyncio.create_subprocess_shell(
                self.string,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=self.cwd,
                env=env,
            )
        except OSError as err:
            raise ExternalCommandFailed(self.string, None, stderr=str(err)) from err
        out, err = await proc.communicate()
        if proc.returncode:
            error = ExternalCommandFailed(
                self.string,
                proc.returncode,
                stdout=out.decode("utf-8", errors="replace"),
                stderr=err.decode("utf-8", errors="replace"),
            )
            _LOGGER.debug("%s", error)
            raise error
        return out


async def run(cmd: Task) -> str:
    """Run the specified command and return stdout."""
    out = await cmd.run()
    return out.decode("utf-8", errors="replace") if out else ""
