"""Tests for command library."""

from pathlib import Path

import pytest

from gae_deploy.command import Command, run
from gae_deploy.exceptions import CommandException, ExternalCommandFailed


async def test_command() -> None:
    """Test stdout parsing of a command."""
    result = await run(Command(["echo", "Hello"]))
    assert result == "Hello\n"


async def test_command_cwd(tmp_path: Path) -> None:
    """Test a command runs in the requested directory."""
    result = await run(Command(["pwd"], cwd=tmp_path))
    assert Path(result.strip()).resolve() == tmp_path.resolve()


async def test_command_env() -> None:
    """Test extra environment variables are passed to the command."""
    result = await run(
        Command(["printenv", "GAE_DEPLOY_TEST"], env={"GAE_DEPLOY_TEST": "value"})
    )
    assert result == "value\n"


async def test_command_quoting() -> None:
    """Test arguments with spaces are passed as a single argument."""
    result = await run(Command(["echo", "a  b"]))
    assert result == "a  b\n"


async def test_failed_command() -> None:
    """Test a failing command."""
    with pytest.raises(CommandException, match="return code 1"):
        await run(Command(["/bin/false"]))


async def test_failed_command_output() -> None:
    """Test the exit code and output are kept on the exception."""
    with pytest.raises(ExternalCommandFailed) as exc_info:
        await run(Command(["sh", "-c", "echo out; echo err >&2; exit 3"]))
    assert exc_info.value.returncode == 3
    assert exc_info.value.stdout == "out\n"
    assert exc_info.value.stderr == "err\n"
    assert "out" in str(exc_info.value)
    assert "err" in str(exc_info.value)


async def test_missing_binary(tmp_path: Path) -> None:
    """Test a binary that does not exist is reported as a failed command."""
    with pytest.raises(ExternalCommandFailed) as exc_info:
        await run(Command([str(tmp_path / "does-not-exist")]))
    assert exc_info.value.returncode == 127


async def test_missing_cwd(tmp_path: Path) -> None:
    """Test a command that cannot be started."""
    with pytest.raises(ExternalCommandFailed, match="failed to start") as exc_info:
        await run(Command(["echo", "Hello"], cwd=tmp_path / "missing"))
    assert exc_info.value.returncode is None
    assert isinstance(exc_info.value.__cause__, OSError)


async def test_failed_command_invalid_utf8() -> None:
    """Test a failing command that writes bytes that are not valid UTF-8."""
    with pytest.raises(ExternalCommandFailed) as exc_info:
        await run(Command(["sh", "-c", "printf '\\377' >&2; exit 1"]))
    assert exc_info.value.returncode == 1
    assert exc_info.value.stderr == "\ufffd"


async def test_command_invalid_utf8() -> None:
    """Test a successful command that writes bytes that are not valid UTF-8."""
    result = await run(Command(["sh", "-c", "printf 'ok\\377'"]))
    assert result == "ok\ufffd"
