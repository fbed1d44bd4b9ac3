"""Fixtures for gae-deploy tests."""

from collections.abc import Callable
from pathlib import Path
import stat

import pytest

from gae_deploy.gcloud import Gcloud

APP_YAML = """\
runtime: nodejs18
env_variables:
  A: 1
  B: 2
handlers:
  - url: /.*
    script: auto
"""

# Records each invocation on its own line and exits non-zero when the
# arguments start with $GCLOUD_FAIL.
GCLOUD_STUB = """\
#!/bin/sh
echo "$*" >> "$GCLOUD_LOG"
if [ -n "$GCLOUD_FAIL" ]; then
  case "$*" in
    "$GCLOUD_FAIL"*)
      echo "stub failure: $*" >&2
      exit 1
      ;;
  esac
fi
exit 0
"""


@pytest.fixture(name="project_dir")
def project_dir_fixture(tmp_path: Path) -> Path:
    """A project directory with an app.yml and a service account key file."""
    project_dir = tmp_path / "project"
    project_dir.mkdir()
    (project_dir / "app.yml").write_text(APP_YAML)
    (project_dir / "key.json").write_text("{}")
    return project_dir


@pytest.fixture(name="gcloud_log")
def gcloud_log_fixture(tmp_path: Path) -> Path:
    """File where the fake gcloud records its invocations."""
    return tmp_path / "gcloud.log"


@pytest.fixture(name="gcloud_fail")
def gcloud_fail_fixture() -> str:
    """Argument prefix that makes the fake gcloud fail, empty for never."""
    return ""


@pytest.fixture(name="invocations")
def invocations_fixture(gcloud_log: Path) -> Callable[[], list[str]]:
    """Return the argument lines recorded by the fake gcloud."""

    def read() -> list[str]:
        if not gcloud_log.exists():
            return []
        return gcloud_log.read_text().splitlines()

    return read


@pytest.fixture(name="gcloud_bin")
def gcloud_bin_fixture(tmp_path: Path) -> Path:
    """An executable fake gcloud."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    gcloud_bin = bin_dir / "gcloud"
    gcloud_bin.write_text(GCLOUD_STUB)
    gcloud_bin.chmod(gcloud_bin.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP)
    return gcloud_bin


@pytest.fixture(name="gcloud")
def gcloud_fixture(
    project_dir: Path, gcloud_bin: Path, gcloud_log: Path, gcloud_fail: str
) -> Gcloud:
    """A Gcloud that runs the fake gcloud in the project directory."""
    return Gcloud(
        bin=str(gcloud_bin),
        cwd=project_dir,
        env={"GCLOUD_LOG": str(gcloud_log), "GCLOUD_FAIL": gcloud_fail},
    )
