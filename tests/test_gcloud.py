"""Tests for the gcloud command builders."""

from pathlib import Path

from gae_deploy.gcloud import Gcloud


def test_auth_activate_service_account() -> None:
    """Test the authentication command."""
    cmd = Gcloud().auth_activate_service_account("key.json")
    assert cmd.cmd == [
        "gcloud",
        "auth",
        "activate-service-account",
        "--key-file",
        "key.json",
    ]


def test_config_set_project() -> None:
    """Test the project selection command."""
    cmd = Gcloud().config_set_project("my-project")
    assert cmd.cmd == ["gcloud", "config", "set", "project", "my-project"]


def test_config_set_missing_project() -> None:
    """Test a missing project is passed through to gcloud."""
    cmd = Gcloud().config_set_project(None)
    assert cmd.cmd == ["gcloud", "config", "set", "project", ""]
    assert cmd.string == "gcloud config set project ''"


def test_app_deploy() -> None:
    """Test the deploy command promotes the new version."""
    cmd = Gcloud().app_deploy("./app.yml")
    assert cmd.string == (
        "gcloud app deploy ./app.yml --quiet --stop-previous-version --promote"
    )


def test_app_deploy_version() -> None:
    """Test the deploy command with an explicit version."""
    cmd = Gcloud().app_deploy("./app.yml", version="v2")
    assert cmd.cmd[-2:] == ["--version", "v2"]


def test_app_deploy_cron() -> None:
    """Test the cron deploy command."""
    cmd = Gcloud().app_deploy_cron("cron.yaml")
    assert cmd.string == "gcloud app deploy cron.yaml --quiet"


def test_command_options(tmp_path: Path) -> None:
    """Test the binary, directory and environment are applied to commands."""
    gcloud = Gcloud(
        bin="/opt/gcloud", cwd=tmp_path, env={"CLOUDSDK_CORE_DISABLE_PROMPTS": "1"}
    )
    cmd = gcloud.app_deploy_cron("cron.yaml")
    assert cmd.cmd[0] == "/opt/gcloud"
    assert cmd.cwd == tmp_path
    assert cmd.env == {"CLOUDSDK_CORE_DISABLE_PROMPTS": "1"}
