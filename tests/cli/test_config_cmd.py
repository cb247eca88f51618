"""CLI tests for the `config` command group."""

from __future__ import annotations

from click.testing import CliRunner

from rdsjump.cli import main
from rdsjump.config import load_config, save_config


def test_add_and_show(tmp_path) -> None:
    runner = CliRunner()
    assert runner.invoke(main, ["config", "add-region", "us-east-1"]).exit_code == 0
    assert runner.invoke(main, ["config", "add-env", "pro", "bastion.prod"]).exit_code == 0
    result = runner.invoke(
        main, ["config", "add-rds", "pro-app", "app", "hunter2", "--database", "main"]
    )
    assert result.exit_code == 0
    assert "Saved RDS credentials for 'pro-app'" in result.output

    shown = runner.invoke(main, ["config", "show"])
    assert shown.exit_code == 0
    assert "regions: us-east-1" in shown.output
    assert "pro* -> bastion.prod" in shown.output
    assert "password=****" in shown.output
    assert "hunter2" not in shown.output

    config = load_config()
    assert config.rds[0].database == "main"


def test_add_region_is_idempotent() -> None:
    runner = CliRunner()
    runner.invoke(main, ["config", "add-region", "eu-west-1"])
    result = runner.invoke(main, ["config", "add-region", "eu-west-1"])
    assert "already configured" in result.output
    assert load_config().regions == ["eu-west-1"]


def test_add_env_replaces_in_place(configuration) -> None:
    save_config(configuration)
    CliRunner().invoke(main, ["config", "add-env", "app-prod", "new-bastion"])
    envs = load_config().environments
    assert [(e.prefix, e.jumphost) for e in envs] == [
        ("app-prod", "new-bastion"),
        ("app", "bastion.staging.example.com"),
    ]


def test_remove_rds(configuration) -> None:
    save_config(configuration)
    result = CliRunner().invoke(main, ["config", "remove-rds", "app"])
    assert result.exit_code == 0
    assert [r.prefix for r in load_config().rds] == ["app-prod"]


def test_remove_missing_env(configuration) -> None:
    save_config(configuration)
    result = CliRunner().invoke(main, ["config", "remove-env", "nope"])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_show_broken_file(tmp_path) -> None:
    (tmp_path / "config.toml").write_text("[aws\n")
    result = CliRunner().invoke(main, ["config", "show"])
    assert result.exit_code == 1
    assert "error[R0601]" in result.output
