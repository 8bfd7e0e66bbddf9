"""CLI 系统测试: 通过 CliRunner 调用命令，注入假执行器"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from depsync import __version__
from depsync.cli import cmd_sync, main
from depsync.services.sync_service import SyncService


@pytest.fixture()
def runner(monkeypatch: pytest.MonkeyPatch, fake_executor) -> CliRunner:
    monkeypatch.setattr(
        cmd_sync, "SyncService", lambda cfg: SyncService(cfg, executor=fake_executor),
    )
    return CliRunner()


@pytest.fixture()
def no_config(tmp_path: Path) -> list[str]:
    return ["-c", str(tmp_path / "absent.yml")]


def _package(sync: dict) -> dict:
    return {
        "name": "proj",
        "dependencies": {"a": "^1.0.0"},
        "devDependencies": {"b": "^1.0.0"},
        "copyDependencies": sync,
    }


class TestInstall:
    def test_success_prints_command(
        self, runner, fake_executor, make_package, no_config,
    ) -> None:
        path = make_package(_package({"a": ["lodash"]}))
        fake_executor.on_tree("a", {"lodash": "4.17.21"})

        result = runner.invoke(main, ["install", "-p", str(path), *no_config])

        assert result.exit_code == 0, result.output
        assert "npm install lodash@4.17.21" in result.output
        assert "copyDependencies 已全部安装" in result.output
        assert fake_executor.install_calls == [("npm", "install", "lodash@4.17.21")]

    def test_pnpm_flag(self, runner, fake_executor, make_package, no_config) -> None:
        path = make_package(_package({"b": ["y"]}))
        fake_executor.on_tree("b", {"y": "2.0.0"}, manager="pnpm")

        result = runner.invoke(main, ["install", "-p", str(path), "--pnpm", *no_config])

        assert result.exit_code == 0, result.output
        assert "pnpm install y@2.0.0 -D" in result.output

    def test_dry_run(self, runner, fake_executor, make_package, no_config) -> None:
        path = make_package(_package({"a": ["x"]}))
        fake_executor.on_tree("a", {"x": "1.0.0"})

        result = runner.invoke(
            main, ["install", "-p", str(path), "--dry-run", *no_config],
        )

        assert result.exit_code == 0, result.output
        assert "dry-run" in result.output
        assert fake_executor.install_calls == []

    def test_duplicate_exits_nonzero(
        self, runner, fake_executor, make_package, no_config,
    ) -> None:
        path = make_package(_package({"a": ["x"], "b": ["x"]}))

        result = runner.invoke(main, ["install", "-p", str(path), *no_config])

        assert result.exit_code == 1
        assert "'x': ['a', 'b']" in result.output
        assert fake_executor.calls == []

    def test_missing_manifest(self, runner, tmp_path: Path, no_config) -> None:
        result = runner.invoke(
            main, ["install", "-p", str(tmp_path / "nope.json"), *no_config],
        )
        assert result.exit_code == 1
        assert "packagePath" in result.output

    def test_install_failure(self, runner, fake_executor, make_package, no_config) -> None:
        path = make_package(_package({"a": ["x"]}))
        fake_executor.on_tree("a", {"x": "1.0.0"})
        fake_executor.on(["npm", "install", "x@1.0.0"], stderr="EACCES", returncode=1)

        result = runner.invoke(main, ["install", "-p", str(path), *no_config])

        assert result.exit_code == 1
        assert "cmd: npm install x@1.0.0" in result.output


class TestPlan:
    def test_json_output(self, runner, fake_executor, make_package, no_config) -> None:
        path = make_package(_package({"a": ["x"], "b": ["y"]}))
        fake_executor.on_tree("a", {"x": "1.0.0"})
        fake_executor.on_tree("b", {"y": "2.0.0"})

        result = runner.invoke(
            main,
            ["--log-level", "ERROR", "plan", "-p", str(path), "--json", *no_config],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["plan"] == {"production": ["x@1.0.0"], "development": ["y@2.0.0"]}
        assert data["install_cmd"] == "npm install x@1.0.0 && npm install y@2.0.0 -D"
        assert fake_executor.install_calls == []

    def test_unresolved(self, runner, fake_executor, make_package, no_config) -> None:
        path = make_package(_package({"a": ["y"]}))
        fake_executor.on_tree("a", {"x": "1.0.0"})

        result = runner.invoke(main, ["plan", "-p", str(path), *no_config])

        assert result.exit_code == 1
        assert "'a': ['y']" in result.output


class TestCheck:
    def test_valid(self, runner, fake_executor, make_package, no_config) -> None:
        path = make_package(_package({"a": ["x"], "b": ["y", "z"]}))

        result = runner.invoke(main, ["check", "-p", str(path), *no_config])

        assert result.exit_code == 0, result.output
        assert "同步声明校验通过" in result.output
        assert "development" in result.output
        assert fake_executor.calls == []

    def test_empty_declaration(self, runner, make_package, no_config) -> None:
        path = make_package(_package({}))
        result = runner.invoke(main, ["check", "-p", str(path), *no_config])
        assert result.exit_code == 1
        assert "为空" in result.output

    def test_config_file_sync_field(
        self, runner, make_package, tmp_path: Path,
    ) -> None:
        data = _package({})
        data["shadowDeps"] = {"a": ["x"]}
        path = make_package(data)
        cfg = tmp_path / "depsync.yml"
        cfg.write_text("sync_field: shadowDeps\n", encoding="utf-8")

        result = runner.invoke(main, ["check", "-p", str(path), "-c", str(cfg)])

        assert result.exit_code == 0, result.output

    @pytest.mark.parametrize("line", ["manifest_path: null", "manager: 3"])
    def test_bad_config_value_is_reported(
        self, runner, make_package, tmp_path: Path, line: str,
    ) -> None:
        path = make_package(_package({"a": ["x"]}))
        cfg = tmp_path / "depsync.yml"
        cfg.write_text(line + "\n", encoding="utf-8")

        result = runner.invoke(main, ["check", "-p", str(path), "-c", str(cfg)])

        assert result.exit_code == 1
        assert "必须是非空字符串" in result.output
        assert isinstance(result.exception, SystemExit)


def test_version() -> None:
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output
