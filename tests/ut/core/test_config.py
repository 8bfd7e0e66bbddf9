"""Config 单元测试"""

from __future__ import annotations

from pathlib import Path

import pytest

from depsync.core.config import Config
from depsync.core.exceptions import ConfigError


class TestConfig:
    def test_defaults_when_file_missing(self, tmp_path: Path) -> None:
        cfg = Config.from_file(str(tmp_path / "none.yml"))
        assert cfg.manager == "npm"
        assert cfg.sync_field == "copyDependencies"
        assert cfg.manifest_path == "package.json"

    def test_from_file_with_extra(self, tmp_path: Path) -> None:
        path = tmp_path / "depsync.yml"
        path.write_text(
            "manager: pnpm\nquery_timeout: 30\nteam: infra\n", encoding="utf-8",
        )
        cfg = Config.from_file(str(path))
        assert cfg.manager == "pnpm"
        assert cfg.query_timeout == 30
        assert cfg.extra == {"team": "infra"}

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "depsync.yml"
        path.write_text("manager: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="配置文件无效"):
            Config.from_file(str(path))

    @pytest.mark.parametrize("value", [0, -1, "10", True])
    def test_invalid_timeout(self, value: object) -> None:
        with pytest.raises(ConfigError, match="query_timeout"):
            Config(query_timeout=value)  # type: ignore[arg-type]

    def test_override_skips_none(self) -> None:
        cfg = Config(manager="pnpm").override(manager=None, manifest_path="x/package.json")
        assert cfg.manager == "pnpm"
        assert cfg.manifest_path == "x/package.json"

    def test_project_dir(self, tmp_path: Path) -> None:
        cfg = Config(manifest_path=str(tmp_path / "sub" / "package.json"))
        assert cfg.project_dir == (tmp_path / "sub").resolve()

    @pytest.mark.parametrize(
        ("name", "value"),
        [("manifest_path", None), ("manager", 3), ("sync_field", ""), ("manifest_path", "")],
    )
    def test_invalid_string_field(self, name: str, value: object) -> None:
        with pytest.raises(ConfigError, match=name):
            Config(**{name: value})

    def test_null_manifest_path_in_file(self, tmp_path: Path) -> None:
        path = tmp_path / "depsync.yml"
        path.write_text("manifest_path: null\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="manifest_path"):
            Config.from_file(str(path))
