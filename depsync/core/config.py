"""集中配置管理

运行期配置只来自命令行和可选的 YAML 文件，
以显式的 Config 对象传给服务层，不使用全局单例。
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

from depsync.core.backends import DEFAULT_BACKEND
from depsync.core.exceptions import ConfigError
from depsync.core.models import DEFAULT_SYNC_FIELD
from depsync.utils.file_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "depsync.yml"


@dataclass
class Config:
    """depsync 运行配置"""

    # 清单
    manifest_path: str = "package.json"
    sync_field: str = DEFAULT_SYNC_FIELD

    # 包管理器后端: npm / pnpm
    manager: str = DEFAULT_BACKEND

    # 执行
    max_workers: int = 8
    query_timeout: int = 120
    install_timeout: int = 900

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in ("max_workers", "query_timeout", "install_timeout"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ConfigError(f"配置项 {name} 必须是正整数: {value!r}")
        for name in ("manifest_path", "sync_field", "manager"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ConfigError(f"配置项 {name} 必须是非空字符串: {value!r}")

    @property
    def project_dir(self) -> Path:
        """包管理器命令的工作目录 = 清单文件所在目录"""
        return Path(self.manifest_path).resolve().parent

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_FILE) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        try:
            data = load_yaml(path)
        except (yaml.YAMLError, ValueError, OSError) as e:
            raise ConfigError(f"配置文件无效: {path} - {e}") from e
        if not data:
            return cls()
        known = {f.name for f in fields(cls)} - {"extra"}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        logger.info("配置已加载: %s", path)
        return cfg

    def override(self, **changes: Any) -> Config:
        """返回覆盖了非 None 字段的新配置（命令行优先于文件）"""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def to_dict(self) -> dict:
        return asdict(self)
