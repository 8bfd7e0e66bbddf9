"""清单/配置文件统一读取工具

集中管理 JSON 清单与 YAML 配置的反序列化。
统一 encoding="utf-8"、大小限制、空值保护。
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# 文件最大大小限制 (10MB)，防止异常大文件导致内存耗尽
MAX_FILE_SIZE = 10 * 1024 * 1024


def _read_text(p: Path) -> str:
    file_size = p.stat().st_size
    if file_size > MAX_FILE_SIZE:
        raise ValueError(
            f"文件过大: {p} ({file_size} 字节), "
            f"超过限制 {MAX_FILE_SIZE} 字节"
        )
    return p.read_text(encoding="utf-8")


def load_json(path: str | Path) -> Any:
    """读取 JSON 文件

    与 load_yaml 不同，文件不存在时直接抛出 FileNotFoundError，
    由调用方决定如何包装。

    异常:
        FileNotFoundError: 文件不存在
        json.JSONDecodeError: JSON 格式错误
        ValueError: 文件过大（超过 MAX_FILE_SIZE）
        OSError: 其他 IO 错误
    """
    p = Path(path)
    try:
        return json.loads(_read_text(p))
    except json.JSONDecodeError as e:
        logger.error("解析 JSON 文件失败: %s, 错误: %s", path, e)
        raise


def load_yaml(path: str | Path) -> dict[str, Any]:
    """安全读取 YAML 文件

    返回:
        dict: 解析后的字典。文件不存在、为空、或内容不是字典类型时返回空字典

    异常:
        yaml.YAMLError: YAML 格式错误
        ValueError: 文件过大
        OSError: IO 错误

    示例:
        >>> cfg = load_yaml("depsync.yml")
        >>> manager = cfg.get("manager", "npm")
    """
    p = Path(path)
    if not p.exists():
        return {}

    try:
        result = yaml.safe_load(_read_text(p))
    except yaml.YAMLError as e:
        logger.error("解析 YAML 文件失败: %s, 错误: %s", path, e)
        raise

    if result is None:
        return {}
    if not isinstance(result, dict):
        logger.warning(
            "%s 内容不是字典类型 (实际类型: %s)，返回空字典",
            path, type(result).__name__,
        )
        return {}
    return result
