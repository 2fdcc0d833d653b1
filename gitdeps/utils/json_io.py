"""JSON 文档读写工具

依赖清单 (Packages.json) 与包元数据 (package.json) 都是 JSON 对象。
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from gitdeps.utils.fs import atomic_write

logger = logging.getLogger(__name__)


def load_json_object(path: str | Path) -> dict[str, Any]:
    """读取 JSON 文件，要求顶层为对象

    异常:
        FileNotFoundError: 文件不存在
        ValueError: JSON 格式错误或顶层不是对象（json.JSONDecodeError 是其子类）
    """
    p = Path(path)
    with open(p, encoding="utf-8-sig") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{p} 顶层不是 JSON 对象 (实际类型: {type(data).__name__})")
    return data


def save_json(path: str | Path, data: Any) -> None:
    """原子写入 JSON 文件（缩进、保持键顺序、允许 Unicode）"""
    content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    atomic_write(Path(path), content)
