from __future__ import annotations

# tag_registry/config.py
import os
from dataclasses import dataclass
from typing import Any

import yaml

# 配置解析顺序（每个键独立）：
# 1) 显式传入的 overrides（命令行参数，最高优先级）
# 2) 环境变量 TAG_REGISTRY_*
# 3) config.yaml（路径来自参数或 TAG_REGISTRY_CONFIG）
# 4) DEFAULTS
DEFAULTS = {
    "host": "0.0.0.0",
    "port": 9090,
    "data_dir": "./data",
    "prefix": "api",
}

ENV_KEYS = {
    "host": "TAG_REGISTRY_HOST",
    "port": "TAG_REGISTRY_PORT",
    "data_dir": "TAG_REGISTRY_DATA_DIR",
    "prefix": "TAG_REGISTRY_PREFIX",
}


@dataclass(frozen=True)
class Settings:
    host: str = DEFAULTS["host"]
    port: int = DEFAULTS["port"]
    data_dir: str = DEFAULTS["data_dir"]
    prefix: str = DEFAULTS["prefix"]


def normalize_prefix(prefix: str) -> str:
    """Strip surrounding whitespace and slashes: ' /v1/api/ ' -> 'v1/api'."""
    return (prefix or "").strip().strip("/").strip()


def _read_config_yaml(path: str | None) -> dict:
    cfg_path = path or os.environ.get("TAG_REGISTRY_CONFIG") or "config.yaml"
    if not os.path.exists(cfg_path):
        if path:
            raise FileNotFoundError(f"config file not found: {cfg_path}")
        return {}
    with open(cfg_path, "r", encoding="utf-8") as f:
        try:
            cfg = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"cannot parse config file {cfg_path}: {e}") from e
    if not isinstance(cfg, dict):
        raise ValueError(f"config file must hold a mapping: {cfg_path}")
    return {k: cfg[k] for k in DEFAULTS if cfg.get(k) is not None}


def _to_port(value: Any) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"invalid port: {value!r}")
    if not 0 < port < 65536:
        raise ValueError(f"port out of range: {port}")
    return port


def load_settings(config_path: str | None = None, **overrides: Any) -> Settings:
    file_cfg = _read_config_yaml(config_path)
    values: dict[str, Any] = {}
    for key, default in DEFAULTS.items():
        override = overrides.get(key)
        env_val = os.environ.get(ENV_KEYS[key])
        if override is not None:
            values[key] = override
        elif env_val:
            values[key] = env_val
        elif key in file_cfg:
            values[key] = file_cfg[key]
        else:
            values[key] = default

    prefix = normalize_prefix(str(values["prefix"]))
    if not prefix:
        raise ValueError("api prefix must not be empty")
    return Settings(
        host=str(values["host"]),
        port=_to_port(values["port"]),
        data_dir=str(values["data_dir"]),
        prefix=prefix,
    )
