# vine_ui/persistence.py
from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Dict, Optional

from .domain import AppConfig
from .errors import ConfigError


logger = logging.getLogger("vine_ui.persistence")

CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_DIR = os.path.join("~", ".vine_ui")

# Environment overrides (applied on load; save_config writes the file values back instead)
ENV_HOME = "VINE_UI_HOME"
ENV_GEO_URL = "VINE_UI_GEO_URL"
ENV_GALLERY_DIR = "VINE_UI_GALLERY_DIR"
ENV_LOG_LEVEL = "VINE_UI_LOG_LEVEL"


# -----------------------------
# Atomic file helpers
# -----------------------------

def _atomic_write_text(path: str, text: str, encoding: str = "utf-8") -> None:
    d = os.path.dirname(path)
    os.makedirs(d, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=".tmp_", dir=d)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


def _atomic_write_json(path: str, payload: Dict) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    _atomic_write_text(path, text + "\n")


def _read_json(path: str) -> Dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


# -----------------------------
# App config (<config_dir>/config.json)
# -----------------------------

def default_config_dir() -> str:
    return os.path.expanduser(os.environ.get(ENV_HOME) or DEFAULT_CONFIG_DIR)


def config_path(config_dir: str) -> str:
    return os.path.join(config_dir, CONFIG_FILENAME)


def _fill_defaults(cfg: AppConfig) -> AppConfig:
    if not cfg.cache_dir:
        cfg.cache_dir = os.path.join(cfg.config_dir, "cache")
    if not cfg.gallery_dir:
        cfg.gallery_dir = os.path.join(os.path.expanduser("~"), "Videos", "diVine")
    return cfg


def _override(cfg: AppConfig, name: str, value: str) -> None:
    cfg.env_shadowed.setdefault(name, getattr(cfg, name))
    setattr(cfg, name, value)


def _apply_env(cfg: AppConfig) -> AppConfig:
    if os.environ.get(ENV_GEO_URL):
        _override(cfg, "geo_check_url", os.environ[ENV_GEO_URL])
    if os.environ.get(ENV_GALLERY_DIR):
        _override(cfg, "gallery_dir", os.path.expanduser(os.environ[ENV_GALLERY_DIR]))
    if os.environ.get(ENV_LOG_LEVEL):
        _override(cfg, "log_level", os.environ[ENV_LOG_LEVEL].upper())
    return cfg


def load_config(config_dir: Optional[str] = None) -> AppConfig:
    """
    Loads <config_dir>/config.json.

    Missing or unreadable files yield defaults; environment overrides apply either way.
    """
    config_dir = config_dir or default_config_dir()
    path = config_path(config_dir)
    cfg = AppConfig(config_dir=config_dir)
    if os.path.exists(path):
        try:
            data = _read_json(path)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable config %s: %s", path, e)
            data = None
        if isinstance(data, dict):
            cfg = AppConfig.from_dict(config_dir, data)
        elif data is not None:
            logger.warning("Ignoring config %s: expected a JSON object, got %s", path, type(data).__name__)
    return _apply_env(_fill_defaults(cfg))


def save_config(cfg: AppConfig) -> str:
    """
    Saves config to <config_dir>/config.json atomically. Returns the written path.
    """
    if not cfg.config_dir:
        raise ConfigError("AppConfig.config_dir is required")
    path = config_path(cfg.config_dir)
    try:
        payload = cfg.to_dict()
        payload.update(cfg.env_shadowed)
        _atomic_write_json(path, payload)
    except OSError as e:
        raise ConfigError(f"Could not write {path}: {e}") from e
    return path
