"""Unified config for report, evolution tracker, launcher and probes.

Defaults: loaded from config/config.yaml.example (single source of truth, no code-level defaults).
User config (config/config.yaml or DEVTOOLS_CONFIG) is deep-merged over the example.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
CONFIG_ENV_VAR = "DEVTOOLS_CONFIG"

# Lazy-loaded example config (single source of truth for defaults)
_EXAMPLE_CONFIG: Optional[Dict[str, Any]] = None


def _load_example_config() -> Dict[str, Any]:
    """Load config.yaml.example as defaults. No code-level defaults."""
    global _EXAMPLE_CONFIG
    if _EXAMPLE_CONFIG is None:
        path = PROJECT_ROOT / "config" / "config.yaml.example"
        with open(path, encoding="utf-8") as f:
            _EXAMPLE_CONFIG = yaml.safe_load(f) or {}
    return _EXAMPLE_CONFIG


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge override into base. Override values take precedence."""
    out = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _merged_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Merge config with example so missing keys come from config file."""
    return _deep_merge(_load_example_config(), cfg)


def _section(cfg: Dict[str, Any], section: str) -> Dict[str, Any]:
    """Get a top-level section as dict. Returns {} if not found or not a mapping."""
    s = cfg.get(section)
    return dict(s) if isinstance(s, dict) else {}


def read_config(config_path: Optional[str] = None) -> Tuple[dict, str]:
    """Load YAML config merged over the example. Returns (config, resolved_path).

    Path order: explicit argument, DEVTOOLS_CONFIG, config/config.yaml; falls back to the example.
    """
    config_path = config_path or os.environ.get(CONFIG_ENV_VAR) or str(PROJECT_ROOT / "config" / "config.yaml")
    if not Path(config_path).exists():
        config_path = str(PROJECT_ROOT / "config" / "config.yaml.example")
    config_path = str(Path(config_path).resolve())
    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}
    return _merged_config(config), config_path


def get_report_config(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return usage report config (evolution_log, output, title)."""
    s = _section(_merged_config(config or {}), "report")
    return {
        "evolution_log": s.get("evolution_log"),
        "output": s.get("output"),
        "title": s.get("title"),
    }


def get_evolution_config(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return evolution tracker config. expected_files normalized to [(path, change), ...]."""
    s = _section(_merged_config(config or {}), "evolution")
    expected: List[Tuple[str, str]] = []
    for item in s.get("expected_files") or []:
        if isinstance(item, dict) and item.get("path"):
            expected.append((str(item["path"]), str(item.get("change") or "")))
    return {
        "config_dir": s.get("config_dir"),
        "log_file": s.get("log_file"),
        "report_file": s.get("report_file"),
        "details_limit": int(s.get("details_limit") or 10),
        "tracked_files": list(s.get("tracked_files") or []),
        "mounts": dict(s.get("mounts") or {}),
        "expected_files": expected,
    }


def get_launcher_config(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return launcher config. command as argv list; cwd absolute (relative paths from project root)."""
    s = _section(_merged_config(config or {}), "launcher")
    command = s.get("command") or []
    if isinstance(command, str):
        command = command.split()
    cwd = s.get("cwd")
    if cwd and not os.path.isabs(cwd):
        cwd = str(PROJECT_ROOT / cwd)
    return {"command": [str(c) for c in command], "cwd": cwd}


def get_probe_config(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return probe config. anon_key is read from the env var named by anon_key_env."""
    s = _section(_merged_config(config or {}), "probes")
    key_env = s.get("anon_key_env") or ""
    out = dict(s)
    out["base_url"] = (s.get("base_url") or "").rstrip("/")
    out["anon_key"] = os.environ.get(key_env, "") if key_env else ""
    return out
