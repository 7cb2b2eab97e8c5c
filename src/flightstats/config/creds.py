#!/usr/bin/env python3
from __future__ import annotations
import os
from pathlib import Path
from typing import Optional, Dict, Any

try:
    import tomllib  # py3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # py3.9/3.10

# Order of precedence:
# 1) Environment variables
# 2) config/providers.toml (if present)
# 3) config/providers.example.toml (fallback for non-secret defaults)

ROOT = Path(__file__).resolve().parents[3]
PROVIDERS_TOML = ROOT / "config" / "providers.toml"
EXAMPLE_TOML   = ROOT / "config" / "providers.example.toml"

DEFAULT_BASE_URL = "https://api.flightstats.com/flex/schedules/rest/v1/json"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _read_toml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, "rb") as f:
        return tomllib.load(f)

def _merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    """shallow merge dict b into a"""
    out = dict(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = {**out[k], **v}
        else:
            out[k] = v
    return out

def _node(cfg: Dict[str, Any], path: list[str]) -> Any:
    node: Any = cfg
    for key in path:
        if not isinstance(node, dict) or key not in node:
            return None
        node = node[key]
    return node


class Settings:
    """
    FlightStats credentials and request defaults.

    `cfg` replaces the TOML layers and `env` replaces os.environ; both exist
    so tests can build a Settings without touching the real machine state.
    """
    def __init__(self, cfg: Optional[Dict[str, Any]] = None, env: Optional[Dict[str, str]] = None):
        if cfg is None:
            cfg = _merge(_read_toml(EXAMPLE_TOML), _read_toml(PROVIDERS_TOML))
        if env is None:
            env = dict(os.environ)

        def env_or(cfg_path: list[str], env_name: str, default: Optional[str] = None) -> Optional[str]:
            # Read from env first
            if env.get(env_name):
                return env[env_name]
            # then from toml nested dict
            node = _node(cfg, cfg_path)
            val = node if isinstance(node, str) and node else None
            return val or default

        def _int(default: int, path: list[str], env_name: str) -> int:
            v = env.get(env_name)
            if v and v.isdigit():
                return int(v)
            node = _node(cfg, path)
            if isinstance(node, int) and not isinstance(node, bool):
                return node
            return default

        def _bool(default: bool, path: list[str], env_name: str) -> bool:
            v = (env.get(env_name) or "").strip().lower()
            if v in _TRUE:
                return True
            if v in _FALSE:
                return False
            node = _node(cfg, path)
            if isinstance(node, bool):
                return node
            return default

        # FlightStats (flex schedules API)
        self.FLIGHTSTATS_APP_ID   = env_or(["FlightStats", "APP_ID"], "FLIGHTSTATS_APP_ID")
        self.FLIGHTSTATS_APP_KEY  = env_or(["FlightStats", "APP_KEY"], "FLIGHTSTATS_APP_KEY")
        self.FLIGHTSTATS_BASE_URL = env_or(["FlightStats", "BASE_URL"], "FLIGHTSTATS_BASE_URL", DEFAULT_BASE_URL)

        # Non-secret defaults
        self.REQUEST_TIMEOUT_SEC  = _int(30, ["Defaults", "REQUEST_TIMEOUT_SEC"], "REQUEST_TIMEOUT_SEC")
        # The schedules endpoint has historically been called without TLS verification
        self.VERIFY_SSL           = _bool(False, ["Defaults", "VERIFY_SSL"], "VERIFY_SSL")

    # Convenience: provider-ready headers
    def headers_for(self, provider: str) -> Dict[str, str]:
        p = provider.lower()
        if p == "flightstats":
            return {
                "appId": self.FLIGHTSTATS_APP_ID or "",
                "appKey": self.FLIGHTSTATS_APP_KEY or "",
            }
        return {}

settings = Settings()
