# File: src/triunity/config/service_config.py

import copy
import os
import yaml
from typing import Any, Callable, Dict, Optional, Tuple

from ..exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = "config/triunity.yaml"
CONFIG_PATH_ENV = "TRIUNITY_CONFIG"

DEFAULT_CONFIG: Dict[str, Any] = {
    "server": {
        "host": "0.0.0.0",
        "port": 8000
    },
    "telemetry": {
        "profile": "enhanced",
        "seed": None,
        "max_listed_validators": 20
    },
    "api": {
        "dev_mode": False,
        "rate_limit_requests": 1000,
        "rate_limit_period": 60
    },
    "node": {
        "id": "triunity-node-01",
        "region": "eu-west-1"
    },
    "monitoring": {
        "metrics_port": 0,
        "log_dir": None,
        "log_level": "INFO"
    }
}


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _parse_seed(value: str) -> Optional[int]:
    if value.strip().lower() in ("", "none", "null"):
        return None
    return int(value)


ENV_OVERRIDES: Dict[str, Tuple[str, Callable[[str], Any]]] = {
    "TRIUNITY_DEV_MODE": ("api.dev_mode", _parse_bool),
    "TRIUNITY_PROFILE": ("telemetry.profile", str),
    "TRIUNITY_SEED": ("telemetry.seed", _parse_seed),
    "TRIUNITY_LOG_LEVEL": ("monitoring.log_level", str.upper),
}

# Integer settings and their inclusive bounds; None leaves a side open
INTEGER_BOUNDS: Dict[str, Tuple[int, Optional[int]]] = {
    "server.port": (1, 65535),
    "telemetry.max_listed_validators": (0, None),
    "api.rate_limit_requests": (1, None),
    "api.rate_limit_period": (1, None),
    "monitoring.metrics_port": (0, 65535),
}


def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ServiceConfig:
    def __init__(self, config_path: Optional[str] = None, environ: Optional[Dict[str, str]] = None):
        self.config_path = config_path or os.environ.get(CONFIG_PATH_ENV, DEFAULT_CONFIG_PATH)
        self.config = self._load_config()
        self._apply_env_overrides(os.environ if environ is None else environ)
        self._validate()

    @classmethod
    def from_dict(cls, values: Dict[str, Any], environ: Optional[Dict[str, str]] = None) -> "ServiceConfig":
        """Build an in-memory configuration that is never written to disk."""
        instance = cls.__new__(cls)
        instance.config_path = None
        instance.config = _merge(DEFAULT_CONFIG, values)
        instance._apply_env_overrides(environ or {})
        instance._validate()
        return instance

    def _load_config(self) -> Dict[str, Any]:
        if not os.path.exists(self.config_path):
            return self._create_default_config()

        with open(self.config_path, 'r') as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"{self.config_path} must contain a mapping")
        return _merge(DEFAULT_CONFIG, loaded)

    def _create_default_config(self) -> Dict[str, Any]:
        config = copy.deepcopy(DEFAULT_CONFIG)

        directory = os.path.dirname(self.config_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.config_path, 'w') as f:
            yaml.safe_dump(config, f, default_flow_style=False)

        return config

    def _apply_env_overrides(self, environ) -> None:
        for variable, (key, parse) in ENV_OVERRIDES.items():
            raw = environ.get(variable)
            if raw is None:
                continue
            try:
                value = parse(raw)
            except ValueError as e:
                raise ConfigurationError(f"Invalid value for {variable}: {e}") from e
            self._set(key, value)

    def _validate(self) -> None:
        for key, (low, high) in INTEGER_BOUNDS.items():
            value = self.get(key)
            # bool is an int subclass
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigurationError(f"{key} must be an integer, got {value!r}")
            if value < low or (high is not None and value > high):
                bound = f"between {low} and {high}" if high is not None else f"at least {low}"
                raise ConfigurationError(f"{key} must be {bound}, got {value}")

    def _set(self, key: str, value: Any) -> None:
        keys = key.split('.')
        config = self.config
        for k in keys[:-1]:
            config = config.setdefault(k, {})
        config[keys[-1]] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        try:
            keys = key.split('.')
            value = self.config
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def update(self, key: str, value: Any):
        """Update configuration value and persist it when file-backed."""
        self._set(key, value)
        self._validate()

        if self.config_path:
            with open(self.config_path, 'w') as f:
                yaml.safe_dump(self.config, f, default_flow_style=False)

    @property
    def dev_mode(self) -> bool:
        return bool(self.get("api.dev_mode", False))

    @property
    def profile_name(self) -> str:
        return str(self.get("telemetry.profile", "enhanced"))
