# File: src/triunity/api/envelope.py
import math
from typing import Any, Dict, Optional

from .. import __version__
from ..config.service_config import ServiceConfig
from ..telemetry.clock import RandomSource, iso_timestamp
from ..telemetry.profiles import Profile
from ..utils.config import Config


def build_metadata(now_ms: int, rng: RandomSource, profile: Profile,
                   config: ServiceConfig) -> Dict[str, Any]:
    metadata: Dict[str, Any] = {
        "api_version": profile.api_version,
        "profile": profile.name,
        "response_time_ms": round(rng.random() * Config.RESPONSE_TIME_SPREAD_MS + Config.MIN_RESPONSE_TIME_MS),
        "cache_status": "HIT" if rng.random() > Config.CACHE_HIT_THRESHOLD else "MISS",
    }

    if profile.extended_metadata:
        limit = int(config.get("api.rate_limit_requests", 1000))
        period = int(config.get("api.rate_limit_period", 60))
        now_s = now_ms / 1000
        metadata["rate_limit"] = {
            "limit": limit,
            "remaining": rng.randint(max(0, int(limit * 0.8)), max(0, limit - 1)),
            "reset": (math.floor(now_s / period) + 1) * period,
        }
        metadata["node"] = {
            "id": config.get("node.id"),
            "region": config.get("node.region"),
            "version": __version__,
        }

    return metadata


def success_envelope(data: Dict[str, Any], now_ms: int, metadata: Dict[str, Any],
                     **extra: Any) -> Dict[str, Any]:
    envelope = {
        "success": True,
        "timestamp": iso_timestamp(now_ms),
    }
    envelope.update(extra)
    envelope["data"] = data
    envelope["metadata"] = metadata
    return envelope


def error_envelope(code: str, message: str, now_ms: int,
                   fields: Optional[Dict[str, Any]] = None, **extra: Any) -> Dict[str, Any]:
    """Error body; ``fields`` extend the error object, ``extra`` the envelope"""
    error: Dict[str, Any] = {"code": code, "message": message}
    if fields:
        error.update(fields)
    envelope = {
        "success": False,
        "timestamp": iso_timestamp(now_ms),
        "error": error,
    }
    envelope.update(extra)
    return envelope


def envelope_extras(operation: str, data: Dict[str, Any], profile: Profile) -> Dict[str, Any]:
    """Top-level envelope fields beyond data/metadata"""
    extras: Dict[str, Any] = {}
    if operation == "status":
        extras["status"] = data["status"]
        extras["network"] = data["network"]
    elif profile.network_name:
        extras["network"] = profile.network_name
    return extras
