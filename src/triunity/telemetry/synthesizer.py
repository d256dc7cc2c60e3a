# src/triunity/telemetry/synthesizer.py
"""Metric synthesis.

All values are derived from the wall clock and a handful of uniform random
draws: three overlapping sine cycles plus noise produce a single
``variation`` scalar, and every metric is a clamped linear function of it.
"""
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Union

from ..utils.config import Config
from .clock import RandomSource, utc_datetime
from .profiles import MetricSpec, Profile, VariationParams

logger = logging.getLogger(__name__)

EMERGENCY = "Emergency"
HIGH_PERFORMANCE = "High-Performance"
SECURE = "Secure"
OPTIMAL = "Optimal"
BALANCED = "Balanced"

AI_MODES = (EMERGENCY, HIGH_PERFORMANCE, SECURE, OPTIMAL, BALANCED)


@dataclass
class NetworkConditions:
    """Inputs shared by every field synthesized for one request"""
    now_ms: int
    variation: float
    is_business_hours: bool
    is_weekend: bool
    load_factor: float = 1.0

    @property
    def elapsed(self) -> float:
        return self.now_ms / 1000


def is_business_hours(hour: int) -> bool:
    return Config.BUSINESS_HOURS_START <= hour <= Config.BUSINESS_HOURS_END


def calculate_load_factor(business_hours: bool, weekend: bool) -> float:
    factor = Config.BUSINESS_HOURS_LOAD if business_hours else Config.OFF_HOURS_LOAD
    if weekend:
        factor *= Config.WEEKEND_LOAD
    return factor


def calculate_variation(
    elapsed: float,
    draw: float,
    params: VariationParams,
    load_factor: float = 1.0
) -> float:
    primary = math.sin(elapsed / params.primary_period) * params.primary_amplitude
    secondary = math.sin(elapsed / params.secondary_period) * params.secondary_amplitude
    micro = math.sin(elapsed / params.micro_period) * params.micro_amplitude
    noise = (draw - 0.5) * params.noise_amplitude
    return (primary + secondary + micro + noise) * load_factor


def determine_ai_mode(variation: float, business_hours: bool, load_factor: float = 1.0) -> str:
    """Classify the consensus mode; rules are checked in priority order."""
    if abs(variation) > Config.EMERGENCY_VARIATION or load_factor >= Config.OVERLOAD_FACTOR:
        return EMERGENCY
    if variation > Config.HIGH_PERFORMANCE_VARIATION and business_hours:
        return HIGH_PERFORMANCE
    if variation < Config.SECURE_VARIATION:
        return SECURE
    if business_hours and variation > Config.OPTIMAL_VARIATION:
        return OPTIMAL
    return BALANCED


def clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


def synthesize_field(spec: MetricSpec, variation: float, rng: RandomSource) -> Union[int, float]:
    value = spec.base + variation * spec.sensitivity
    if spec.noise:
        value += (rng.random() - 0.5) * spec.noise
    value = clamp(value, spec.minimum, spec.maximum)
    if spec.integer:
        return math.floor(value)
    return value


def current_block_height(now_ms: float) -> int:
    return Config.GENESIS_BLOCK_HEIGHT + math.floor(now_ms / Config.BLOCK_INTERVAL_MS)


def sample_conditions(now_ms: int, rng: RandomSource, profile: Profile) -> NetworkConditions:
    moment = utc_datetime(now_ms)
    business_hours = is_business_hours(moment.hour)
    weekend = moment.weekday() >= 5

    load_factor = 1.0
    if profile.use_load_factor:
        load_factor = calculate_load_factor(business_hours, weekend)

    variation = calculate_variation(now_ms / 1000, rng.random(), profile.variation, load_factor)
    return NetworkConditions(
        now_ms=now_ms,
        variation=variation,
        is_business_hours=business_hours,
        is_weekend=weekend,
        load_factor=load_factor
    )


def build_snapshot(conditions: NetworkConditions, rng: RandomSource, profile: Profile) -> Dict[str, Any]:
    metrics: Dict[str, Any] = {
        spec.name: synthesize_field(spec, conditions.variation, rng)
        for spec in profile.metrics
    }

    metrics["active_validators"] = metrics["validator_count"] * Config.ACTIVE_VALIDATOR_RATIO
    metrics["ai_mode"] = determine_ai_mode(
        conditions.variation, conditions.is_business_hours, conditions.load_factor
    )
    metrics["quantum_security_level"] = profile.quantum_security_level
    metrics["security_audit_score"] = Config.SECURITY_AUDIT_SCORE
    metrics["current_block_height"] = current_block_height(conditions.now_ms)
    metrics["last_block_timestamp"] = conditions.now_ms - rng.random() * Config.LAST_BLOCK_WINDOW_MS
    metrics["protocol_version"] = profile.protocol_version
    metrics["consensus_algorithm"] = Config.CONSENSUS_ALGORITHM

    if profile.use_load_factor:
        metrics["load_factor"] = conditions.load_factor
        metrics["is_business_hours"] = conditions.is_business_hours

    return format_metrics(metrics, profile)


def format_metrics(metrics: Dict[str, Any], profile: Profile) -> Dict[str, Any]:
    """Round floats to their precision and floor integer fields"""
    for spec in profile.metrics:
        if spec.integer:
            metrics[spec.name] = math.floor(metrics[spec.name])
        elif spec.precision is not None:
            metrics[spec.name] = round(metrics[spec.name], spec.precision)

    metrics["active_validators"] = math.floor(metrics["active_validators"])
    metrics["current_block_height"] = math.floor(metrics["current_block_height"])
    metrics["last_block_timestamp"] = math.floor(metrics["last_block_timestamp"])
    if "load_factor" in metrics:
        metrics["load_factor"] = round(metrics["load_factor"], 2)

    return metrics


def synthesize_metrics(now_ms: int, rng: RandomSource, profile: Profile) -> Dict[str, Any]:
    conditions = sample_conditions(now_ms, rng, profile)
    logger.debug(
        "Synthesizing %s metrics: variation=%.4f load_factor=%.2f",
        profile.name, conditions.variation, conditions.load_factor
    )
    return build_snapshot(conditions, rng, profile)
