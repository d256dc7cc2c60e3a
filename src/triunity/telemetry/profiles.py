# src/triunity/telemetry/profiles.py
"""Parameter sets for the historical revisions of the telemetry handler.

Each revision shipped its own copy of the handler with drifting constants
and field sets. A ``Profile`` captures one revision so a single synthesizer
and router can serve all of them.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union

from ..exceptions import ConfigurationError
from ..utils.config import Config

GET = "GET"
POST = "POST"


@dataclass(frozen=True)
class MetricSpec:
    """A synthesized field: base + variation * sensitivity, clamped"""
    name: str
    base: float
    sensitivity: float
    minimum: float
    maximum: float
    precision: Optional[int] = None
    integer: bool = False
    noise: float = 0.0


@dataclass(frozen=True)
class VariationParams:
    primary_period: float = 180.0
    primary_amplitude: float = 0.15
    secondary_period: float = 420.0
    secondary_amplitude: float = 0.08
    micro_period: float = 45.0
    micro_amplitude: float = 0.05
    noise_amplitude: float = 0.1


@dataclass(frozen=True)
class Profile:
    name: str
    api_version: str
    protocol_version: str
    metrics: Tuple[MetricSpec, ...]
    operations: Dict[str, Tuple[str, ...]]
    quantum_security_level: Union[str, int] = 256
    variation: VariationParams = field(default_factory=VariationParams)
    use_load_factor: bool = False
    extended_metadata: bool = False
    extended_security_headers: bool = False
    network_name: Optional[str] = None

    @property
    def allowed_methods(self) -> Tuple[str, ...]:
        methods = {m for op_methods in self.operations.values() for m in op_methods}
        return tuple(m for m in (GET, POST) if m in methods)

    @property
    def operation_names(self) -> Tuple[str, ...]:
        return tuple(self.operations)

    def methods_for(self, operation: str) -> Tuple[str, ...]:
        return self.operations.get(operation, ())

    def spec(self, name: str) -> MetricSpec:
        for metric in self.metrics:
            if metric.name == name:
                return metric
        raise KeyError(name)


CORE_METRICS = (
    MetricSpec("tps", 108000, 25000, 75000, 150000, integer=True),
    MetricSpec("block_time_ms", 85, 20, 70, 120, integer=True),
    MetricSpec("finality_time_ms", 165, 30, 120, 240, integer=True),
    MetricSpec("health_percentage", 99.97, 0.15, 99.80, 99.99, precision=2),
    MetricSpec("uptime_percentage", 99.987, 0.0, 99.98, 99.995, precision=3, noise=0.01),
    MetricSpec("validator_count", 247, 60, 200, 320, integer=True),
    MetricSpec("ai_confidence", 92.5, 6, 85.0, 99.9, precision=2),
    MetricSpec("network_load", 0.68, 0.20, 0.25, 0.95, precision=3),
    MetricSpec("average_gas_price", 0.12, 0.08, 0.01, 0.5, precision=4),
    MetricSpec("total_transactions", 8472000, 2000000, 6000000, 11000000, integer=True),
)

STANDARD_METRICS = CORE_METRICS + (
    MetricSpec("mempool_size", 4200, 8000, 500, 12000, integer=True),
    MetricSpec("peer_count", 1280, 400, 800, 2000, integer=True),
)

ENHANCED_METRICS = STANDARD_METRICS + (
    MetricSpec("pending_transactions", 1800, 3000, 100, 6000, integer=True),
    MetricSpec("energy_efficiency_score", 96.4, 3, 90.0, 99.9, precision=1),
)

READ_OPERATIONS = ("metrics", "status", "validators", "blocks", "health", "transactions")

PROFILES: Dict[str, Profile] = {
    "clean": Profile(
        name="clean",
        api_version="2.2.0",
        protocol_version="2.2.0",
        metrics=CORE_METRICS,
        operations={"metrics": (GET,)},
        quantum_security_level="256-bit",
    ),
    "standard": Profile(
        name="standard",
        api_version="2.3.0",
        protocol_version="2.3.0",
        metrics=STANDARD_METRICS,
        operations={name: (GET,) for name in READ_OPERATIONS},
        network_name=Config.NETWORK_NAME,
    ),
    "enhanced": Profile(
        name="enhanced",
        api_version="3.0.0",
        protocol_version="3.0.0",
        metrics=ENHANCED_METRICS,
        operations={
            **{name: (GET,) for name in READ_OPERATIONS},
            "transactions": (GET, POST),
        },
        use_load_factor=True,
        extended_metadata=True,
        extended_security_headers=True,
        network_name=Config.NETWORK_NAME,
    ),
}

DEFAULT_PROFILE = "enhanced"


def get_profile(name: Optional[str] = None) -> Profile:
    name = name or DEFAULT_PROFILE
    try:
        return PROFILES[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown profile '{name}'; expected one of {', '.join(PROFILES)}"
        ) from None
