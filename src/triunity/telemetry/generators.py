# src/triunity/telemetry/generators.py
"""Per-operation payload generators.

Each generator reads only the context's clock reading and random source;
records in one payload have no relationship to those of any other call.
"""
import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from web3 import Web3

from ..utils.config import Config
from .clock import RandomSource, iso_timestamp
from .models import (
    BlockRecord,
    TransactionReceipt,
    TransactionRecord,
    TransactionSubmission,
    ValidatorRecord,
)
from .profiles import Profile
from .synthesizer import (
    EMERGENCY,
    build_snapshot,
    current_block_height,
    sample_conditions,
    synthesize_field,
    synthesize_metrics,
)

logger = logging.getLogger(__name__)


@dataclass
class GeneratorContext:
    now_ms: int
    rng: RandomSource
    profile: Profile
    max_listed_validators: int = Config.MAX_LISTED_VALIDATORS


def random_hash(rng: RandomSource) -> str:
    return Web3.to_hex(Web3.keccak(rng.randbytes(32)))


def random_address(rng: RandomSource) -> str:
    return Web3.to_checksum_address("0x" + rng.randbytes(20).hex())


def generate_metrics(ctx: GeneratorContext) -> Dict[str, Any]:
    return synthesize_metrics(ctx.now_ms, ctx.rng, ctx.profile)


def generate_validators(ctx: GeneratorContext) -> Dict[str, Any]:
    rng = ctx.rng
    conditions = sample_conditions(ctx.now_ms, rng, ctx.profile)
    total = synthesize_field(ctx.profile.spec("validator_count"), conditions.variation, rng)
    active = math.floor(total * Config.ACTIVE_VALIDATOR_RATIO)
    listed = min(ctx.max_listed_validators, total)

    validators = [
        ValidatorRecord(
            id=f"validator-{index + 1:03d}",
            address=random_address(rng),
            stake=round(rng.uniform(Config.MIN_VALIDATOR_STAKE, Config.MAX_VALIDATOR_STAKE), 2),
            commission_rate=round(
                rng.uniform(Config.MIN_COMMISSION_RATE, Config.MAX_COMMISSION_RATE), 4
            ),
            uptime_percentage=round(rng.uniform(97.5, 100.0), 2),
            status="active" if rng.random() < 0.98 else "jailed",
            blocks_proposed=rng.randint(1_000, 250_000),
        ).model_dump()
        for index in range(listed)
    ]

    return {
        "total_validators": total,
        "active_validators": active,
        "listed": listed,
        "validators": validators,
    }


def generate_blocks(ctx: GeneratorContext) -> Dict[str, Any]:
    rng = ctx.rng
    count = Config.LATEST_BLOCKS_COUNT
    latest = current_block_height(ctx.now_ms)
    # One extra hash so the oldest block also gets a parent
    hashes = [random_hash(rng) for _ in range(count + 1)]

    blocks = []
    for offset in range(count):
        transaction_count = rng.randint(500, 2500)
        gas_used = rng.randint(Config.BLOCK_GAS_LIMIT * 2 // 5, Config.BLOCK_GAS_LIMIT)
        blocks.append(BlockRecord(
            height=latest - offset,
            hash=hashes[offset],
            parent_hash=hashes[offset + 1],
            timestamp=iso_timestamp(ctx.now_ms - offset * Config.BLOCK_INTERVAL_MS),
            validator=random_address(rng),
            transaction_count=transaction_count,
            size_bytes=transaction_count * rng.randint(180, 420),
            gas_used=gas_used,
            gas_limit=Config.BLOCK_GAS_LIMIT,
        ).model_dump())

    return {"latest_height": latest, "count": count, "blocks": blocks}


def _transaction_status(rng: RandomSource) -> str:
    draw = rng.random()
    if draw < 0.85:
        return "confirmed"
    if draw < 0.95:
        return "pending"
    return "failed"


def generate_transactions(ctx: GeneratorContext) -> Dict[str, Any]:
    rng = ctx.rng
    latest = current_block_height(ctx.now_ms)

    transactions = []
    for _ in range(Config.LATEST_TRANSACTIONS_COUNT):
        status = _transaction_status(rng)
        # Pending transactions are headed for the next block
        block_height = latest + 1 if status == "pending" else latest - rng.randint(0, 50)
        transactions.append(TransactionRecord(
            hash=random_hash(rng),
            from_address=random_address(rng),
            to_address=random_address(rng),
            amount=round(rng.uniform(0.01, Config.MAX_TRANSACTION_AMOUNT), 6),
            fee=round(rng.uniform(0.0001, 0.01), 6),
            type=rng.choice(Config.TRANSACTION_TYPES),
            status=status,
            block_height=block_height,
            timestamp=iso_timestamp(ctx.now_ms - rng.random() * 60_000),
        ).model_dump())

    return {
        "count": len(transactions),
        "pending_count": sum(1 for tx in transactions if tx["status"] == "pending"),
        "latest_block_height": latest,
        "transactions": transactions,
    }


def submit_transaction(ctx: GeneratorContext, submission: TransactionSubmission) -> Dict[str, Any]:
    """Acknowledge a submission with a fabricated receipt; nothing is stored."""
    rng = ctx.rng
    profile = ctx.profile
    variation = sample_conditions(ctx.now_ms, rng, profile).variation

    fee = submission.fee
    if fee is None:
        fee = round(synthesize_field(profile.spec("average_gas_price"), variation, rng), 4)

    mempool_size = Config.LATEST_TRANSACTIONS_COUNT
    if any(spec.name == "mempool_size" for spec in profile.metrics):
        mempool_size = synthesize_field(profile.spec("mempool_size"), variation, rng)

    receipt = TransactionReceipt(
        transaction_hash=random_hash(rng),
        from_address=submission.from_address,
        to_address=submission.to_address,
        amount=submission.amount,
        fee=fee,
        mempool_position=rng.randint(1, mempool_size),
        estimated_confirmation_ms=synthesize_field(profile.spec("finality_time_ms"), variation, rng),
        submitted_at=iso_timestamp(ctx.now_ms),
    )
    logger.info("Accepted transaction %s into simulated mempool", receipt.transaction_hash)
    return receipt.model_dump()


def generate_health(ctx: GeneratorContext) -> Dict[str, Any]:
    rng = ctx.rng
    snapshot = build_snapshot(sample_conditions(ctx.now_ms, rng, ctx.profile), rng, ctx.profile)

    checks = {}
    for name in Config.HEALTH_CHECKS:
        status = "pass"
        if name == "network" and snapshot["network_load"] > Config.NETWORK_LOAD_WARNING:
            status = "warn"
        elif name == "consensus" and snapshot["ai_mode"] == EMERGENCY:
            status = "warn"
        checks[name] = {"status": status, "latency_ms": round(rng.uniform(1.0, 25.0), 2)}

    healthy = all(check["status"] == "pass" for check in checks.values())
    return {
        "status": "healthy" if healthy else "degraded",
        "checks": checks,
        "health_percentage": snapshot["health_percentage"],
        "uptime_percentage": snapshot["uptime_percentage"],
        "version": ctx.profile.api_version,
    }


def generate_status(ctx: GeneratorContext) -> Dict[str, Any]:
    snapshot = synthesize_metrics(ctx.now_ms, ctx.rng, ctx.profile)
    return {
        "network": ctx.profile.network_name or Config.NETWORK_NAME,
        "status": "degraded" if snapshot["ai_mode"] == EMERGENCY else "operational",
        "ai_mode": snapshot["ai_mode"],
        "current_block_height": snapshot["current_block_height"],
        "tps": snapshot["tps"],
        "validator_count": snapshot["validator_count"],
        "active_validators": snapshot["active_validators"],
        "protocol_version": snapshot["protocol_version"],
        "consensus_algorithm": snapshot["consensus_algorithm"],
        "uptime_percentage": snapshot["uptime_percentage"],
        "last_updated": iso_timestamp(ctx.now_ms),
    }


READ_GENERATORS: Dict[str, Callable[[GeneratorContext], Dict[str, Any]]] = {
    "metrics": generate_metrics,
    "status": generate_status,
    "validators": generate_validators,
    "blocks": generate_blocks,
    "health": generate_health,
    "transactions": generate_transactions,
}


def run_operation(operation: str, ctx: GeneratorContext,
                  submission: Optional[TransactionSubmission] = None) -> Dict[str, Any]:
    """Dispatch a read operation, or a submission when one is given."""
    if submission is not None:
        return submit_transaction(ctx, submission)
    return READ_GENERATORS[operation](ctx)
