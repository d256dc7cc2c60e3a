# tests/test_generators.py
import math
import random
import re
import pytest
from web3 import Web3

from triunity.telemetry import generators
from triunity.telemetry.clock import iso_timestamp, make_random_source
from triunity.telemetry.generators import GeneratorContext
from triunity.telemetry.models import TransactionSubmission
from triunity.telemetry.profiles import get_profile
from triunity.telemetry.synthesizer import current_block_height
from triunity.utils.config import Config

WEDNESDAY_NOON_MS = 1704283200000
HASH_PATTERN = re.compile(r"^0x[0-9a-f]{64}$")


class TestGenerators:
    @pytest.fixture
    def ctx(self):
        return GeneratorContext(
            now_ms=WEDNESDAY_NOON_MS,
            rng=random.Random(7),
            profile=get_profile("enhanced")
        )

    @pytest.fixture
    def submission(self):
        return TransactionSubmission(
            from_address="0x" + "ab" * 20,
            to_address="0x" + "cd" * 20,
            amount=12.5
        )

    def test_validator_counts(self, ctx):
        payload = generators.generate_validators(ctx)
        total = payload["total_validators"]

        assert 200 <= total <= 320
        assert payload["active_validators"] == math.floor(total * 0.95)
        assert len(payload["validators"]) == min(20, total)
        assert payload["listed"] == len(payload["validators"])

    def test_validator_records(self, ctx):
        validators = generators.generate_validators(ctx)["validators"]

        assert [v["id"] for v in validators][:2] == ["validator-001", "validator-002"]
        assert len({v["address"] for v in validators}) == len(validators)
        for validator in validators:
            assert Web3.is_checksum_address(validator["address"])
            assert Config.MIN_VALIDATOR_STAKE <= validator["stake"] <= Config.MAX_VALIDATOR_STAKE
            assert Config.MIN_COMMISSION_RATE <= validator["commission_rate"] <= Config.MAX_COMMISSION_RATE
            assert 97.5 <= validator["uptime_percentage"] <= 100.0
            assert validator["status"] in ("active", "jailed")

    def test_validator_listing_limit(self, ctx):
        ctx.max_listed_validators = 5
        assert len(generators.generate_validators(ctx)["validators"]) == 5

        ctx.max_listed_validators = 1000
        payload = generators.generate_validators(ctx)
        assert len(payload["validators"]) == payload["total_validators"]

    def test_blocks_are_consecutive(self, ctx):
        payload = generators.generate_blocks(ctx)
        blocks = payload["blocks"]

        assert len(blocks) == 10
        assert blocks[0]["height"] == current_block_height(WEDNESDAY_NOON_MS)
        assert payload["latest_height"] == blocks[0]["height"]
        for newer, older in zip(blocks, blocks[1:]):
            assert older["height"] == newer["height"] - 1
            assert newer["parent_hash"] == older["hash"]

    def test_block_records(self, ctx):
        blocks = generators.generate_blocks(ctx)["blocks"]

        assert blocks[0]["timestamp"] == iso_timestamp(WEDNESDAY_NOON_MS)
        assert blocks[1]["timestamp"] == iso_timestamp(WEDNESDAY_NOON_MS - Config.BLOCK_INTERVAL_MS)
        for block in blocks:
            assert HASH_PATTERN.match(block["hash"])
            assert block["gas_used"] <= block["gas_limit"] == Config.BLOCK_GAS_LIMIT
            assert 500 <= block["transaction_count"] <= 2500
            assert Web3.is_checksum_address(block["validator"])

    def test_transactions(self, ctx):
        payload = generators.generate_transactions(ctx)
        transactions = payload["transactions"]
        latest = current_block_height(WEDNESDAY_NOON_MS)

        assert payload["count"] == len(transactions) == 20
        assert payload["pending_count"] == sum(1 for tx in transactions if tx["status"] == "pending")
        for tx in transactions:
            assert HASH_PATTERN.match(tx["hash"])
            assert tx["status"] in ("confirmed", "pending", "failed")
            assert tx["type"] in Config.TRANSACTION_TYPES
            assert 0.01 <= tx["amount"] <= Config.MAX_TRANSACTION_AMOUNT
            if tx["status"] == "pending":
                assert tx["block_height"] == latest + 1
            else:
                assert latest - 50 <= tx["block_height"] <= latest

    def test_submission_receipt(self, ctx, submission):
        receipt = generators.submit_transaction(ctx, submission)

        assert HASH_PATTERN.match(receipt["transaction_hash"])
        assert receipt["status"] == "pending"
        assert receipt["from_address"] == submission.from_address
        assert receipt["amount"] == 12.5
        assert 0.01 <= receipt["fee"] <= 0.5
        assert receipt["mempool_position"] >= 1
        assert 120 <= receipt["estimated_confirmation_ms"] <= 240
        assert receipt["submitted_at"] == iso_timestamp(WEDNESDAY_NOON_MS)

    def test_submission_keeps_explicit_fee(self, ctx, submission):
        submission.fee = 0.25
        assert generators.submit_transaction(ctx, submission)["fee"] == 0.25

    def test_health(self, ctx):
        payload = generators.generate_health(ctx)

        assert set(payload["checks"]) == set(Config.HEALTH_CHECKS)
        all_pass = all(check["status"] == "pass" for check in payload["checks"].values())
        assert payload["status"] == ("healthy" if all_pass else "degraded")
        assert payload["version"] == "3.0.0"
        assert 99.80 <= payload["health_percentage"] <= 99.99

    def test_health_degrades_under_emergency(self, ctx, mocker):
        snapshot = {
            "network_load": 0.8,
            "ai_mode": "Emergency",
            "health_percentage": 99.8,
            "uptime_percentage": 99.98,
        }
        mocker.patch.object(generators, "build_snapshot", return_value=snapshot)

        payload = generators.generate_health(ctx)

        assert payload["status"] == "degraded"
        assert payload["checks"]["network"]["status"] == "warn"
        assert payload["checks"]["consensus"]["status"] == "warn"
        assert payload["checks"]["api"]["status"] == "pass"

    @pytest.mark.parametrize("network_load, expected", [
        (0.5, "pass"),
        (Config.NETWORK_LOAD_WARNING, "pass"),
        (0.751, "warn"),
        (0.95, "warn"),
    ])
    def test_network_check_threshold(self, ctx, mocker, network_load, expected):
        snapshot = {
            "network_load": network_load,
            "ai_mode": "Balanced",
            "health_percentage": 99.9,
            "uptime_percentage": 99.98,
        }
        mocker.patch.object(generators, "build_snapshot", return_value=snapshot)

        payload = generators.generate_health(ctx)

        assert Config.NETWORK_LOAD_WARNING == 0.75
        assert payload["checks"]["network"]["status"] == expected
        assert payload["checks"]["consensus"]["status"] == "pass"
        assert payload["status"] == ("healthy" if expected == "pass" else "degraded")

    def test_status(self, ctx):
        payload = generators.generate_status(ctx)

        assert payload["network"] == "TriUnity Mainnet"
        expected = "degraded" if payload["ai_mode"] == "Emergency" else "operational"
        assert payload["status"] == expected
        assert payload["current_block_height"] == current_block_height(WEDNESDAY_NOON_MS)
        assert payload["last_updated"] == iso_timestamp(WEDNESDAY_NOON_MS)

    def test_run_operation_dispatch(self, ctx, submission):
        assert set(generators.READ_GENERATORS) == {
            "metrics", "status", "validators", "blocks", "health", "transactions"
        }
        assert "tps" in generators.run_operation("metrics", ctx)
        assert "transaction_hash" in generators.run_operation("transactions", ctx, submission)

    def test_consecutive_calls_differ(self):
        ctx = GeneratorContext(
            now_ms=WEDNESDAY_NOON_MS,
            rng=make_random_source(),
            profile=get_profile("enhanced")
        )
        first = generators.generate_transactions(ctx)["transactions"][0]["hash"]
        second = generators.generate_transactions(ctx)["transactions"][0]["hash"]
        assert first != second
