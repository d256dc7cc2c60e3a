# src/triunity/utils/config.py


class Config:
    # Chain constants
    GENESIS_BLOCK_HEIGHT = 19847392
    BLOCK_INTERVAL_MS = 85
    LAST_BLOCK_WINDOW_MS = 120_000
    CONSENSUS_ALGORITHM = "TriUnity-PoS-AI"
    SECURITY_AUDIT_SCORE = 98.7
    NETWORK_NAME = "TriUnity Mainnet"

    # Validator set
    ACTIVE_VALIDATOR_RATIO = 0.95
    MAX_LISTED_VALIDATORS = 20
    MIN_VALIDATOR_STAKE = 10_000
    MAX_VALIDATOR_STAKE = 500_000
    MIN_COMMISSION_RATE = 0.01
    MAX_COMMISSION_RATE = 0.10

    # Blocks and transactions
    LATEST_BLOCKS_COUNT = 10
    LATEST_TRANSACTIONS_COUNT = 20
    BLOCK_GAS_LIMIT = 30_000_000
    MAX_TRANSACTION_AMOUNT = 5000.0
    TRANSACTION_TYPES = ("transfer", "stake", "contract_call")

    # Load model (UTC)
    BUSINESS_HOURS_START = 8
    BUSINESS_HOURS_END = 18  # inclusive
    BUSINESS_HOURS_LOAD = 1.2
    OFF_HOURS_LOAD = 0.85
    WEEKEND_LOAD = 0.75

    # AI consensus mode thresholds
    EMERGENCY_VARIATION = 0.25
    HIGH_PERFORMANCE_VARIATION = 0.15
    SECURE_VARIATION = -0.15
    OPTIMAL_VARIATION = 0.05
    OVERLOAD_FACTOR = 1.5

    # Response metadata
    MIN_RESPONSE_TIME_MS = 10
    RESPONSE_TIME_SPREAD_MS = 50
    CACHE_HIT_THRESHOLD = 0.7

    # Health checks
    NETWORK_LOAD_WARNING = 0.75
    HEALTH_CHECKS = ("api", "consensus", "network", "storage")
