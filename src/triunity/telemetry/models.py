# File: src/triunity/telemetry/models.py
from pydantic import BaseModel, Field
from typing import Optional

ADDRESS_PATTERN = r"^0x[0-9a-fA-F]{40}$"


class ValidatorRecord(BaseModel):
    id: str
    address: str
    stake: float
    commission_rate: float
    uptime_percentage: float
    status: str = "active"
    blocks_proposed: int


class BlockRecord(BaseModel):
    height: int
    hash: str
    parent_hash: str
    timestamp: str
    validator: str
    transaction_count: int
    size_bytes: int
    gas_used: int
    gas_limit: int


class TransactionRecord(BaseModel):
    hash: str
    from_address: str
    to_address: str
    amount: float
    fee: float
    type: str
    status: str = "confirmed"
    block_height: int
    timestamp: str


class TransactionSubmission(BaseModel):
    from_address: str = Field(pattern=ADDRESS_PATTERN)
    to_address: str = Field(pattern=ADDRESS_PATTERN)
    amount: float = Field(gt=0, allow_inf_nan=False)
    fee: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    memo: Optional[str] = Field(default=None, max_length=256)


class TransactionReceipt(BaseModel):
    transaction_hash: str
    status: str = "pending"
    from_address: str
    to_address: str
    amount: float
    fee: float
    mempool_position: int
    estimated_confirmation_ms: int
    submitted_at: str
