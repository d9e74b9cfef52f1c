"""
Transaction Model — Transaction Service
Fixed-shape record built from any transaction-like mapping.
is_fraud: "true" | "false"    risk_level: low | Low | Medium | High
"""

import math
from dataclasses import dataclass, fields, replace

AMOUNT_PLACEHOLDER = "-"

FIELDS = (
    "id",
    "sender",
    "receiver",
    "amount",
    "time",
    "created_at",
    "is_fraud",
    "risk_level",
    "ip_address",
    "location",
)


def coerce_amount(value):
    """
    Parse amount as a number, falling back to the "-" placeholder.
    Zero, empty, non-finite and float-overflowing values also fall back.
    """
    if isinstance(value, bool):
        number = int(value)
    elif isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return AMOUNT_PLACEHOLDER
        try:
            number = float(text)
        except ValueError:
            return AMOUNT_PLACEHOLDER
    else:
        return AMOUNT_PLACEHOLDER

    try:
        finite = math.isfinite(number)
    except OverflowError:
        # int too large for a float
        return AMOUNT_PLACEHOLDER
    if not finite or not number:
        return AMOUNT_PLACEHOLDER
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def coerce_fraud_flag(value):
    # Only a real True or the exact string "true" count as fraud
    if value is True or value == "true":
        return "true"
    return "false"


@dataclass(frozen=True)
class Transaction:
    id: object = None
    sender: object = None
    receiver: object = None
    amount: object = AMOUNT_PLACEHOLDER
    time: object = None
    created_at: object = None
    is_fraud: str = "false"
    risk_level: str = "low"
    ip_address: str = "-"
    location: str = "Unknown"

    @classmethod
    def from_mapping(cls, data):
        data = data or {}
        return cls(
            id=data.get("id"),
            sender=data.get("sender"),
            receiver=data.get("receiver"),
            amount=coerce_amount(data.get("amount")),
            time=data.get("time"),
            created_at=data.get("created_at"),
            is_fraud=coerce_fraud_flag(data.get("is_fraud")),
            risk_level=data.get("risk_level") or "low",
            ip_address=data.get("ip_address") or "-",
            location=data.get("location") or "Unknown",
        )

    def with_fraud_flag(self, is_fraud):
        return replace(self, is_fraud=coerce_fraud_flag(is_fraud))

    def to_dict(self):
        return {f.name: getattr(self, f.name) for f in fields(self)}
