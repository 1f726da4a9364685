"""
helpers.py - Shared constants and comparison utilities for ProtoCoin tests
"""

from datetime import datetime
from typing import Any, Dict

from protocoin import ProtoCoin


T0 = datetime(2025, 1, 1)

OWNER = "owner"
ALICE = "alice"
BOB = "bob"
CAROL = "carol"

ACCOUNTS = [OWNER, ALICE, BOB, CAROL]


def snapshot(coin: ProtoCoin) -> Dict[str, Any]:
    """Capture every piece of mutable token state for later comparison."""
    ledger = coin.ledger
    return {
        "balances": dict(ledger.balances),
        "allowances": dict(ledger.allowances),
        "total_supply": ledger.total_supply(),
        "mint_amount": ledger.mint_amount,
        "last_mint": {a: ledger.last_mint_time(a) for a in ACCOUNTS},
        "log_length": len(ledger.operation_log),
    }


def token_state_equals(coin1: ProtoCoin, coin2: ProtoCoin) -> bool:
    """Check if two tokens have equivalent state (balances, allowances, mint tables)."""
    s1 = snapshot(coin1)
    s2 = snapshot(coin2)
    # Zero-value entries are equivalent to absent ones
    for s in (s1, s2):
        s["balances"] = {a: b for a, b in s["balances"].items() if b}
        s["allowances"] = {k: v for k, v in s["allowances"].items() if v}
    return s1 == s2


def verify_conservation(coin: ProtoCoin) -> bool:
    """True if the sum of all balances equals the total supply."""
    return coin.verify_supply()["valid"]
