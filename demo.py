"""
demo.py - ProtoCoin Walkthrough

This walkthrough runs a small token economy from genesis through several days
and shows each public operation with its printed receipt.

THE THREE COMPONENTS:
====================

1. TokenLedger - balances, allowances, supply, clock and operation log
2. ProtoCoin   - transfer, approve and transfer_from on top of the ledger
3. MintController - owner-configured faucet, one claim per account per day

SCENARIO: A Community Faucet
============================

The owner deploys ProtoCoin with 100 PRC, seeds two members, lets an exchange
spend on a member's behalf, and opens a daily faucet. A week later the owner
needs to show what every holder held at the end of day one.

Run:
    python demo.py
"""

from datetime import datetime, timedelta
from decimal import Decimal

from protocoin import (
    ProtoCoin, TokenError, MintStatus,
    to_base_units, from_base_units,
)


OWNER = "treasury"
MEMBERS = ["alice", "bob"]
EXCHANGE = "exchange"

START = datetime(2025, 3, 1, 9, 0)


def prc(amount: int) -> str:
    """Format base units as whole tokens."""
    return f"{from_base_units(amount)} PRC"


def print_holders(coin: ProtoCoin, title: str) -> None:
    print(f"\n  {title}")
    for account, balance in coin.holders().items():
        print(f"    {account:<10} {prc(balance):>28}")
    print(f"    {'supply':<10} {prc(coin.total_supply()):>28}")


# =============================================================================
# DAY 1: DISTRIBUTION AND DELEGATION
# =============================================================================

def day_one(coin: ProtoCoin) -> None:
    print("=" * 70)
    print("DAY 1: DISTRIBUTION AND DELEGATION")
    print("=" * 70)

    for member in MEMBERS:
        coin.transfer(OWNER, member, to_base_units("10"))

    # Alice lets the exchange sell up to 4 PRC for her
    coin.approve("alice", EXCHANGE, to_base_units("4"))
    coin.advance_time(START + timedelta(hours=3))
    coin.transfer_from(EXCHANGE, "alice", "bob", to_base_units("1.25"))
    print(f"\n  exchange may still spend {prc(coin.allowance('alice', EXCHANGE))} of alice's")

    # Spending beyond the allowance is rejected and changes nothing
    try:
        coin.transfer_from(EXCHANGE, "alice", "bob", to_base_units("5"))
    except TokenError as e:
        print(f"  rejected as expected: {e}")

    print_holders(coin, "Holders after day 1")


# =============================================================================
# DAYS 2-7: THE FAUCET
# =============================================================================

def faucet_week(coin: ProtoCoin) -> None:
    print("\n" + "=" * 70)
    print("DAYS 2-7: THE FAUCET")
    print("=" * 70)

    coin.advance_time(START + timedelta(days=1))
    coin.set_mint_amount(OWNER, to_base_units("0.5"))

    for day in range(1, 7):
        now = START + timedelta(days=day, hours=1)
        coin.advance_time(now)
        # Bob claims every day, alice only every other day
        claimants = MEMBERS if day % 2 else ["bob"]
        for member in claimants:
            if coin.mint_status(member) is MintStatus.COOLING:
                print(f"  {member} cooling until {coin.next_mint_time(member)}")
                continue
            coin.mint(member)

        # A second claim within the same day is always refused
        try:
            coin.mint("bob")
        except TokenError as e:
            print(f"  day {day + 1}: bob again -> {e}")

    print_holders(coin, "Holders after the faucet week")


# =============================================================================
# AUDIT: STATE AT THE END OF DAY 1
# =============================================================================

def audit(coin: ProtoCoin) -> bool:
    print("\n" + "=" * 70)
    print("AUDIT: STATE AT THE END OF DAY 1")
    print("=" * 70)

    end_of_day_one = START + timedelta(hours=23)
    past = coin.state_at(end_of_day_one)
    print_holders(past, f"Holders at {end_of_day_one}")

    replayed = coin.replay()
    same = all(
        replayed.balance_of(a) == coin.balance_of(a)
        for a in coin.holders()
    )
    check = coin.verify_supply()
    print(f"\n  replay reproduces current balances: {same}")
    print(f"  supply conserved: {check['valid']} (difference {check['difference']})")
    print(f"  operations logged: {len(coin.operation_log)}")
    return same and check['valid'] and past.total_supply() == to_base_units(Decimal("100"))


def main():
    coin = ProtoCoin(OWNER, initial_time=START, verbose=True)
    day_one(coin)

    # Receipts are useful once; the faucet week is quieter without them
    coin.ledger.verbose = False
    faucet_week(coin)
    return audit(coin)


if __name__ == "__main__":
    success = main()
    exit(0 if success else 1)
