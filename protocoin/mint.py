"""
mint.py - Time-gated self-service issuance

This module provides the mint controller and pure status queries:
1. minting_state() / mint_status() / next_mint_time() / can_mint() - pure
   functions over a LedgerView
2. MintController - owner-configured mint amount and the public mint claim

State machine:
    Global:       DISABLED (mint_amount == 0) <-> ENABLED (mint_amount > 0)
    Per account:  NEVER_MINTED -> COOLING -> COOLED_DOWN -> COOLING -> ...

A successful mint credits the caller with mint_amount new base units and
emits Transfer(source=None, dest=caller, amount=mint_amount).
"""

from __future__ import annotations
from datetime import datetime
from typing import Optional

from .core import (
    LedgerView, Operation, OperationType, Transfer,
    MintingState, MintStatus,
    Unauthorized, MintingDisabled, MintCooldownActive, TokenError,
    validate_account, validate_amount,
)
from .ledger import TokenLedger


# ============================================================================
# PURE QUERIES
# ============================================================================

def minting_state(view: LedgerView) -> MintingState:
    """Return ENABLED when a positive mint amount is configured."""
    return MintingState.ENABLED if view.mint_amount > 0 else MintingState.DISABLED


def next_mint_time(view: LedgerView, account: str) -> Optional[datetime]:
    """
    Earliest time at which account may mint again.

    Returns None if the account has never minted (it may mint at any time).
    """
    last = view.last_mint_time(account)
    if last is None:
        return None
    return last + view.mint_cooldown


def mint_status(view: LedgerView, account: str) -> MintStatus:
    """
    Per-account cooldown sub-state at the view's current time.

    Example:
        mint_status(ledger, "alice")  # MintStatus.NEVER_MINTED
    """
    available_at = next_mint_time(view, account)
    if available_at is None:
        return MintStatus.NEVER_MINTED
    if view.current_time >= available_at:
        return MintStatus.COOLED_DOWN
    return MintStatus.COOLING


def can_mint(view: LedgerView, account: str) -> bool:
    """True if a mint by account would succeed right now."""
    if minting_state(view) is MintingState.DISABLED:
        return False
    return mint_status(view, account) is not MintStatus.COOLING


# ============================================================================
# CONTROLLER
# ============================================================================

class MintController:
    """
    Gatekeeper for supply expansion.

    Reads and writes mint configuration on the TokenLedger it wraps and uses
    the ledger's credit primitive for the actual issuance.
    """

    def __init__(self, ledger: TokenLedger):
        self.ledger = ledger

    def set_mint_amount(self, caller: str, amount: int) -> Operation:
        """
        Set the amount each successful mint credits. Zero disables minting.

        Args:
            caller: Invoking account; must be the ledger owner
            amount: New mint amount in base units

        Raises:
            Unauthorized: If caller is not the owner
        """
        validate_account(caller, "caller")
        validate_amount(amount)
        if caller != self.ledger.owner:
            error = Unauthorized(caller)
            self.ledger.report_rejection(OperationType.SET_MINT_AMOUNT, caller, error)
            raise error

        self.ledger.set_mint_amount(amount)
        return self.ledger.commit(OperationType.SET_MINT_AMOUNT, caller, (amount,))

    def mint(self, caller: str) -> Operation:
        """
        Credit caller with the configured mint amount.

        Checks, in order: minting enabled, caller's cooldown elapsed. The
        credit itself may still fail with ArithmeticOverflow, in which case
        the cooldown is not recorded.

        Raises:
            MintingDisabled: If the mint amount is zero
            MintCooldownActive: If caller minted less than one cooldown ago
        """
        validate_account(caller, "caller")
        ledger = self.ledger
        try:
            if minting_state(ledger) is MintingState.DISABLED:
                raise MintingDisabled()
            if mint_status(ledger, caller) is MintStatus.COOLING:
                raise MintCooldownActive(caller, next_mint_time(ledger, caller))

            amount = ledger.mint_amount
            ledger.credit(caller, amount)
        except TokenError as e:
            ledger.report_rejection(OperationType.MINT, caller, e)
            raise

        ledger.record_mint(caller, ledger.current_time)
        return ledger.commit(
            OperationType.MINT, caller, (),
            (Transfer(source=None, dest=caller, amount=amount),),
        )
