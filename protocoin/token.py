"""
token.py - ProtoCoin public operations

The ProtoCoin class is the public surface of the token. It implements the
transfer/approval engine on top of a TokenLedger and delegates issuance to a
MintController.

Every mutating operation takes the invoking account as its first argument.
The boundary that authenticates a call (a node, a signed request, a test)
derives that account from the invocation context; it is never read from
a user-supplied "from" field.

Public operations:
    - Metadata: name, symbol, decimals
    - Reads: total_supply, balance_of, allowance
    - transfer / approve / transfer_from
    - set_mint_amount / mint
    - clone / replay / state_at for historical reconstruction
"""

from __future__ import annotations
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from .core import (
    Operation, OperationType, Transfer, Approval, Event,
    MintingState, MintStatus,
    TOKEN_NAME, TOKEN_SYMBOL, DECIMALS,
    GENESIS_SUPPLY, DEFAULT_MINT_COOLDOWN, UNLIMITED_ALLOWANCE,
    InsufficientAllowance, InsufficientBalance, TokenError,
    validate_account, validate_amount,
)
from .events import EventHandler
from .ledger import TokenLedger
from .mint import MintController, minting_state, mint_status, next_mint_time, can_mint


# Operation type -> ProtoCoin method, used to re-execute the log
_REPLAY_METHODS = {
    OperationType.TRANSFER: "transfer",
    OperationType.APPROVE: "approve",
    OperationType.TRANSFER_FROM: "transfer_from",
    OperationType.SET_MINT_AMOUNT: "set_mint_amount",
    OperationType.MINT: "mint",
}


class ProtoCoin:
    """
    Fungible 18-decimal token with allowances and cooldown-gated minting.

    Every operation either commits all of its state changes, logs an
    Operation and notifies subscribers, or raises a TokenError and changes
    nothing. A NotificationError is raised only after a commit, when a
    subscriber failed; the operation has taken effect and must not be
    retried.

    Example:
        coin = ProtoCoin("owner", verbose=False)
        coin.transfer("owner", "alice", 10)
        coin.approve("alice", "bob", 4)
        coin.transfer_from("bob", "alice", "carol", 3)
        coin.allowance("alice", "bob")  # 1
    """

    def __init__(
        self,
        owner: str,
        initial_time: Optional[datetime] = None,
        verbose: bool = True,
        ledger_name: str = "main",
        initial_supply: int = GENESIS_SUPPLY,
        mint_cooldown: timedelta = DEFAULT_MINT_COOLDOWN,
    ):
        self.ledger = TokenLedger(
            owner,
            initial_time=initial_time,
            verbose=verbose,
            name=ledger_name,
            initial_supply=initial_supply,
            mint_cooldown=mint_cooldown,
        )
        self.minter = MintController(self.ledger)

    @classmethod
    def from_ledger(cls, ledger: TokenLedger) -> ProtoCoin:
        """Wrap an existing TokenLedger without touching its state."""
        coin = cls.__new__(cls)
        coin.ledger = ledger
        coin.minter = MintController(ledger)
        return coin

    # ========================================================================
    # METADATA
    # ========================================================================

    @property
    def name(self) -> str:
        return TOKEN_NAME

    @property
    def symbol(self) -> str:
        return TOKEN_SYMBOL

    @property
    def decimals(self) -> int:
        return DECIMALS

    # ========================================================================
    # READS
    # ========================================================================

    @property
    def owner(self) -> str:
        return self.ledger.owner

    @property
    def current_time(self) -> datetime:
        return self.ledger.current_time

    @property
    def mint_amount(self) -> int:
        return self.ledger.mint_amount

    @property
    def operation_log(self) -> List[Operation]:
        return self.ledger.operation_log

    def total_supply(self) -> int:
        return self.ledger.total_supply()

    def balance_of(self, account: str) -> int:
        return self.ledger.balance_of(account)

    def allowance(self, owner: str, spender: str) -> int:
        return self.ledger.allowance(owner, spender)

    def holders(self) -> Dict[str, int]:
        return self.ledger.holders()

    def events(self) -> List[Event]:
        return self.ledger.events()

    def verify_supply(self) -> Dict[str, Any]:
        return self.ledger.verify_supply()

    def last_mint_time(self, account: str) -> Optional[datetime]:
        return self.ledger.last_mint_time(account)

    def minting_state(self) -> MintingState:
        return minting_state(self.ledger)

    def mint_status(self, account: str) -> MintStatus:
        return mint_status(self.ledger, account)

    def next_mint_time(self, account: str) -> Optional[datetime]:
        return next_mint_time(self.ledger, account)

    def can_mint(self, account: str) -> bool:
        return can_mint(self.ledger, account)

    # ========================================================================
    # ENVIRONMENT
    # ========================================================================

    def advance_time(self, new_time: datetime) -> None:
        """Move the logical clock forward (see TokenLedger.advance_time)."""
        self.ledger.advance_time(new_time)

    def subscribe(self, handler: EventHandler) -> EventHandler:
        return self.ledger.subscribe(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        self.ledger.unsubscribe(handler)

    # ========================================================================
    # TRANSFER / APPROVAL ENGINE (Mutating)
    # ========================================================================

    def transfer(self, caller: str, to: str, amount: int) -> bool:
        """
        Move amount from caller to to.

        Self-transfers and zero amounts are allowed and still emit a Transfer.

        Returns:
            True on success

        Raises:
            InsufficientBalance: If caller holds less than amount
        """
        validate_account(caller, "caller")
        validate_account(to, "to")
        validate_amount(amount)
        try:
            self.ledger.move(caller, to, amount)
        except TokenError as e:
            self.ledger.report_rejection(OperationType.TRANSFER, caller, e)
            raise
        self.ledger.commit(
            OperationType.TRANSFER, caller, (to, amount),
            (Transfer(source=caller, dest=to, amount=amount),),
        )
        return True

    def approve(self, caller: str, spender: str, amount: int) -> bool:
        """
        Set the amount spender may draw from caller's balance.

        The new value replaces the old one; it is not added to it. A spender
        watching for the approval can still spend the old allowance first and
        then the new one, so callers who lower an allowance should approve 0
        and confirm before approving the new value.

        Returns:
            True (approve never fails for valid inputs)
        """
        validate_account(caller, "caller")
        validate_account(spender, "spender")
        validate_amount(amount)
        self.ledger.set_allowance(caller, spender, amount)
        self.ledger.commit(
            OperationType.APPROVE, caller, (spender, amount),
            (Approval(owner=caller, spender=spender, amount=amount),),
        )
        return True

    def transfer_from(self, caller: str, source: str, to: str, amount: int) -> bool:
        """
        Move amount from source to to, spending caller's allowance on source.

        The allowance is checked before the balance: when both are short,
        InsufficientAllowance is raised. An allowance equal to
        UNLIMITED_ALLOWANCE is left untouched.

        Returns:
            True on success

        Raises:
            InsufficientAllowance: If allowance(source, caller) < amount
            InsufficientBalance: If the allowance suffices but source holds less than amount
        """
        validate_account(caller, "caller")
        validate_account(source, "source")
        validate_account(to, "to")
        validate_amount(amount)
        current = self.ledger.allowance(source, caller)
        try:
            if current < amount:
                raise InsufficientAllowance(caller, current, amount)
            balance = self.ledger.balance_of(source)
            if balance < amount:
                raise InsufficientBalance(source, balance, amount)
            self.ledger.move(source, to, amount)
        except TokenError as e:
            self.ledger.report_rejection(OperationType.TRANSFER_FROM, caller, e)
            raise

        if current != UNLIMITED_ALLOWANCE:
            self.ledger.set_allowance(source, caller, current - amount)
        self.ledger.commit(
            OperationType.TRANSFER_FROM, caller, (source, to, amount),
            (Transfer(source=source, dest=to, amount=amount),),
        )
        return True

    # ========================================================================
    # MINTING (Mutating)
    # ========================================================================

    def set_mint_amount(self, caller: str, amount: int) -> None:
        """Owner-only: set the per-mint amount (0 disables minting)."""
        self.minter.set_mint_amount(caller, amount)

    def mint(self, caller: str) -> None:
        """Claim the configured mint amount, at most once per cooldown interval."""
        self.minter.mint(caller)

    # ========================================================================
    # HISTORY
    # ========================================================================

    def clone(self) -> ProtoCoin:
        """Fully independent copy of the current state (subscribers excluded)."""
        return ProtoCoin.from_ledger(self.ledger.clone())

    def replay(self, until: Optional[datetime] = None) -> ProtoCoin:
        """
        Rebuild the token from genesis by re-executing the operation log.

        The replayed token starts from the same owner, initial time, initial
        supply and cooldown, and applies each logged operation at its
        execution time. Since every operation is deterministic, the result
        has identical balances, allowances, mint state and log.

        Args:
            until: If given, stop after the last operation executed at or
                   before this time.

        Returns:
            New ProtoCoin instance with replayed state
        """
        src = self.ledger
        replayed = ProtoCoin(
            src.owner,
            initial_time=src.initial_time,
            verbose=src.verbose,
            ledger_name=src.name,
            initial_supply=src.initial_supply,
            mint_cooldown=src.mint_cooldown,
        )
        for op in src.operation_log:
            if until is not None and op.execution_time > until:
                break
            replayed.advance_time(op.execution_time)
            method = getattr(replayed, _REPLAY_METHODS[op.op_type])
            method(op.caller, *op.args)
        return replayed

    def state_at(self, target_time: datetime) -> ProtoCoin:
        """
        Reconstruct the token as it was at target_time.

        Raises:
            ValueError: If target_time is in the future or before genesis
        """
        if target_time > self.ledger.current_time:
            raise ValueError(f"Target time {target_time} is in the future")
        if target_time < self.ledger.initial_time:
            raise ValueError(f"Target time {target_time} is before genesis")
        past = self.replay(until=target_time)
        past.advance_time(target_time)
        return past
