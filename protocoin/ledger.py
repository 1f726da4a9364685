"""
ledger.py - Stateful Token Ledger Store

The TokenLedger class is the central state manager for the token.
It is the only module that mutates state, ensuring controlled and auditable changes.

Key responsibilities:
    - Implements LedgerView protocol for safe read-only access by pure functions
    - Owns balances, allowances, total supply, owner and mint configuration
    - Provides the two balance primitives: credit (mint path) and move (transfers)
    - Tracks logical time (advance_time only moves forward)
    - Logs every committed operation and publishes its notifications
"""

from __future__ import annotations
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple, Any

from .core import (
    # Types
    Operation, OperationType, Event, Transfer,
    Balances, Allowances,
    # Constants
    MAX_UINT256, GENESIS_SUPPLY, GENESIS_TIME, DEFAULT_MINT_COOLDOWN,
    # Exceptions
    InsufficientBalance, ArithmeticOverflow, TokenError, NotificationError,
    # Validation
    validate_account, validate_amount,
)
from .events import EventBus, EventHandler


class TokenLedger:
    """
    Balance and allowance store with conservation checks and an audit trail.

    Implements the LedgerView protocol, allowing the ledger to be passed to pure
    functions that access only read-only methods.

    Design Principles:
        - Always validates: credit and move check every precondition before
          touching any balance, so a raised error leaves state unchanged.
        - Always logs: every committed operation is appended to operation_log
          and its notifications are delivered to subscribers.

    Thread Safety:
        Not thread-safe. Operations are serialized by the caller.

    Example:
        ledger = TokenLedger("owner")
        ledger.move("owner", "alice", 5)
        ledger.balance_of("alice")  # 5
    """

    def __init__(
        self,
        owner: str,
        initial_time: Optional[datetime] = None,
        verbose: bool = True,
        name: str = "main",
        initial_supply: int = GENESIS_SUPPLY,
        mint_cooldown: timedelta = DEFAULT_MINT_COOLDOWN,
    ):
        """
        Create a ledger at genesis.

        Args:
            owner: Account that receives the whole initial supply and may
                   configure minting. Fixed for the ledger's lifetime.
            initial_time: Starting time for the ledger (default: 1970-01-01)
            verbose: Print a receipt for each committed operation (default: True)
            name: Ledger identifier, part of every exec_id
            initial_supply: Base units credited to owner at genesis
            mint_cooldown: Minimum time between two mints by one account
        """
        validate_account(owner, "owner")
        validate_amount(initial_supply, "initial_supply")
        if not isinstance(mint_cooldown, timedelta) or mint_cooldown < timedelta(0):
            raise ValueError(f"mint_cooldown must be a non-negative timedelta, got {mint_cooldown!r}")

        self.name = name
        self.verbose = verbose
        self._owner = owner
        self._current_time: datetime = initial_time or GENESIS_TIME
        self._initial_time: datetime = self._current_time
        self._initial_supply = initial_supply
        self._mint_cooldown = mint_cooldown

        self.balances: Balances = {}
        self.allowances: Allowances = {}
        self._total_supply: int = 0
        self._mint_amount: int = 0
        self._last_mint: Dict[str, datetime] = {}

        self.operation_log: List[Operation] = []
        self._next_sequence: int = 0
        self._bus = EventBus()

        # Genesis: the whole initial supply is minted to the owner. It is not
        # an operation, but indexers still see it as the first Transfer.
        self.credit(owner, initial_supply)
        self.genesis_events: Tuple[Event, ...] = (
            Transfer(source=None, dest=owner, amount=initial_supply),
        )

    # ========================================================================
    # LedgerView PROTOCOL IMPLEMENTATION (read-only methods)
    # ========================================================================

    @property
    def current_time(self) -> datetime:
        """Current logical time of the ledger."""
        return self._current_time

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def mint_amount(self) -> int:
        return self._mint_amount

    @property
    def mint_cooldown(self) -> timedelta:
        return self._mint_cooldown

    @property
    def initial_time(self) -> datetime:
        return self._initial_time

    @property
    def initial_supply(self) -> int:
        return self._initial_supply

    def balance_of(self, account: str) -> int:
        """Balance of an account in base units (0 if it never held tokens)."""
        return self.balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        """Remaining amount spender may move out of owner's balance (0 if unset)."""
        return self.allowances.get((owner, spender), 0)

    def total_supply(self) -> int:
        return self._total_supply

    def last_mint_time(self, account: str) -> Optional[datetime]:
        """Time of the account's most recent mint, or None if it never minted."""
        return self._last_mint.get(account)

    def holders(self) -> Dict[str, int]:
        """
        All accounts with a non-zero balance.

        Returns a new dict sorted by account ID; mutating it does not affect
        the ledger.
        """
        return {a: b for a, b in sorted(self.balances.items()) if b}

    def events(self) -> List[Event]:
        """
        Flattened notification stream from genesis, in order.

        Starts with the genesis mint, followed by the events of every logged
        operation. Replaying it from empty balances reproduces holders().
        """
        return [*self.genesis_events, *(e for op in self.operation_log for e in op.events)]

    def verify_supply(self) -> Dict[str, Any]:
        """
        Verify the conservation invariant: sum of balances equals total supply.

        Accounts are sorted before summation to ensure deterministic
        accumulation order.

        Returns:
            Dict with keys:
            - 'valid': bool - True if the invariant holds
            - 'total_supply': int - recorded total supply
            - 'sum_of_balances': int - sum over every account
            - 'difference': int - sum_of_balances - total_supply

        Example:
            result = ledger.verify_supply()
            assert result['valid'], f"Conservation violated: {result}"
        """
        total = sum(self.balances[a] for a in sorted(self.balances))
        return {
            'valid': total == self._total_supply,
            'total_supply': self._total_supply,
            'sum_of_balances': total,
            'difference': total - self._total_supply,
        }

    # ========================================================================
    # TIME MANAGEMENT
    # ========================================================================

    def advance_time(self, new_time: datetime) -> None:
        """
        Advance the ledger's logical clock to a new time.

        Time can only move forward, never backward.

        Raises:
            ValueError: If new_time is before the current time
        """
        if new_time < self._current_time:
            raise ValueError(
                f"Cannot move time backwards: {new_time} < {self._current_time}"
            )
        self._current_time = new_time

    # ========================================================================
    # PRIMITIVES (Mutating)
    # ========================================================================

    def credit(self, account: str, amount: int) -> None:
        """
        Create amount new base units in account, growing the total supply.

        Used exclusively by genesis and the mint path.

        Raises:
            ArithmeticOverflow: If the supply or the balance would exceed 2**256 - 1
        """
        validate_account(account)
        validate_amount(amount)
        new_supply = self._total_supply + amount
        new_balance = self.balance_of(account) + amount
        if new_supply > MAX_UINT256:
            raise ArithmeticOverflow(f"Total supply would exceed 2**256 - 1 (credit {amount})")
        if new_balance > MAX_UINT256:
            raise ArithmeticOverflow(f"Balance of {account} would exceed 2**256 - 1")
        self._total_supply = new_supply
        self.balances[account] = new_balance

    def move(self, source: str, dest: str, amount: int) -> None:
        """
        Debit source and credit dest by amount; total supply is unchanged.

        A zero amount and a self-move are both valid and leave balances as
        they are.

        Raises:
            InsufficientBalance: If source holds less than amount
            ArithmeticOverflow: If dest's balance would exceed 2**256 - 1
        """
        validate_account(source, "source")
        validate_account(dest, "dest")
        validate_amount(amount)
        src_balance = self.balance_of(source)
        if src_balance < amount:
            raise InsufficientBalance(source, src_balance, amount)
        if source == dest:
            return
        dst_balance = self.balance_of(dest) + amount
        if dst_balance > MAX_UINT256:
            raise ArithmeticOverflow(f"Balance of {dest} would exceed 2**256 - 1")
        self.balances[source] = src_balance - amount
        self.balances[dest] = dst_balance

    def set_allowance(self, owner: str, spender: str, amount: int) -> None:
        """Overwrite allowance[owner][spender] with amount (no delta semantics)."""
        validate_account(owner, "owner")
        validate_account(spender, "spender")
        validate_amount(amount)
        self.allowances[(owner, spender)] = amount

    def set_mint_amount(self, amount: int) -> None:
        """Store the global mint amount. Authorization is the controller's job."""
        self._mint_amount = validate_amount(amount)

    def record_mint(self, account: str, timestamp: datetime) -> None:
        """Remember when account last minted."""
        self._last_mint[validate_account(account)] = timestamp

    # ========================================================================
    # AUDIT TRAIL
    # ========================================================================

    def subscribe(self, handler: EventHandler) -> EventHandler:
        """Deliver every future Transfer/Approval notification to handler."""
        return self._bus.subscribe(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        self._bus.unsubscribe(handler)

    def commit(
        self,
        op_type: OperationType,
        caller: str,
        args: Tuple[Any, ...],
        events: Tuple[Event, ...] = (),
    ) -> Operation:
        """
        Record a completed operation and publish its notifications.

        Called by the engine and the mint controller once all of an
        operation's mutations are applied. The operation stays committed
        even if a subscriber fails.

        Raises:
            NotificationError: If any subscriber raised while handling the
                               operation's notifications
        """
        op = Operation(
            sequence_number=self._next_sequence,
            op_type=op_type,
            caller=caller,
            args=tuple(args),
            execution_time=self._current_time,
            events=tuple(events),
            ledger_name=self.name,
        )
        self._next_sequence += 1
        self.operation_log.append(op)
        if self.verbose:
            print(repr(op))
            print("✓ APPLIED")
        try:
            self._bus.publish(op.events, operation=op)
        except NotificationError as e:
            if self.verbose:
                print(f"⚠ NOTIFY FAILED: {e}")
            raise
        return op

    def report_rejection(self, op_type: OperationType, caller: Any, error: TokenError) -> None:
        """Print a rejected operation when verbose. The error is still raised by the caller."""
        if self.verbose:
            print(f"✗ REJECTED: {op_type.value} by {caller}: {error}")

    # ========================================================================
    # LEDGER OPERATIONS
    # ========================================================================

    def clone(self) -> TokenLedger:
        """
        Create a deep copy of this ledger.

        All state is fully independent: modifications to the clone will not
        affect the original ledger, and vice versa. Subscribers are not
        copied; the clone starts with none.
        """
        cloned = TokenLedger.__new__(TokenLedger)
        cloned.name = self.name
        cloned.verbose = self.verbose
        cloned._owner = self._owner
        cloned._current_time = self._current_time
        cloned._initial_time = self._initial_time
        cloned._initial_supply = self._initial_supply
        cloned.genesis_events = self.genesis_events
        cloned._mint_cooldown = self._mint_cooldown

        # Keys and values are immutable; shallow dict copies are independent
        cloned.balances = dict(self.balances)
        cloned.allowances = dict(self.allowances)
        cloned._total_supply = self._total_supply
        cloned._mint_amount = self._mint_amount
        cloned._last_mint = dict(self._last_mint)

        cloned.operation_log = list(self.operation_log)
        cloned._next_sequence = self._next_sequence
        cloned._bus = EventBus()
        return cloned
