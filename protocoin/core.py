"""
Core types and pure functions for the ProtoCoin token ledger.

This module provides the foundational data structures and protocols for the token:
1. Protocols: LedgerView for read-only ledger access
2. Immutable data structures: Transfer, Approval, Operation
3. Exceptions: TokenError and the caller-visible rejection kinds
4. Amount validation and fixed-point unit conversion

All functions in this module are pure and operate on read-only views.
No function can mutate ledger state directly.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_DOWN, InvalidOperation, localcontext
from enum import Enum
import hashlib
from typing import (
    Dict, List, Optional, Any, Protocol, Tuple, Union, runtime_checkable
)


# ============================================================================
# CONSTANTS
# ============================================================================

TOKEN_NAME = "ProtoCoin"
TOKEN_SYMBOL = "PRC"
DECIMALS = 18

# One whole token expressed in base units.
ONE_TOKEN = 10 ** DECIMALS

# Supply credited to the owner at genesis: 100 PRC.
GENESIS_SUPPLY = 100 * ONE_TOKEN

# Amounts are unsigned 256-bit integers.
MAX_UINT256 = 2 ** 256 - 1

# An allowance at this value is never decremented by transfer_from.
UNLIMITED_ALLOWANCE = MAX_UINT256

# Minimum elapsed time between two successful mints by the same account.
DEFAULT_MINT_COOLDOWN = timedelta(days=1)

# Default logical time of a fresh ledger.
GENESIS_TIME = datetime(1970, 1, 1)


# ============================================================================
# TYPE ALIASES
# ============================================================================

# Mapping from account ID to balance in base units.
Balances = Dict[str, int]

# Mapping from (owner, spender) to remaining allowance.
Allowances = Dict[Tuple[str, str], int]

Amount = int


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class LedgerView(Protocol):
    """
    Read-only interface to token ledger state.

    Mint status queries and test doubles work against this protocol. The
    TokenLedger class implements it but also provides mutation primitives;
    FakeView in the test suite is a truly immutable implementation.
    """

    @property
    def current_time(self) -> datetime:
        """Return the current logical time of the ledger."""
        ...

    @property
    def owner(self) -> str:
        """Return the account fixed as owner at genesis."""
        ...

    @property
    def mint_amount(self) -> int:
        """Return the configured mint amount (0 means minting is disabled)."""
        ...

    @property
    def mint_cooldown(self) -> timedelta:
        """Return the per-account cooldown interval between mints."""
        ...

    def balance_of(self, account: str) -> int:
        """Return the balance of an account, 0 if it has never held tokens."""
        ...

    def allowance(self, owner: str, spender: str) -> int:
        """Return what spender may still draw from owner, 0 if never approved."""
        ...

    def total_supply(self) -> int:
        """Return the total supply in base units."""
        ...

    def last_mint_time(self, account: str) -> Optional[datetime]:
        """Return the time of the account's latest mint, or None if never minted."""
        ...


# ============================================================================
# ENUMS
# ============================================================================

class OperationType(Enum):
    """Kind of a committed operation in the operation log."""
    TRANSFER = "transfer"
    APPROVE = "approve"
    TRANSFER_FROM = "transfer_from"
    SET_MINT_AMOUNT = "set_mint_amount"
    MINT = "mint"


class MintingState(Enum):
    """
    Global minting configuration.

    DISABLED: mint amount is zero (the genesis state).
    ENABLED: mint amount is positive; the owner may change it at any time.
    """
    DISABLED = "disabled"
    ENABLED = "enabled"


class MintStatus(Enum):
    """
    Per-account mint sub-state.

    NEVER_MINTED: the account has no recorded mint.
    COOLED_DOWN: at least one cooldown interval has passed since the last mint.
    COOLING: the last mint is more recent than one cooldown interval.
    """
    NEVER_MINTED = "never_minted"
    COOLED_DOWN = "cooled_down"
    COOLING = "cooling"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class TokenError(Exception):
    """Base exception for all rejected token operations."""
    pass


class InsufficientBalance(TokenError):
    """Raised when an account's balance is smaller than the amount it must send."""

    def __init__(self, sender: str, balance: int, needed: int):
        self.sender = sender
        self.balance = balance
        self.needed = needed
        super().__init__(
            f"Insufficient balance: {sender} holds {balance}, needs {needed}"
        )


class InsufficientAllowance(TokenError):
    """Raised when a spender's allowance is smaller than the amount it tries to move."""

    def __init__(self, spender: str, allowance: int, needed: int):
        self.spender = spender
        self.allowance = allowance
        self.needed = needed
        super().__init__(
            f"Insufficient allowance: {spender} may spend {allowance}, needs {needed}"
        )


class Unauthorized(TokenError):
    """Raised when a non-owner calls an owner-only operation."""

    def __init__(self, caller: Optional[str] = None):
        self.caller = caller
        super().__init__("You do not have permission.")


class MintingDisabled(TokenError):
    """Raised when mint is called while the mint amount is zero."""

    def __init__(self):
        super().__init__("Minting is not enabled.")


class MintCooldownActive(TokenError):
    """Raised when an account mints again before its cooldown interval elapsed."""

    def __init__(self, account: Optional[str] = None, available_at: Optional[datetime] = None):
        self.account = account
        self.available_at = available_at
        super().__init__("You cannot mint twice in a row.")


class ArithmeticOverflow(TokenError):
    """Raised when a credit would push a balance or the supply past 2**256 - 1."""
    pass


class NotificationError(Exception):
    """
    Raised after delivery when one or more subscribers failed.

    Not a TokenError: the operation that emitted the notifications has
    already committed and must not be retried. Every subscriber still
    received every notification.

    Attributes:
        failures: (handler, event, exception) for each failed delivery
        operation: The committed Operation, when raised by a ledger commit
    """

    def __init__(self, failures: List[Tuple[Any, Any, Exception]], operation: Any = None):
        self.failures = failures
        self.operation = operation
        first = failures[0][2]
        committed = f" after {operation.exec_id} committed" if operation is not None else ""
        super().__init__(
            f"{len(failures)} subscriber failure(s){committed}: {first!r}"
        )


# ============================================================================
# VALIDATION
# ============================================================================

def validate_account(account: Any, label: str = "account") -> str:
    """Return the account ID unchanged, or raise ValueError if it is not a non-empty string."""
    if not isinstance(account, str) or not account.strip():
        raise ValueError(f"{label} must be a non-empty string, got {account!r}")
    return account


def validate_amount(amount: Any, label: str = "amount") -> int:
    """
    Return the amount unchanged, or raise ValueError.

    Valid amounts are plain integers in [0, 2**256 - 1]. Booleans, floats and
    Decimals are rejected so that no fractional base unit can reach a balance.
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValueError(f"{label} must be an int, got {type(amount).__name__}")
    if amount < 0:
        raise ValueError(f"{label} must be non-negative, got {amount}")
    if amount > MAX_UINT256:
        raise ValueError(f"{label} exceeds 2**256 - 1")
    return amount


# ============================================================================
# UNIT CONVERSION
# ============================================================================

def to_base_units(value: Union[Decimal, str, int]) -> int:
    """
    Convert a human amount of PRC to base units.

    Args:
        value: Amount in whole tokens, e.g. Decimal("1.5"), "0.25" or 3.

    Returns:
        The amount scaled by 10**18 as an int.

    Raises:
        ValueError: If the value is negative, not a number, or carries more
                    than 18 fractional digits.

    Example:
        to_base_units("1.5")  # 1500000000000000000
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise ValueError(f"Pass a Decimal, str or int, got {type(value).__name__}")
    try:
        d = Decimal(value)
    except InvalidOperation:
        raise ValueError(f"Not a number: {value!r}") from None
    if not d.is_finite():
        raise ValueError(f"Amount must be finite, got {value!r}")
    with localcontext() as ctx:
        ctx.prec = 100
        scaled = d.scaleb(DECIMALS)
        if scaled != scaled.to_integral_value(rounding=ROUND_DOWN):
            raise ValueError(f"{value!r} has more than {DECIMALS} decimal places")
        result = int(scaled)
    return validate_amount(result)


def from_base_units(amount: int) -> Decimal:
    """Convert base units back to whole tokens, e.g. 10**18 -> Decimal("1")."""
    validate_amount(amount)
    with localcontext() as ctx:
        ctx.prec = 100
        return (Decimal(amount).scaleb(-DECIMALS)).normalize()


# ============================================================================
# NOTIFICATIONS
# ============================================================================

@dataclass(frozen=True, slots=True)
class Transfer:
    """
    Notification that value moved between accounts.

    Attributes:
        source: Debited account, or None when new supply is minted.
        dest: Credited account.
        amount: Base units moved.
    """
    source: Optional[str]
    dest: Optional[str]
    amount: int

    def __repr__(self) -> str:
        src = self.source if self.source is not None else "<mint>"
        return f"Transfer({self.amount}: {src}→{self.dest})"


@dataclass(frozen=True, slots=True)
class Approval:
    """Notification that owner set spender's allowance to amount."""
    owner: str
    spender: str
    amount: int

    def __repr__(self) -> str:
        return f"Approval({self.owner}→{self.spender} = {self.amount})"


Event = Union[Transfer, Approval]


# ============================================================================
# OPERATION RECORD
# ============================================================================

def _compute_exec_id(
    ledger_name: str,
    sequence: int,
    op_type: OperationType,
    caller: str,
    args: Tuple[Any, ...],
) -> str:
    """
    Deterministic identifier of a committed operation.

    Derived from the ledger name, the sequence number and the call itself, so a
    replayed ledger assigns the same IDs to the same operations.
    """
    content = "|".join([
        ledger_name,
        f"{sequence:012d}",
        op_type.value,
        caller,
        *(str(a) for a in args),
    ])
    digest = hashlib.sha256(content.encode()).hexdigest()[:16]
    return f"op:{sequence:012d}:{digest}"


@dataclass(frozen=True, slots=True)
class Operation:
    """
    An executed, immutable record of one committed public operation.

    Attributes:
        sequence_number: Monotonic position within the ledger's log
        op_type: Which public operation ran
        caller: Account that invoked it
        args: Positional arguments after the caller, e.g. (to, amount)
        execution_time: Ledger time at which it committed
        events: Notifications it emitted, in order
        exec_id: Deterministic identifier (auto-computed when empty)
        ledger_name: Name of the ledger that executed it
    """
    sequence_number: int
    op_type: OperationType
    caller: str
    args: Tuple[Any, ...]
    execution_time: datetime
    events: Tuple[Event, ...] = ()
    ledger_name: str = "main"
    exec_id: str = field(default="")

    def __post_init__(self):
        if self.sequence_number < 0:
            raise ValueError("sequence_number must be non-negative")
        if not self.exec_id:
            object.__setattr__(self, 'exec_id', _compute_exec_id(
                self.ledger_name, self.sequence_number, self.op_type, self.caller, self.args
            ))

    def __repr__(self) -> str:
        w = 80
        bar = "─" * w

        def pad(text: str) -> str:
            if len(text) > w:
                return text[:w-3] + "..."
            return text + " " * (w - len(text))

        args = ", ".join(str(a) for a in self.args)
        lines = [
            f"┌{bar}┐",
            f"│{pad(' Operation: ' + self.exec_id)}│",
            f"├{bar}┤",
            f"│{pad('   call      : ' + self.op_type.value + '(' + args + ')')}│",
            f"│{pad('   caller    : ' + self.caller)}│",
            f"│{pad('   executed  : ' + str(self.execution_time))}│",
            f"│{pad('   sequence  : ' + str(self.sequence_number))}│",
        ]
        if self.events:
            lines.append(f"├{bar}┤")
            lines.append(f"│{pad(' Events (' + str(len(self.events)) + '):')}│")
            for i, event in enumerate(self.events):
                lines.append(f"│{pad(f'   [{i}] {event!r}')}│")
        lines.append(f"└{bar}┘")
        return "\n".join(lines)
