"""
protocoin - ProtoCoin Token Ledger

A fungible 18-decimal token: balances, allowances and time-gated
self-service minting on top of an always-validating, always-logging ledger.

Usage:
    from datetime import timedelta
    from protocoin import ProtoCoin

    coin = ProtoCoin("owner", verbose=False)
    coin.transfer("owner", "alice", 10)

    coin.approve("alice", "bob", 5)
    coin.transfer_from("bob", "alice", "carol", 5)

    coin.set_mint_amount("owner", 100)
    coin.mint("alice")
    coin.advance_time(coin.current_time + timedelta(days=1))
    coin.mint("alice")
"""

# Core types
from .core import (
    LedgerView,
    Transfer,
    Approval,
    Event,
    Operation,
    OperationType,
    MintingState,
    MintStatus,
    TokenError,
    InsufficientBalance,
    InsufficientAllowance,
    Unauthorized,
    MintingDisabled,
    MintCooldownActive,
    ArithmeticOverflow,
    NotificationError,
    validate_account,
    validate_amount,
    to_base_units,
    from_base_units,
    TOKEN_NAME,
    TOKEN_SYMBOL,
    DECIMALS,
    ONE_TOKEN,
    GENESIS_SUPPLY,
    GENESIS_TIME,
    MAX_UINT256,
    UNLIMITED_ALLOWANCE,
    DEFAULT_MINT_COOLDOWN,
)

# Notifications
from .events import EventBus, EventHandler

# Ledger store
from .ledger import TokenLedger

# Minting
from .mint import (
    MintController,
    minting_state,
    mint_status,
    next_mint_time,
    can_mint,
)

# Public surface
from .token import ProtoCoin


__all__ = [
    # Core
    'LedgerView', 'Transfer', 'Approval', 'Event', 'Operation', 'OperationType',
    'MintingState', 'MintStatus',
    'TokenError', 'InsufficientBalance', 'InsufficientAllowance', 'Unauthorized',
    'MintingDisabled', 'MintCooldownActive', 'ArithmeticOverflow', 'NotificationError',
    'validate_account', 'validate_amount', 'to_base_units', 'from_base_units',
    'TOKEN_NAME', 'TOKEN_SYMBOL', 'DECIMALS', 'ONE_TOKEN', 'GENESIS_SUPPLY',
    'GENESIS_TIME', 'MAX_UINT256', 'UNLIMITED_ALLOWANCE', 'DEFAULT_MINT_COOLDOWN',
    # Events
    'EventBus', 'EventHandler',
    # Ledger
    'TokenLedger',
    # Minting
    'MintController', 'minting_state', 'mint_status', 'next_mint_time', 'can_mint',
    # Token
    'ProtoCoin',
]

__version__ = '1.0.0'
