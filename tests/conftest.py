"""
conftest.py - Shared pytest fixtures for ProtoCoin tests

Provides common fixtures used across unit, conformance and functional tests:
- Fresh tokens at genesis (quiet, fixed start time)
- Funded tokens with balances spread over several accounts
- Tokens with minting enabled
"""

import pytest

from protocoin import ProtoCoin

from tests.helpers import T0, OWNER, ALICE, BOB


# =============================================================================
# BASIC FIXTURES
# =============================================================================

@pytest.fixture
def token():
    """Token at genesis: owner holds the whole 100 PRC supply."""
    return ProtoCoin(OWNER, T0, verbose=False)


@pytest.fixture
def funded_token(token):
    """Token where owner has sent 1000 base units to alice and 500 to bob."""
    token.transfer(OWNER, ALICE, 1000)
    token.transfer(OWNER, BOB, 500)
    return token


# =============================================================================
# MINTING FIXTURES
# =============================================================================

@pytest.fixture
def minting_token(token):
    """Token with a mint amount of 100 base units."""
    token.set_mint_amount(OWNER, 100)
    return token
