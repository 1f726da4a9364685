"""
test_mint.py - Unit tests for the mint controller

Tests:
- Pure status queries against FakeView
- set_mint_amount authorization
- mint gating (disabled, cooldown) and crediting
- Overflow during mint leaves cooldown untouched
"""

import pytest
from datetime import datetime, timedelta

from protocoin import (
    ProtoCoin, Transfer, OperationType, MintingState, MintStatus,
    Unauthorized, MintingDisabled, MintCooldownActive, ArithmeticOverflow,
    minting_state, mint_status, next_mint_time, can_mint,
    GENESIS_SUPPLY, MAX_UINT256,
)
from tests.fake_view import FakeView
from tests.helpers import T0, OWNER, ALICE, BOB, snapshot


DAY = timedelta(days=1)


class TestMintQueries:
    """Pure functions over a read-only view."""

    def test_disabled_when_amount_zero(self):
        assert minting_state(FakeView(mint_amount=0)) is MintingState.DISABLED

    def test_enabled_when_amount_positive(self):
        assert minting_state(FakeView(mint_amount=1)) is MintingState.ENABLED

    def test_never_minted(self):
        view = FakeView(mint_amount=100)
        assert mint_status(view, ALICE) is MintStatus.NEVER_MINTED
        assert next_mint_time(view, ALICE) is None
        assert can_mint(view, ALICE) is True

    def test_cooling(self):
        view = FakeView(mint_amount=100, last_mints={ALICE: T0}, time=T0 + timedelta(hours=23))
        assert mint_status(view, ALICE) is MintStatus.COOLING
        assert next_mint_time(view, ALICE) == T0 + DAY
        assert can_mint(view, ALICE) is False

    def test_cooled_down_at_exact_boundary(self):
        view = FakeView(mint_amount=100, last_mints={ALICE: T0}, time=T0 + DAY)
        assert mint_status(view, ALICE) is MintStatus.COOLED_DOWN
        assert can_mint(view, ALICE) is True

    def test_custom_cooldown(self):
        view = FakeView(mint_amount=100, last_mints={ALICE: T0},
                        time=T0 + timedelta(minutes=30), cooldown=timedelta(hours=1))
        assert mint_status(view, ALICE) is MintStatus.COOLING
        assert next_mint_time(view, ALICE) == T0 + timedelta(hours=1)

    def test_cannot_mint_while_disabled(self):
        view = FakeView(mint_amount=0)
        assert can_mint(view, ALICE) is False

    def test_cooldown_is_per_account(self):
        view = FakeView(mint_amount=100, last_mints={ALICE: T0}, time=T0)
        assert mint_status(view, ALICE) is MintStatus.COOLING
        assert mint_status(view, BOB) is MintStatus.NEVER_MINTED


class TestSetMintAmount:

    def test_owner_enables_minting(self, token):
        token.set_mint_amount(OWNER, 100)
        assert token.mint_amount == 100
        assert token.minting_state() is MintingState.ENABLED

    def test_non_owner_rejected(self, token):
        with pytest.raises(Unauthorized, match="You do not have permission."):
            token.set_mint_amount(ALICE, 100)
        assert token.mint_amount == 0
        assert token.operation_log == []

    def test_zero_disables_minting(self, minting_token):
        minting_token.set_mint_amount(OWNER, 0)
        assert minting_token.minting_state() is MintingState.DISABLED
        with pytest.raises(MintingDisabled):
            minting_token.mint(ALICE)

    def test_owner_can_change_amount(self, minting_token):
        minting_token.set_mint_amount(OWNER, 250)
        minting_token.mint(ALICE)
        assert minting_token.balance_of(ALICE) == 250

    def test_logged_without_events(self, token):
        token.set_mint_amount(OWNER, 100)
        op = token.operation_log[-1]
        assert op.op_type == OperationType.SET_MINT_AMOUNT
        assert op.args == (100,)
        assert op.events == ()

    def test_changing_amount_keeps_cooldown(self, minting_token):
        minting_token.mint(ALICE)
        minting_token.set_mint_amount(OWNER, 5)
        with pytest.raises(MintCooldownActive):
            minting_token.mint(ALICE)

    def test_invalid_amount(self, token):
        with pytest.raises(ValueError):
            token.set_mint_amount(OWNER, -5)


class TestMint:

    def test_disabled_by_default(self, token):
        with pytest.raises(MintingDisabled, match="Minting is not enabled."):
            token.mint(OWNER)

    def test_mint_credits_caller(self, minting_token):
        minting_token.mint(ALICE)
        assert minting_token.balance_of(ALICE) == 100
        assert minting_token.total_supply() == GENESIS_SUPPLY + 100

    def test_mint_emits_transfer_from_none(self, minting_token):
        minting_token.mint(ALICE)
        assert minting_token.events()[-1] == Transfer(None, ALICE, 100)

    def test_mint_records_time(self, minting_token):
        minting_token.mint(ALICE)
        assert minting_token.last_mint_time(ALICE) == T0
        assert minting_token.mint_status(ALICE) is MintStatus.COOLING
        assert minting_token.next_mint_time(ALICE) == T0 + DAY

    def test_second_mint_rejected(self, minting_token):
        minting_token.mint(OWNER)
        with pytest.raises(MintCooldownActive, match="You cannot mint twice in a row.") as exc_info:
            minting_token.mint(OWNER)
        assert exc_info.value.account == OWNER
        assert exc_info.value.available_at == T0 + DAY

    def test_rejected_mint_changes_nothing(self, minting_token):
        minting_token.mint(ALICE)
        before = snapshot(minting_token)
        with pytest.raises(MintCooldownActive):
            minting_token.mint(ALICE)
        assert snapshot(minting_token) == before

    def test_mint_after_cooldown(self, minting_token):
        minting_token.mint(OWNER)
        minting_token.advance_time(T0 + DAY)
        minting_token.mint(OWNER)
        assert minting_token.balance_of(OWNER) == GENESIS_SUPPLY + 200
        assert minting_token.last_mint_time(OWNER) == T0 + DAY

    def test_one_second_short(self, minting_token):
        minting_token.mint(OWNER)
        minting_token.advance_time(T0 + DAY - timedelta(seconds=1))
        with pytest.raises(MintCooldownActive):
            minting_token.mint(OWNER)

    def test_accounts_are_independent(self, minting_token):
        minting_token.mint(OWNER)
        minting_token.mint(ALICE)
        assert minting_token.balance_of(ALICE) == 100
        assert minting_token.balance_of(OWNER) == GENESIS_SUPPLY + 100

    def test_zero_cooldown_allows_back_to_back(self):
        coin = ProtoCoin(OWNER, T0, verbose=False, mint_cooldown=timedelta(0))
        coin.set_mint_amount(OWNER, 1)
        coin.mint(ALICE)
        coin.mint(ALICE)
        assert coin.balance_of(ALICE) == 2

    def test_overflow_leaves_cooldown_unset(self):
        coin = ProtoCoin(OWNER, T0, verbose=False, initial_supply=MAX_UINT256)
        coin.set_mint_amount(OWNER, 1)
        before = snapshot(coin)
        with pytest.raises(ArithmeticOverflow):
            coin.mint(ALICE)
        assert snapshot(coin) == before
        assert coin.last_mint_time(ALICE) is None

    def test_disabled_takes_precedence_over_cooldown(self, minting_token):
        minting_token.mint(ALICE)
        minting_token.set_mint_amount(OWNER, 0)
        with pytest.raises(MintingDisabled):
            minting_token.mint(ALICE)

    def test_minted_tokens_are_transferable(self, minting_token):
        minting_token.mint(ALICE)
        minting_token.transfer(ALICE, BOB, 100)
        assert minting_token.balance_of(BOB) == 100
