"""
Tests for the swap submission flow: validation, balance check, primary transfer,
independent donation transfer and fire-and-forget ledger recording.

RPC is a FakeRpc (conftest); the ledger client is a MagicMock.
"""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from backend_givefi.core.exceptions import LedgerServiceError
from backend_givefi.widget.context import DonationContext
from backend_givefi.widget.flow import SwapFlow
from backend_givefi.widget.ledger_client import LedgerClient

SWAP_WALLET = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"
DONATION_WALLET = "BivYS3FohCDzhNCV52Qkf59crbzmqkjUQqnCkQ9Bqpcx"
RICH = 10_000_000_000


@pytest.fixture
def ledger():
    return MagicMock(spec=LedgerClient)


@pytest.fixture
def context(ledger):
    ctx = DonationContext(ledger=ledger, default_amount=Decimal("0.01"), default_recipient=DONATION_WALLET)
    ctx.is_donating = True
    return ctx


def _flow(rpc, context, signer=None):
    return SwapFlow(rpc, signer or Keypair(), context, swap_recipient=SWAP_WALLET, fee_buffer_sol=Decimal("0.001"))


def _titles(outcome):
    return [n.title for n in outcome.notices]


def test_swap_without_donation(fake_rpc_factory, context, ledger):
    context.is_donating = False
    rpc = fake_rpc_factory(RICH)
    outcome = _flow(rpc, context).submit("0.5")
    assert outcome.succeeded
    assert outcome.donation is None
    assert len(rpc.sent) == 1
    assert outcome.primary.lamports == 500_000_000
    assert _titles(outcome) == ["Transaction Submitted"]
    assert outcome.notices[-1].description == "Swap completed! Sent 0.50 SOL"
    assert "explorer.solana.com/tx/" in outcome.notices[-1].link
    ledger.record_donation.assert_not_called()


def test_swap_with_donation_sends_two_transactions(fake_rpc_factory, context, ledger):
    rpc = fake_rpc_factory(RICH)
    signer = Keypair()
    outcome = _flow(rpc, context, signer).submit("1")
    assert outcome.succeeded
    assert outcome.donation is not None and outcome.donation.ok
    assert outcome.donation.lamports == 10_000_000
    assert len(rpc.sent) == 2
    assert Pubkey.from_string(SWAP_WALLET) in rpc.sent[0].message.account_keys
    assert Pubkey.from_string(DONATION_WALLET) in rpc.sent[1].message.account_keys
    assert Pubkey.from_string(DONATION_WALLET) not in rpc.sent[0].message.account_keys
    ledger.record_donation.assert_called_once_with(
        str(signer.pubkey()), DONATION_WALLET, Decimal("0.01"), outcome.donation.signature
    )
    assert _titles(outcome) == ["Donation Sent", "Donation Recorded", "Transaction Submitted"]
    assert "+ 0.01 SOL donation" in outcome.notices[-1].description


def test_donation_failure_keeps_primary_success(fake_rpc_factory, context, ledger):
    """A failed donation after a successful swap leaves the swap result untouched."""
    rpc = fake_rpc_factory(RICH, fail_on=(2,))
    outcome = _flow(rpc, context).submit("1")
    assert outcome.succeeded
    assert outcome.primary.ok
    assert outcome.primary.error is None
    assert outcome.donation is not None
    assert not outcome.donation.ok
    assert "simulation failed" in outcome.donation.error
    assert len(rpc.sent) == 1
    failed = [n for n in outcome.notices if n.title == "Donation Failed"]
    assert len(failed) == 1
    assert failed[0].is_error
    assert "swap was successful" in failed[0].description
    assert outcome.notices[-1].title == "Transaction Submitted"
    assert outcome.notices[-1].description == "Swap completed! Sent 1.00 SOL"
    ledger.record_donation.assert_not_called()


def test_ledger_failure_is_not_fatal(fake_rpc_factory, context, ledger):
    ledger.record_donation.side_effect = LedgerServiceError("ledger down")
    rpc = fake_rpc_factory(RICH)
    outcome = _flow(rpc, context).submit("1")
    assert outcome.succeeded
    assert outcome.donation.ok
    assert "Donation Recording Error" in _titles(outcome)


def test_primary_failure_skips_donation(fake_rpc_factory, context, ledger):
    rpc = fake_rpc_factory(RICH, fail_on=(1,))
    outcome = _flow(rpc, context).submit("1")
    assert not outcome.succeeded
    assert outcome.primary is not None and not outcome.primary.ok
    assert outcome.donation is None
    assert rpc.attempts == 1
    assert _titles(outcome) == ["Transaction Failed"]
    ledger.record_donation.assert_not_called()


def test_insufficient_balance_blocks_submission(fake_rpc_factory, context):
    rpc = fake_rpc_factory(1_010_000_000)  # 1 SOL + donation, short of the fee buffer
    outcome = _flow(rpc, context).submit("1")
    assert outcome.primary is None
    assert rpc.attempts == 0
    assert _titles(outcome) == ["Insufficient Balance"]
    assert "You need 1.011 SOL" in outcome.notices[0].description


def test_balance_check_ignores_disabled_donation(fake_rpc_factory, context):
    context.is_donating = False
    rpc = fake_rpc_factory(1_001_000_000)
    outcome = _flow(rpc, context).submit("1")
    assert outcome.succeeded


@pytest.mark.parametrize("text", ["", "abc", "0", "-2"])
def test_invalid_amount_no_network(fake_rpc_factory, context, text):
    rpc = fake_rpc_factory(RICH)
    outcome = _flow(rpc, context).submit(text)
    assert outcome.primary is None
    assert rpc.balance_calls == 0
    assert _titles(outcome) == ["Invalid Amount"]


@pytest.mark.parametrize("text", ["100000000000", "1e30"])
def test_oversized_amount_is_invalid_amount(fake_rpc_factory, context, text):
    rpc = fake_rpc_factory(RICH)
    outcome = _flow(rpc, context).submit(text)
    assert outcome.primary is None
    assert rpc.balance_calls == 0
    assert rpc.attempts == 0
    assert _titles(outcome) == ["Invalid Amount"]
    assert "too large" in outcome.notices[0].description


def test_sub_lamport_amount_is_invalid_amount(fake_rpc_factory, context):
    rpc = fake_rpc_factory(RICH)
    outcome = _flow(rpc, context).submit("0.0000000001")
    assert outcome.primary is None
    assert rpc.balance_calls == 0
    assert _titles(outcome) == ["Invalid Amount"]
    assert "lamport" in outcome.notices[0].description


def test_invalid_recipient_fails_before_network(fake_rpc_factory, context):
    rpc = fake_rpc_factory(RICH)
    flow = SwapFlow(rpc, Keypair(), context, swap_recipient=SWAP_WALLET[:20])
    outcome = flow.submit("1")
    assert rpc.balance_calls == 0
    assert _titles(outcome) == ["Invalid Address"]


def test_balance_unavailable(fake_rpc_factory, context):
    rpc = fake_rpc_factory(RICH, balance_error=True)
    outcome = _flow(rpc, context).submit("1")
    assert rpc.attempts == 0
    assert _titles(outcome) == ["Balance Unavailable"]


def test_balance_refreshed_after_swap(fake_rpc_factory, context):
    context.is_donating = False
    rpc = fake_rpc_factory(RICH)
    flow = _flow(rpc, context)
    flow.submit("1")
    assert flow.sol_balance_lamports == RICH
    assert rpc.balance_calls == 2
