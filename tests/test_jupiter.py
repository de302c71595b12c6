"""
Tests for the Jupiter v6 quote/swap client. HTTP is mocked.
"""

from __future__ import annotations

import base64
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
import requests
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import Message
from solders.transaction import VersionedTransaction

from backend_givefi.core.exceptions import SwapServiceError
from backend_givefi.swap.jupiter import SOL_MINT, USDC_MINT, create_jupiter_swap_transaction, get_jupiter_quote
from backend_givefi.transactions.composer import build_transfer_instruction

VALID_WALLET = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"

QUOTE = {
    "inAmount": "1000000000",
    "outAmount": "133540000",
    "otherAmountThreshold": "990000000",
    "inputMint": SOL_MINT,
    "outputMint": USDC_MINT,
}


def _ok(payload) -> MagicMock:
    resp = MagicMock(ok=True, status_code=200, reason="OK")
    resp.json.return_value = payload
    return resp


def test_quote_parsed():
    with patch("backend_givefi.swap.jupiter.requests.request", return_value=_ok(QUOTE)) as req:
        q = get_jupiter_quote(1, api_base="https://jup.test/v6")
    assert q.usdc_amount == Decimal("133.54")
    assert q.fee == Decimal("0.01")
    assert q.quote_response == QUOTE
    method, url = req.call_args[0]
    assert method == "GET"
    assert url == "https://jup.test/v6/quote"
    params = req.call_args[1]["params"]
    assert params["amount"] == 1_000_000_000
    assert params["slippageBps"] == 100
    assert params["inputMint"] == SOL_MINT


def test_quote_without_threshold_has_zero_fee():
    payload = {"inAmount": "500000000", "outAmount": "66000000"}
    with patch("backend_givefi.swap.jupiter.requests.request", return_value=_ok(payload)):
        q = get_jupiter_quote("0.5")
    assert q.fee == Decimal(0)
    assert q.usdc_amount == Decimal("66")


def test_quote_http_error():
    resp = MagicMock(ok=False, status_code=429, reason="Too Many Requests")
    with patch("backend_givefi.swap.jupiter.requests.request", return_value=resp):
        with pytest.raises(SwapServiceError, match="429"):
            get_jupiter_quote(1)


def test_quote_network_error():
    with patch("backend_givefi.swap.jupiter.requests.request", side_effect=requests.ConnectionError("dns")):
        with pytest.raises(SwapServiceError):
            get_jupiter_quote(1)


def test_quote_malformed():
    with patch("backend_givefi.swap.jupiter.requests.request", return_value=_ok({"inAmount": "1"})):
        with pytest.raises(SwapServiceError, match="Malformed"):
            get_jupiter_quote(1)


def test_swap_transaction_decoded():
    kp = Keypair()
    ix = build_transfer_instruction(kp.pubkey(), VALID_WALLET, 1)
    vtx = VersionedTransaction(Message.new_with_blockhash([ix], kp.pubkey(), Hash.default()), [kp])
    encoded = base64.b64encode(bytes(vtx)).decode()
    with patch(
        "backend_givefi.swap.jupiter.requests.request",
        side_effect=[_ok(QUOTE), _ok({"swapTransaction": encoded})],
    ) as req:
        tx = create_jupiter_swap_transaction(str(kp.pubkey()), 1)
    assert bytes(tx) == bytes(vtx)
    method, url = req.call_args_list[1][0]
    assert method == "POST"
    assert url.endswith("/swap")
    body = req.call_args_list[1][1]["json"]
    assert body["userPublicKey"] == str(kp.pubkey())
    assert body["wrapAndUnwrapSol"] is True
    assert body["quoteResponse"] == QUOTE


def test_swap_transaction_missing_or_garbage():
    user = str(Keypair().pubkey())
    with patch("backend_givefi.swap.jupiter.requests.request", side_effect=[_ok(QUOTE), _ok({})]):
        with pytest.raises(SwapServiceError, match="missing"):
            create_jupiter_swap_transaction(user, 1)
    with patch(
        "backend_givefi.swap.jupiter.requests.request",
        side_effect=[_ok(QUOTE), _ok({"swapTransaction": base64.b64encode(b"junk").decode()})],
    ):
        with pytest.raises(SwapServiceError, match="decode"):
            create_jupiter_swap_transaction(user, 1)
