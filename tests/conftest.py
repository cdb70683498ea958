"""
Shared fixtures: settings, throwaway keys and fake HTTP responses.
"""

import sys
from pathlib import Path
from unittest.mock import Mock

import pytest
from eth_account import Account
from web3 import Web3

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from config import Settings

# Well-known dev keys, never funded on any real network
PK_ONE = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
PK_TWO = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"

TOKEN = Web3.to_checksum_address("0x55d398326f99059ff775485246999027b3197955")
RELAYER = Web3.to_checksum_address("0xe1af7daea624ba3b5073f24a6ea5531434d82d88")
RECIPIENT = Web3.to_checksum_address("0x39dcdd14a0c40e19cd8c892fd00e9e7963cd49d3")
CHAIN_ID = 56


class FakeResponse:
    def __init__(self, status_code=200, data=None):
        self.status_code = status_code
        self._data = data

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._data is None:
            raise ValueError("no json")
        return self._data

    @property
    def text(self):
        return "" if self._data is None else str(self._data)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        captcha_key="captcha-key",
        turnstile_sitekey="0x4AAAAAAA",
        rpc="http://localhost:8545",
        api_base="https://api.example.test",
        client_id="client-1",
        recipient=RECIPIENT,
        relayer=RELAYER,
        token=TOKEN,
        mint_count=3,
        captcha_api="https://captcha.example.test",
        captcha_poll_interval=0,
        captcha_max_attempts=5,
        private_keys_file=str(tmp_path / "pk.txt"),
        proxies_file=str(tmp_path / "proxies.txt"),
        user_agents_file=str(tmp_path / "user_agents.json"),
    )


@pytest.fixture
def signer():
    return Account.from_key(PK_ONE)


@pytest.fixture
def mock_w3():
    """Web3 double: chain id set, allowance already positive."""
    w3 = Mock()
    w3.eth.chain_id = CHAIN_ID
    w3.eth.contract.return_value.functions.allowance.return_value.call.return_value = 1
    return w3


@pytest.fixture(autouse=True)
def shared_session_double(monkeypatch):
    """Drip workers clone the session; keep the Mock double instead."""
    monkeypatch.setattr("core.drip.clone_session", lambda session: session)
