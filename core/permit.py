# core/permit.py

import secrets
import time
from typing import List

from eth_account.messages import encode_typed_data
from eth_account.signers.local import LocalAccount
from web3 import Web3

DOMAIN_NAME = "B402"
DOMAIN_VERSION = "1"
VALID_AFTER_SKEW = 20                   # сек назад від now
VALID_FOR = 1800                        # сек вперед від now

EIP712_DOMAIN = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]

TRANSFER_WITH_AUTHORIZATION = [
    {"name": "token", "type": "address"},
    {"name": "from", "type": "address"},
    {"name": "to", "type": "address"},
    {"name": "value", "type": "uint256"},
    {"name": "validAfter", "type": "uint256"},
    {"name": "validBefore", "type": "uint256"},
    {"name": "nonce", "type": "bytes32"},
]


class SignedPermit:
    def __init__(self, authorization: dict, signature: str):
        self.authorization = authorization
        self.signature = signature

    def as_dict(self):
        return {"authorization": self.authorization, "signature": self.signature}


def typed_data(chain_id: int, relayer: str, message: dict) -> dict:
    return {
        "types": {
            "EIP712Domain": EIP712_DOMAIN,
            "TransferWithAuthorization": TRANSFER_WITH_AUTHORIZATION,
        },
        "primaryType": "TransferWithAuthorization",
        "domain": {
            "name": DOMAIN_NAME,
            "version": DOMAIN_VERSION,
            "chainId": chain_id,
            "verifyingContract": relayer,
        },
        "message": message,
    }


def build_permit(w3: Web3, account: LocalAccount, settings, amount: int, relayer: str) -> SignedPermit:
    chain_id = int(w3.eth.chain_id)
    now = int(time.time())
    nonce = secrets.token_bytes(32)
    relayer = Web3.to_checksum_address(relayer)

    message = {
        "token": settings.token,
        "from": account.address,
        "to": settings.recipient,
        "value": int(amount),
        "validAfter": now - VALID_AFTER_SKEW,
        "validBefore": now + VALID_FOR,
        "nonce": nonce,
    }

    signable = encode_typed_data(full_message=typed_data(chain_id, relayer, message))
    signed = account.sign_message(signable)

    authorization = dict(message, nonce=Web3.to_hex(nonce))
    return SignedPermit(authorization, Web3.to_hex(signed.signature))


def build_permits(w3: Web3, account: LocalAccount, settings, amount: int, relayer: str, count: int) -> List[SignedPermit]:
    return [build_permit(w3, account, settings, amount, relayer) for _ in range(count)]
