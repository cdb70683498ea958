# core/auth.py

import time
import uuid
from typing import Optional

import jwt
import requests
from eth_account import Account
from eth_account.messages import encode_defunct
from web3 import Web3

from core.errors import AuthError
from core.session import safe_json

WALLET_TYPE = "evm"


class Challenge:
    def __init__(self, lid: str, message: str):
        self.lid = lid
        self.message = message


class AuthSession:
    def __init__(self, address: str, jwt_token: str, expires_at: Optional[int] = None):
        self.address = address
        self.jwt = jwt_token
        self.expires_at = expires_at

    @property
    def auth_header(self) -> dict:
        return {"Authorization": f"Bearer {self.jwt}"}


def decode_jwt_exp(jwt_token: str) -> Optional[int]:
    try:
        payload = jwt.decode(jwt_token, options={"verify_signature": False})
        return payload.get("exp")
    except jwt.PyJWTError:
        return None


def _post(session: requests.Session, url: str, payload: dict, timeout: float) -> dict:
    try:
        r = session.post(url, json=payload, timeout=timeout)
    except requests.RequestException as e:
        raise AuthError(f"{url} → {e}") from e
    data = safe_json(r)
    if not r.ok:
        raise AuthError(f"{url} → HTTP {r.status_code}: {data}")
    if not isinstance(data, dict):
        raise AuthError(f"{url} → неочікувана відповідь: {data!r}")
    return data


def get_challenge(session: requests.Session, settings, address: str, turnstile_token: str) -> Challenge:
    lid = str(uuid.uuid4())
    payload = {
        "walletType": WALLET_TYPE,
        "walletAddress": address,
        "clientId": settings.client_id,
        "lid": lid,
        "turnstileToken": turnstile_token,
    }
    data = _post(session, f"{settings.api_base}/auth/web3/challenge", payload, settings.request_timeout)
    message = data.get("message")
    if not message:
        raise AuthError(f"Challenge без поля message: {data}")
    return Challenge(lid, message)


def verify_challenge(session: requests.Session, settings, address: str, lid: str,
                     signature: str, turnstile_token: str) -> dict:
    payload = {
        "walletType": WALLET_TYPE,
        "walletAddress": address,
        "clientId": settings.client_id,
        "lid": lid,
        "signature": signature,
        "turnstileToken": turnstile_token,
    }
    return _post(session, f"{settings.api_base}/auth/web3/verify", payload, settings.request_timeout)


def sign_challenge(private_key: str, message: str) -> str:
    # Звичайний personal_sign (EIP-191), не typed data
    signed = Account.sign_message(encode_defunct(text=message), private_key)
    return Web3.to_hex(signed.signature)


def login(session: requests.Session, settings, private_key: str, turnstile_token: str) -> AuthSession:
    address = Account.from_key(private_key).address

    challenge = get_challenge(session, settings, address, turnstile_token)
    signature = sign_challenge(private_key, challenge.message)
    data = verify_challenge(session, settings, address, challenge.lid, signature, turnstile_token)

    jwt_token = data.get("jwt") or data.get("token")
    if not jwt_token:
        raise AuthError(f"Verify не повернув jwt/token: {data}")

    exp = decode_jwt_exp(jwt_token)
    if exp:
        print(f"[Login ✅] {address} → JWT отримано (дійсний до {time.strftime('%H:%M:%S', time.localtime(exp))})")
    else:
        print(f"[Login ✅] {address}")
    return AuthSession(address, jwt_token, exp)
