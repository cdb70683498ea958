# core/drip.py

import asyncio
from typing import List, Optional

import requests

from core.auth import AuthSession
from core.errors import RequirementError, UnexpectedFreeDrip
from core.permit import SignedPermit
from core.session import clone_session, safe_json

PAYMENT_REQUIRED = 402


class PaymentRequirement:
    def __init__(self, amount: int, network: str, relayer_contract: str):
        self.amount = amount
        self.network = network
        self.relayer_contract = relayer_contract

    @classmethod
    def from_response(cls, data) -> "PaymentRequirement":
        req = data.get("paymentRequirements") if isinstance(data, dict) else None
        if not isinstance(req, dict):
            raise RequirementError(f"402 без paymentRequirements: {data}")
        try:
            return cls(int(req["amount"]), req["network"], req["relayerContract"])
        except (KeyError, TypeError, ValueError) as e:
            raise RequirementError(f"Некоректні paymentRequirements ({e}): {req}") from e


class DripResult:
    def __init__(self, index: int, ok: bool, tx: Optional[str] = None, error=None):
        self.index = index
        self.ok = ok
        self.tx = tx
        self.error = error

    def __repr__(self):
        status = "OK" if self.ok else "FAILED"
        return f"DripResult(#{self.index} {status})"


def drip_url(settings) -> str:
    return f"{settings.api_base}/faucet/drip"


def discover_requirement(session: requests.Session, settings, auth: AuthSession) -> PaymentRequirement:
    """
    Перший drip-запит без оплати. Сервер має відповісти 402 з описом оплати.
    """
    try:
        r = session.post(
            drip_url(settings),
            json={"recipientAddress": settings.recipient},
            headers=auth.auth_header,
            timeout=settings.request_timeout,
        )
    except requests.RequestException as e:
        raise RequirementError(f"drip недоступний: {e}") from e

    data = safe_json(r)
    if r.status_code == PAYMENT_REQUIRED:
        requirement = PaymentRequirement.from_response(data)
        print(f"[Drip 💰] Вимога: {requirement.amount} ({requirement.network}, relayer {requirement.relayer_contract})")
        return requirement
    if r.ok:
        raise UnexpectedFreeDrip(r.status_code, data)
    raise RequirementError(f"HTTP {r.status_code}: {data}")


def build_payload(settings, requirement: PaymentRequirement, permit: SignedPermit) -> dict:
    return {
        "recipientAddress": settings.recipient,
        "paymentPayload": {"token": settings.token, "payload": permit.as_dict()},
        "paymentRequirements": {
            "network": requirement.network,
            "relayerContract": requirement.relayer_contract,
        },
    }


def submit_permit(session: requests.Session, settings, auth: AuthSession,
                  requirement: PaymentRequirement, permit: SignedPermit, index: int) -> DripResult:
    try:
        r = session.post(
            drip_url(settings),
            json=build_payload(settings, requirement, permit),
            headers=auth.auth_header,
            timeout=settings.request_timeout,
        )
    except requests.RequestException as e:
        print(f"[Mint #{index} 🔴] FAILED → {e}")
        return DripResult(index, False, error=str(e))

    data = safe_json(r)
    if r.ok:
        tx = data.get("nftTransaction") if isinstance(data, dict) else None
        print(f"[Mint #{index} 🟢] OK → {tx}")
        return DripResult(index, True, tx=tx)

    print(f"[Mint #{index} 🔴] FAILED → HTTP {r.status_code}: {data}")
    return DripResult(index, False, error=data)


async def submit_batch(session: requests.Session, settings, auth: AuthSession,
                       requirement: PaymentRequirement, permits: List[SignedPermit]) -> List[DripResult]:
    """
    Відправляє всі permit'и паралельно (не більше settings.submit_concurrency одночасно).
    Результати незалежні та повертаються в порядку permit'ів.
    requests.Session не потокобезпечна, тож кожен запит іде через власну копію.
    """
    semaphore = asyncio.Semaphore(settings.submit_concurrency)

    async def send(index: int, permit: SignedPermit) -> DripResult:
        async with semaphore:
            return await asyncio.to_thread(submit_permit, clone_session(session), settings, auth, requirement, permit, index)

    return await asyncio.gather(*(send(i, p) for i, p in enumerate(permits, start=1)))
