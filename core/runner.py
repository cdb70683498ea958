# core/runner.py

import asyncio
from enum import Enum
from typing import List

import requests
from eth_account import Account
from web3.exceptions import Web3Exception

from core.account_loader import AccountContext
from core.allowance import ensure_approved
from core.auth import AuthSession, login
from core.captcha import CaptchaSolver
from core.drip import DripResult, PaymentRequirement, discover_requirement, submit_batch
from core.errors import CaptchaError, FaucetError
from core.permit import SignedPermit, build_permits
from core.session import create_session, create_web3


class WalletState(Enum):
    INIT = "init"
    CAPTCHA_SOLVED = "captcha_solved"
    AUTHENTICATED = "authenticated"
    APPROVED = "approved"
    REQUIREMENT_KNOWN = "requirement_known"
    PERMITS_BUILT = "permits_built"
    SUBMITTED = "submitted"
    DONE = "done"
    ABORTED = "aborted"


class WalletRun:
    """
    Один прохід гаманця: captcha → login → approve → 402 → permits → drip.
    Кожен етап повертає результат, який використовує наступний.
    """

    def __init__(self, account: AccountContext, settings, session: requests.Session = None, w3=None):
        self.account = account
        self.settings = settings
        self.signer = Account.from_key(account.private_key)
        self.session = session or create_session(account.proxy, account.user_agent)
        self.w3 = w3 or create_web3(settings.rpc, account.proxy, account.user_agent)
        self.state = WalletState.INIT
        self.results: List[DripResult] = []

    async def solve_captcha(self) -> str:
        try:
            token = await CaptchaSolver(self.settings, self.session).solve()
        except requests.RequestException as e:
            raise CaptchaError(f"сервіс капчі недоступний: {e}") from e
        if not token:
            raise CaptchaError("сервіс капчі відхилив задачу")
        self.state = WalletState.CAPTCHA_SOLVED
        return token

    async def authenticate(self, turnstile_token: str) -> AuthSession:
        try:
            auth = await asyncio.to_thread(login, self.session, self.settings, self.account.private_key, turnstile_token)
        except requests.RequestException as e:
            raise FaucetError(f"login: {e}") from e
        self.state = WalletState.AUTHENTICATED
        return auth

    async def approve(self) -> bool:
        approved = await asyncio.to_thread(ensure_approved, self.w3, self.signer, self.settings)
        self.state = WalletState.APPROVED
        return approved

    async def fetch_requirement(self, auth: AuthSession) -> PaymentRequirement:
        requirement = await asyncio.to_thread(discover_requirement, self.session, self.settings, auth)
        self.state = WalletState.REQUIREMENT_KNOWN
        return requirement

    async def build(self, requirement: PaymentRequirement) -> List[SignedPermit]:
        count = self.settings.mint_count
        print(f"[Permit 🧱] Підписую {count} permit'ів...")
        try:
            permits = await asyncio.to_thread(
                build_permits, self.w3, self.signer, self.settings,
                requirement.amount, requirement.relayer_contract, count,
            )
        except (requests.RequestException, Web3Exception, ValueError) as e:
            raise FaucetError(f"permit: {e}") from e
        self.state = WalletState.PERMITS_BUILT
        return permits

    async def submit(self, auth: AuthSession, requirement: PaymentRequirement,
                     permits: List[SignedPermit]) -> List[DripResult]:
        print("[Drip 🚀] Відправляю permit'и...")
        results = await submit_batch(self.session, self.settings, auth, requirement, permits)
        self.state = WalletState.SUBMITTED
        return results

    async def run(self) -> WalletState:
        print("\n============================================")
        print(f"🔵 START WALLET: {self.account.short_key} ({self.signer.address})")
        print("============================================")

        try:
            token = await self.solve_captcha()
            auth = await self.authenticate(token)
            await self.approve()
            requirement = await self.fetch_requirement(auth)
            permits = await self.build(requirement)
            self.results = await self.submit(auth, requirement, permits)
        except FaucetError as e:
            print(f"[Abort ❌] {self.signer.address} після етапу {self.state.value} → {e}")
            self.state = WalletState.ABORTED
            return self.state

        ok = sum(1 for r in self.results if r.ok)
        print(f"[Wallet ✅] {self.signer.address} → {ok}/{len(self.results)} mint'ів успішно")
        self.state = WalletState.DONE
        return self.state


async def run_all_wallets(accounts: List[AccountContext], settings, run_factory=None) -> List[WalletState]:
    """Гаманці обробляються строго по черзі, у порядку зі списку."""
    run_factory = run_factory or WalletRun
    print(f"🚀 Running {len(accounts)} wallets...\n")

    states = []
    for acc in accounts:
        try:
            wallet_run = run_factory(acc, settings)
        except Exception as e:
            print(f"[Abort ❌] {acc.short_key} → некоректний приватний ключ: {e}")
            states.append(WalletState.ABORTED)
            continue
        states.append(await wallet_run.run())

    print("\n🎉 DONE — ALL WALLETS COMPLETE!")
    return states
