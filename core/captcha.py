# core/captcha.py

import asyncio
from typing import Optional

import requests

from core.errors import CaptchaError, CaptchaTimeout
from core.session import safe_json


class CaptchaSolver:
    """
    Клієнт 2captcha-сумісного сервісу (in.php / res.php) для Cloudflare Turnstile.
    Опитування обмежене settings.captcha_max_attempts.
    """

    def __init__(self, settings, session: requests.Session):
        self.settings = settings
        self.session = session

    def _get(self, endpoint: str, params: dict):
        url = f"{self.settings.captcha_api}/{endpoint}"
        r = self.session.get(url, params=params, timeout=self.settings.request_timeout)
        data = safe_json(r)
        if not isinstance(data, dict):
            raise CaptchaError(f"{endpoint} повернув не JSON: {data!r}")
        return data

    async def submit(self) -> Optional[str]:
        params = {
            "key": self.settings.captcha_key,
            "method": "turnstile",
            "sitekey": self.settings.turnstile_sitekey,
            "pageurl": self.settings.page_url,
            "json": 1,
        }
        data = await asyncio.to_thread(self._get, "in.php", params)
        if data.get("status") != 1:
            print(f"[Captcha ❌] Сервіс відхилив задачу: {data}")
            return None
        job_id = data.get("request")
        if not job_id:
            raise CaptchaError(f"in.php без ID задачі: {data}")
        job_id = str(job_id)
        print(f"[Captcha 🟡] Задачу створено, ID: {job_id}")
        return job_id

    async def poll(self, job_id: str) -> str:
        params = {"key": self.settings.captcha_key, "action": "get", "id": job_id, "json": 1}
        attempts = self.settings.captcha_max_attempts

        for _ in range(attempts):
            await asyncio.sleep(self.settings.captcha_poll_interval)
            data = await asyncio.to_thread(self._get, "res.php", params)

            if data.get("status") == 1:
                token = data.get("request")
                if not token:
                    raise CaptchaError(f"задача {job_id}: успіх без токена: {data}")
                print("[Captcha 🟢] Розв'язано")
                return token

            answer = str(data.get("request", ""))
            if answer.startswith("ERROR_"):
                raise CaptchaError(f"задача {job_id}: {answer}")

        raise CaptchaTimeout(job_id, attempts)

    async def solve(self) -> Optional[str]:
        print("[Captcha 🔵] Запит на розв'язання Turnstile...")
        job_id = await self.submit()
        if job_id is None:
            return None
        return await self.poll(job_id)
