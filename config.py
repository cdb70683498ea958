import os
from dataclasses import dataclass

from dotenv import load_dotenv
from web3 import Web3

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Captcha
CAPTCHA_API = "https://sctg.xyz"
PAGE_URL = "https://www.b402.ai/experience-b402"
CAPTCHA_POLL_INTERVAL = 5               # Пауза між запитами статусу капчі, сек
CAPTCHA_MAX_ATTEMPTS = 60               # Скільки разів опитувати, перш ніж здатися

# Drip
MINT_COUNT = 10                         # Скільки permit'ів підписувати на гаманець
SUBMIT_CONCURRENCY = 10                 # Скільки drip-запитів летить одночасно
REQUEST_TIMEOUT = 30

# Approve
APPROVE_GAS_LIMIT = 60000

PRIVATE_KEYS_FILE = os.path.join(BASE_DIR, "pk.txt")
PROXIES_FILE = os.path.join(BASE_DIR, "proxies.txt")
USER_AGENTS_FILE = os.path.join(BASE_DIR, "data", "user_agents.json")

REQUIRED_ENV = (
    "CAPTCHA_KEY",
    "TURNSTILE_SITEKEY",
    "RPC",
    "API_BASE",
    "CLIENT_ID",
    "RECIPIENT",
    "RELAYER",
    "TOKEN",
)


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class Settings:
    captcha_key: str
    turnstile_sitekey: str
    rpc: str
    api_base: str
    client_id: str
    recipient: str
    relayer: str
    token: str
    mint_count: int = MINT_COUNT
    captcha_api: str = CAPTCHA_API
    page_url: str = PAGE_URL
    captcha_poll_interval: float = CAPTCHA_POLL_INTERVAL
    captcha_max_attempts: int = CAPTCHA_MAX_ATTEMPTS
    submit_concurrency: int = SUBMIT_CONCURRENCY
    request_timeout: float = REQUEST_TIMEOUT
    private_keys_file: str = PRIVATE_KEYS_FILE
    proxies_file: str = PROXIES_FILE
    user_agents_file: str = USER_AGENTS_FILE


def _int_env(env, name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} має бути цілим числом, отримано {raw!r}")
    if value < 1:
        raise ConfigError(f"{name} має бути >= 1, отримано {value}")
    return value


def _address(env, name: str) -> str:
    try:
        return Web3.to_checksum_address(env[name].strip())
    except ValueError:
        raise ConfigError(f"{name} не схожий на EVM адресу: {env[name]!r}")


def load_settings(env=None, dotenv_path: str = None) -> Settings:
    """Зібрати Settings з оточення (.env підтягується, якщо env не передано)."""
    if env is None:
        load_dotenv(dotenv_path)
        env = os.environ

    missing = [name for name in REQUIRED_ENV if not (env.get(name) or "").strip()]
    if missing:
        raise ConfigError(f"Не задані змінні оточення: {', '.join(missing)}")

    return Settings(
        captcha_key=env["CAPTCHA_KEY"].strip(),
        turnstile_sitekey=env["TURNSTILE_SITEKEY"].strip(),
        rpc=env["RPC"].strip(),
        api_base=env["API_BASE"].strip().rstrip("/"),
        client_id=env["CLIENT_ID"].strip(),
        recipient=_address(env, "RECIPIENT"),
        relayer=_address(env, "RELAYER"),
        token=_address(env, "TOKEN"),
        mint_count=_int_env(env, "MINT_COUNT", MINT_COUNT),
        captcha_api=(env.get("CAPTCHA_API") or CAPTCHA_API).rstrip("/"),
        page_url=env.get("PAGE_URL") or PAGE_URL,
        captcha_max_attempts=_int_env(env, "CAPTCHA_MAX_ATTEMPTS", CAPTCHA_MAX_ATTEMPTS),
        submit_concurrency=_int_env(env, "SUBMIT_CONCURRENCY", SUBMIT_CONCURRENCY),
        private_keys_file=env.get("PRIVATE_KEYS_FILE") or PRIVATE_KEYS_FILE,
        proxies_file=env.get("PROXIES_FILE") or PROXIES_FILE,
        user_agents_file=env.get("USER_AGENTS_FILE") or USER_AGENTS_FILE,
    )
