# core/session.py

import random
from typing import Optional

import requests
from web3 import Web3, HTTPProvider

CHROME_VERSIONS = ["124", "125", "126", "127", "128", "129", "130", "131"]
OS_PLATFORMS = [
    "Windows NT 10.0; Win64; x64",
    "Macintosh; Intel Mac OS X 10_15_7",
    "X11; Linux x86_64"
]

BASE_HEADERS = {
    "accept": "application/json, text/plain, */*",
    "accept-language": "en-US,en;q=0.9",
    "origin": "https://www.b402.ai",
    "referer": "https://www.b402.ai/",
}


def generate_random_user_agent() -> str:
    chrome_version = random.choice(CHROME_VERSIONS)
    platform = random.choice(OS_PLATFORMS)
    return f"Mozilla/5.0 ({platform}) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/{chrome_version}.0.0.0 Safari/537.36"


def normalize_proxy(raw: Optional[str]) -> Optional[str]:
    if not raw:
        return None
    raw = raw.strip()
    if not raw or raw.lower() == "none":
        return None
    if "://" in raw:
        return raw
    if raw.count(":") == 3:
        host, port, user, pwd = raw.split(":")
        return f"http://{user}:{pwd}@{host}:{port}"
    return f"http://{raw}"


def create_session(proxy: Optional[str] = None, user_agent: Optional[str] = None) -> requests.Session:
    session = requests.Session()
    session.headers.update(BASE_HEADERS)
    session.headers["user-agent"] = user_agent or generate_random_user_agent()
    proxy_url = normalize_proxy(proxy)
    if proxy_url:
        session.proxies = {"http": proxy_url, "https": proxy_url}
    return session


def safe_json(response: requests.Response):
    try:
        return response.json()
    except ValueError:
        return response.text


def create_web3(rpc: str, proxy: Optional[str] = None, user_agent: Optional[str] = None, timeout: float = 15) -> Web3:
    kwargs = {"timeout": timeout}
    proxy_url = normalize_proxy(proxy)
    if proxy_url:
        kwargs["proxies"] = {"http": proxy_url, "https": proxy_url}
    if user_agent:
        kwargs["headers"] = {"User-Agent": user_agent}
    return Web3(HTTPProvider(rpc, request_kwargs=kwargs))


def clone_session(session: requests.Session) -> requests.Session:
    """Окрема копія сесії для потоку: ті самі headers, proxies і cookies."""
    clone = requests.Session()
    clone.headers.update(session.headers)
    clone.proxies.update(session.proxies)
    clone.cookies.update(session.cookies)
    return clone
