import os
import json
from typing import List, Dict, Optional

from core.session import generate_random_user_agent, normalize_proxy

MIN_KEY_LENGTH = 10


class AccountContext:
    def __init__(self, private_key: str, proxy: Optional[str] = None, user_agent: str = ""):
        self.private_key = private_key
        self.proxy = proxy
        self.user_agent = user_agent

    @property
    def short_key(self) -> str:
        return self.private_key[:8] + "..."


def load_private_keys(path: str) -> List[str]:
    with open(path, "r", encoding="utf-8") as f:
        return [line.strip() for line in f if len(line.strip()) > MIN_KEY_LENGTH]


def load_proxies(path: str) -> List[Optional[str]]:
    if not os.path.exists(path):
        return []
    with open(path, "r", encoding="utf-8") as f:
        return [normalize_proxy(line) for line in f]


def load_user_agents(path: str) -> Dict[str, str]:
    if not os.path.exists(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_accounts(settings) -> List[AccountContext]:
    private_keys = load_private_keys(settings.private_keys_file)
    proxies = load_proxies(settings.proxies_file)
    user_agents = load_user_agents(settings.user_agents_file)

    accounts = []
    for i, pk in enumerate(private_keys):
        proxy = proxies[i] if i < len(proxies) else None
        user_agent = user_agents.get(pk) or generate_random_user_agent()
        accounts.append(AccountContext(pk, proxy, user_agent))

    return accounts
