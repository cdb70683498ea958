import asyncio
import sys

from config import ConfigError, load_settings
from core.account_loader import load_accounts
from core.runner import run_all_wallets


async def main():
    try:
        settings = load_settings()
    except ConfigError as e:
        print(f"❌ {e}")
        sys.exit(1)

    try:
        accounts = load_accounts(settings)
    except FileNotFoundError:
        print(f"❌ {settings.private_keys_file} not found!")
        sys.exit(1)

    if not accounts:
        print("ℹ️ Немає приватних ключів для обробки")
        return

    await run_all_wallets(accounts, settings)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("👋 Перервано")
