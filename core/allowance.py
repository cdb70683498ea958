# core/allowance.py

from web3 import Web3
from eth_account.signers.local import LocalAccount

from config import APPROVE_GAS_LIMIT

MAX_UINT256 = 2**256 - 1

ERC20_ABI = [
    {"constant": True, "inputs": [{"name": "owner", "type": "address"}, {"name": "spender", "type": "address"}], "name": "allowance", "outputs": [{"name": "", "type": "uint256"}], "type": "function"},
    {"constant": False, "inputs": [{"name": "spender", "type": "address"}, {"name": "amount", "type": "uint256"}], "name": "approve", "outputs": [{"name": "", "type": "bool"}], "type": "function"}
]


def token_contract(w3: Web3, settings):
    return w3.eth.contract(address=settings.token, abi=ERC20_ABI)


def get_allowance(w3: Web3, settings, owner: str) -> int:
    try:
        contract = token_contract(w3, settings)
        return contract.functions.allowance(owner, settings.relayer).call()
    except Exception as e:
        # Не вдалось прочитати → вважаємо нулем і пробуємо approve
        print(f"[Allowance ❌] {owner} → {e}")
        return 0


def ensure_approved(w3: Web3, account: LocalAccount, settings) -> bool:
    """
    Перевіряє allowance токена для relayer'а і, якщо він нульовий, робить
    approve на MAX_UINT256 з ручним gas limit та чекає receipt.

    Будь-який позитивний allowance вважається достатнім.
    Повертає False, якщо approve не вдався (не фатально для гаманця).
    """
    address = account.address
    if get_allowance(w3, settings, address) > 0:
        print(f"[Approve ✅] {address} → вже є allowance, пропускаю")
        return True

    print(f"[Approve 🟦] {address} → unlimited для {settings.relayer}...")
    try:
        contract = token_contract(w3, settings)
        tx = contract.functions.approve(settings.relayer, MAX_UINT256).build_transaction({
            "from": address,
            "nonce": w3.eth.get_transaction_count(address, "pending"),
            "gas": APPROVE_GAS_LIMIT,
            "gasPrice": w3.eth.gas_price,
            "chainId": w3.eth.chain_id,
        })
        signed = account.sign_transaction(tx)
        tx_hash = w3.eth.send_raw_transaction(signed.raw_transaction)
        print(f"[Approve 🔄] TX: {w3.to_hex(tx_hash)}")
        w3.eth.wait_for_transaction_receipt(tx_hash)
        print("[Approve 🟢] Підтверджено")
        return True
    except Exception as e:
        print(f"[Approve ❌] {address} → {e}")
        return False
