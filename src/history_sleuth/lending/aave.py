"""Supply ERC-20 assets to the Aave v3 pool."""

import logging
from typing import Any, Dict

from ..core.exceptions import (
    ConfigurationError,
    InsufficientBalanceError,
    TransactionRevertedError,
)
from ..utils.formatting import format_units, to_hex

logger = logging.getLogger(__name__)

AAVE_POOL_ADDRESSES: Dict[str, str] = {
    "sepolia": "0x6Ae43d3271ff6888e7Fc43Fd7321a503ff738951",
}

AAVE_POOL_ABI = [
    {
        "name": "supply",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "asset", "type": "address"},
            {"name": "amount", "type": "uint256"},
            {"name": "onBehalfOf", "type": "address"},
            {"name": "referralCode", "type": "uint16"},
        ],
        "outputs": [],
    }
]

ERC20_ABI = [
    {
        "name": "approve",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "allowance",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
]


def _send(rpc, account, contract_function) -> Any:
    """Sign, send and wait for a contract call; returns the receipt."""
    w3 = rpc.w3
    tx = contract_function.build_transaction(
        {
            "from": account.address,
            "nonce": w3.eth.get_transaction_count(account.address),
        }
    )
    signed = account.sign_transaction(tx)
    tx_hash = w3.eth.send_raw_transaction(signed.raw_transaction)
    logger.info(f"   tx: {to_hex(tx_hash)}")
    receipt = w3.eth.wait_for_transaction_receipt(tx_hash)
    if receipt["status"] != 1:
        raise TransactionRevertedError(to_hex(tx_hash))
    return receipt


def supply_to_aave(
    rpc,
    account,
    asset: str,
    amount: int,
    network: str = "sepolia",
    decimals: int = 6,
) -> Any:
    """
    Supply ``amount`` (smallest units) of ``asset`` to Aave and return the receipt.

    Approves the pool first when the current allowance is short. aTokens are
    minted to ``account``.

    Args:
        rpc: RPCClient connected to ``network``
        account: local signing account (``w3.eth.account.from_key(...)``)
        asset: ERC-20 token address
        amount: amount in the token's smallest unit
        network: key into AAVE_POOL_ADDRESSES
        decimals: token decimals, only used for log output

    Raises:
        ConfigurationError: network has no known pool
        InsufficientBalanceError: wallet balance below ``amount``
        TransactionRevertedError: approve or supply reverted
    """
    try:
        logger.info("Starting Aave supply...")

        pool_address = AAVE_POOL_ADDRESSES.get(network)
        if not pool_address:
            raise ConfigurationError(f"Unsupported network: {network}")

        token = rpc.contract(asset, ERC20_ABI)
        pool = rpc.contract(pool_address, AAVE_POOL_ABI)
        user = account.address

        balance = token.functions.balanceOf(user).call()
        logger.info(f"   Balance: {format_units(balance, decimals)} tokens")
        if balance < amount:
            raise InsufficientBalanceError(
                f"Insufficient balance: {format_units(balance, decimals)} < {format_units(amount, decimals)}"
            )

        allowance = token.functions.allowance(user, pool.address).call()
        logger.info(f"   Current allowance: {format_units(allowance, decimals)}")
        if allowance < amount:
            logger.info("Approving Aave Pool to spend tokens...")
            _send(rpc, account, token.functions.approve(pool.address, amount))
            logger.info("   Approval confirmed")
        else:
            logger.info("   Sufficient allowance already exists")

        logger.info("Supplying to Aave...")
        receipt = _send(
            rpc,
            account,
            # referral code 0 = no referral
            pool.functions.supply(token.address, amount, user, 0),
        )
        logger.info("Successfully supplied to Aave")
        return receipt

    except Exception as e:
        logger.error(f"Error supplying to Aave: {e}")
        raise
