"""Event signatures and topic encoding."""

from typing import Any, Dict, Union

from Crypto.Hash import keccak


def canonical_type(component: Dict[str, Any]) -> str:
    base_type_str = component["type"]

    # Replace contract types with 'address'
    if base_type_str.startswith("contract "):
        base_type_str = "address"

    if "components" in component and component["type"].startswith("tuple"):
        inner = ",".join(canonical_type(c) for c in component["components"])
        base_type = f"({inner})"
        if component["type"].endswith("[]"):
            return f"{base_type}[]"
        return base_type
    return base_type_str


def event_signature(event_abi: Dict[str, Any]) -> str:
    """Canonical signature, e.g. ``Transfer(address,address,uint256)``."""
    param_types = [canonical_type(i) for i in event_abi.get("inputs", [])]
    return f"{event_abi['name']}({','.join(param_types)})"


def event_topic(signature: Union[str, Dict[str, Any]]) -> str:
    """topic0 for a signature string or an event ABI entry."""
    if isinstance(signature, dict):
        signature = event_signature(signature)
    hash_obj = keccak.new(digest_bits=256)
    hash_obj.update(signature.encode("utf-8"))
    return "0x" + hash_obj.hexdigest()


def address_topic(address: str) -> str:
    """Left-pad an address to a 32-byte topic for indexed address filters."""
    value = address[2:] if address.startswith("0x") else address
    if len(value) != 40:
        raise ValueError(f"Not an address: {address}")
    return "0x" + value.lower().rjust(64, "0")


TRANSFER_EVENT_ABI = {
    "type": "event",
    "name": "Transfer",
    "anonymous": False,
    "inputs": [
        {"indexed": True, "name": "from", "type": "address"},
        {"indexed": True, "name": "to", "type": "address"},
        {"indexed": False, "name": "value", "type": "uint256"},
    ],
}

SWAP_EVENT_ABI = {
    "type": "event",
    "name": "Swap",
    "anonymous": False,
    "inputs": [
        {"indexed": True, "name": "sender", "type": "address"},
        {"indexed": True, "name": "recipient", "type": "address"},
        {"indexed": False, "name": "amount0", "type": "int256"},
        {"indexed": False, "name": "amount1", "type": "int256"},
        {"indexed": False, "name": "sqrtPriceX96", "type": "uint160"},
        {"indexed": False, "name": "liquidity", "type": "uint128"},
        {"indexed": False, "name": "tick", "type": "int24"},
    ],
}

TRANSFER_TOPIC = event_topic(TRANSFER_EVENT_ABI)
SWAP_TOPIC = event_topic(SWAP_EVENT_ABI)
