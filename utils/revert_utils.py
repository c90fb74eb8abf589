import re
from typing import Any, Optional, Union

from eth_abi import decode
from eth_utils import to_bytes

from utils.logger_utils import get_logger

logger = get_logger("Revert Utils")

# Error(string) and Panic(uint256) selectors (Solidity >= 0.8)
ERROR_STRING_SELECTOR = "0x08c379a0"
PANIC_SELECTOR = "0x4e487b71"

EXECUTION_REVERTED_PREFIX = "execution reverted"
# Hardhat: "VM Exception while processing transaction: reverted with reason string 'Some reason'"
HARDHAT_REASON_PATTERN = re.compile(r"reverted with reason string '(.*)'", re.DOTALL)


def _normalize_revert_data(data: Union[str, bytes, None]) -> Optional[str]:
    if data is None:
        return None
    if isinstance(data, (bytes, bytearray)):
        return "0x" + bytes(data).hex()
    if isinstance(data, dict):
        # Some nodes nest the payload one level deeper, e.g. {"data": "0x..."}
        return _normalize_revert_data(data.get("data"))
    if isinstance(data, str) and data.startswith("0x"):
        return data.lower()
    return None


def decode_revert_data(data: Union[str, bytes, None]) -> Optional[str]:
    """
    Decodes ABI-encoded revert data into a readable reason.
    Returns None when the data is empty or is a custom error we have no ABI for.
    """
    revert_data = _normalize_revert_data(data)
    if not revert_data or len(revert_data) < 10:
        return None

    selector, payload = revert_data[:10], revert_data[10:]
    try:
        if selector == ERROR_STRING_SELECTOR:
            return decode(["string"], to_bytes(hexstr=payload))[0]
        if selector == PANIC_SELECTOR:
            code = decode(["uint256"], to_bytes(hexstr=payload))[0]
            return f"panic code {hex(code)}"
    except Exception as e:
        logger.debug(f"Could not decode revert data {revert_data}: {e}")
    return None


def strip_revert_message(message: Optional[str]) -> Optional[str]:
    """Removes the node-specific wrapper around a revert reason."""
    if not message:
        return None

    match = HARDHAT_REASON_PATTERN.search(message)
    if match:
        return match.group(1)

    if message.startswith(EXECUTION_REVERTED_PREFIX):
        reason = message[len(EXECUTION_REVERTED_PREFIX):].lstrip(": ").strip()
        return reason or None

    return message


def get_error_message(error: Exception) -> str:
    message: Any = getattr(error, "message", None)
    if message is None and error.args:
        message = error.args[0]
    if isinstance(message, dict):
        message = message.get("message", str(message))
    return str(message) if message is not None else str(error)


def extract_revert_reason(error: Exception) -> Optional[str]:
    """
    Extracts the human readable revert reason from a web3 call error.

    The structured revert data attached to the exception is preferred; the
    message text is only parsed when the node did not return decodable data.
    """
    reason = decode_revert_data(getattr(error, "data", None))
    if reason is not None:
        return reason
    return strip_revert_message(get_error_message(error))
