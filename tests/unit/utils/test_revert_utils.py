import pytest
from eth_abi import encode

from utils.revert_utils import (
    ERROR_STRING_SELECTOR,
    PANIC_SELECTOR,
    decode_revert_data,
    extract_revert_reason,
    strip_revert_message,
)


class FakeRpcError(Exception):
    def __init__(self, message, data=None):
        super().__init__(message)
        self.message = message
        self.data = data


def test_decode_error_string():
    data = ERROR_STRING_SELECTOR + encode(["string"], ["Ownable: caller is not the owner"]).hex()

    assert decode_revert_data(data) == "Ownable: caller is not the owner"
    assert decode_revert_data(bytes.fromhex(data[2:])) == "Ownable: caller is not the owner"
    assert decode_revert_data({"data": data}) == "Ownable: caller is not the owner"


def test_decode_panic():
    data = PANIC_SELECTOR + encode(["uint256"], [0x11]).hex()

    assert decode_revert_data(data) == "panic code 0x11"


@pytest.mark.parametrize("data", [None, "", "0x", "0x1234", "0xdeadbeef" + "00" * 32, "not hex"])
def test_undecodable_data_returns_none(data):
    assert decode_revert_data(data) is None


@pytest.mark.parametrize("message, expected", [
    ("execution reverted: Timelock::executeTransaction: Transaction execution reverted.",
     "Timelock::executeTransaction: Transaction execution reverted."),
    ("VM Exception while processing transaction: reverted with reason string 'only owner'", "only owner"),
    ("execution reverted", None),
    ("insufficient funds for gas", "insufficient funds for gas"),
    (None, None),
])
def test_strip_revert_message(message, expected):
    assert strip_revert_message(message) == expected


def test_structured_data_wins_over_message():
    data = ERROR_STRING_SELECTOR + encode(["string"], ["from data"]).hex()
    error = FakeRpcError("execution reverted: from message", data=data)

    assert extract_revert_reason(error) == "from data"


def test_message_is_parsed_without_data():
    error = FakeRpcError("execution reverted: from message")

    assert extract_revert_reason(error) == "from message"
