# MIT License
#
# Copyright (c) 2018 Evgeny Medvedev, evge.medvedev@gmail.com
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
#
# Modified By: Cuong CT, 6/12/2025
# Change Description: Refactored for performance, readability, and type safety.
# - Raw responses of test-chain control methods are unwrapped here; errors are never retried.

from typing import Any, Dict, Union

from proposals.exceptions import ChainControlError
from utils.logger_utils import get_logger

logger = get_logger(__name__)


def to_rpc_quantity(value: int) -> str:
    """Encodes an integer as a JSON-RPC QUANTITY (hex, no leading zeros)."""
    if value < 0:
        raise ValueError(f"RPC quantities must be non-negative, got {value}")
    return hex(value)


def rpc_response_to_result(method: str, response: Union[Dict[str, Any], Any]) -> Any:
    """
    Returns the `result` of a raw JSON-RPC response or raises ChainControlError.

    Control methods such as evm_setAutomine legitimately return null, so a
    missing result is only an error when the node also sent an error object.
    """
    if not isinstance(response, dict):
        return response

    error = response.get("error")
    if error is not None:
        logger.debug(f"RPC {method} returned error {error}")
        message = error.get("message", error) if isinstance(error, dict) else error
        raise ChainControlError(method, message)

    return response.get("result")
