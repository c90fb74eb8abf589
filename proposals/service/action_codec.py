from typing import Any, Dict, List, Sequence, Tuple, Union

from eth_abi import decode, encode
from eth_abi.exceptions import ABITypeError, DecodingError, EncodingError, ParseError
from eth_abi.grammar import normalize, parse
from eth_utils import function_signature_to_4byte_selector, is_hex_address
from eth_utils.abi import collapse_if_tuple

from proposals.exceptions import (
    ActionCodecError,
    ActionDecodeError,
    ArityMismatchError,
    RoundTripMismatchError,
    UnknownMethodError,
)
from proposals.models.action import ProposalAction
from utils.formatter_utils import to_checksum_address
from utils.logger_utils import get_logger

logger = get_logger("Action Codec")

ABI = List[Dict[str, Any]]


def _normalize_value(value: Any) -> Any:
    """Brings encoder input and decoder output to a comparable form."""
    if isinstance(value, (list, tuple)):
        return tuple(_normalize_value(item) for item in value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str) and is_hex_address(value):
        return value.lower()
    return value


class ActionCodec(object):
    """
    Encodes contract calls into the (target, value, signature, calldata) tuple
    a GovernorAlpha/Timelock pair executes, and decodes calldata back into
    argument values.
    """

    @staticmethod
    def function_signature(function_abi: Dict[str, Any]) -> str:
        """Canonical signature, e.g. "transfer(address,uint256)" with tuples collapsed."""
        input_types = ",".join(collapse_if_tuple(abi_input) for abi_input in function_abi.get("inputs", []))
        return f"{function_abi['name']}({input_types})"

    def resolve_function(self, abi: ABI, method: str) -> Dict[str, Any]:
        """Finds `method` (a name, or a full signature for overloaded functions) in the ABI."""
        functions = [entry for entry in abi if entry.get("type", "function") == "function"]
        if "(" in method:
            matches = [fn for fn in functions if self.function_signature(fn) == method]
        else:
            matches = [fn for fn in functions if fn.get("name") == method]

        if not matches:
            raise UnknownMethodError(f"Function {method} not found in the contract interface")
        if len(matches) > 1:
            candidates = ", ".join(self.function_signature(fn) for fn in matches)
            raise UnknownMethodError(f"Function {method} is overloaded ({candidates}); pass the full signature")
        return matches[0]

    def encode_contract_call(
        self, contract: Any, method: str, args: Sequence[Any], value: int = 0
    ) -> ProposalAction:
        """Same as encode_call, for a web3 contract handle (anything with .address and .abi)."""
        return self.encode_call(contract.address, contract.abi, method, args, value)

    def encode_call(
        self, target: str, abi: ABI, method: str, args: Sequence[Any], value: int = 0
    ) -> ProposalAction:
        function_abi = self.resolve_function(abi, method)
        signature = self.function_signature(function_abi)
        inputs = function_abi.get("inputs", [])
        args = tuple(args)

        if len(inputs) != len(args):
            raise ArityMismatchError(signature, len(inputs), len(args))

        input_types = [collapse_if_tuple(abi_input) for abi_input in inputs]
        try:
            calldata = encode(input_types, list(args))
        except (EncodingError, ABITypeError, TypeError, ValueError, OverflowError) as e:
            raise ActionCodecError(f"Could not encode arguments for {signature}: {e}") from e

        decoded_args = self.decode_args(signature, calldata)
        if _normalize_value(decoded_args) != _normalize_value(args):
            raise RoundTripMismatchError(signature, args, decoded_args)

        logger.debug(f"Encoded {signature} for {target} with args {decoded_args}")
        return ProposalAction(
            target=to_checksum_address(target),
            value=value,
            signature=signature,
            calldata=calldata,
            decoded_args=decoded_args,
        )

    def from_raw(
        self, target: str, value: int, signature: str, calldata: Union[bytes, str]
    ) -> ProposalAction:
        """
        Builds an action from an already encoded tuple. Arguments are decoded
        from the signature and calldata alone, there is no input to compare with.
        """
        calldata = self._to_bytes(calldata)
        self.check_signature(signature)
        decoded_args = self.decode_args(signature, calldata)
        return ProposalAction(
            target=to_checksum_address(target),
            value=value,
            signature=signature,
            calldata=calldata,
            decoded_args=decoded_args,
        )

    def argument_types(self, signature: str) -> List[str]:
        if "(" not in signature or not signature.endswith(")"):
            raise ActionDecodeError(f"Malformed function signature: {signature}")
        types_str = signature[signature.index("("):]
        # eth_abi refuses to parse the zero-sized tuple "()"
        if types_str == "()":
            return []
        try:
            return [component.to_type_str() for component in parse(types_str).components]
        except (ParseError, ABITypeError, AttributeError, ValueError) as e:
            raise ActionDecodeError(f"Malformed function signature: {signature}") from e

    def check_signature(self, signature: str) -> None:
        """
        The timelock hashes the signature string verbatim, so an alias such as
        "uint" or a stray space would produce a different selector.
        """
        name = signature.split("(", 1)[0]
        canonical = f"{name}({','.join(normalize(t) for t in self.argument_types(signature))})"
        if not name or canonical != signature:
            raise ActionCodecError(f"Signature {signature} is not canonical, expected {canonical}")

    def from_chain(
        self, target: str, value: int, signature: str, calldata: Union[bytes, str]
    ) -> ProposalAction:
        """
        Builds an action from a tuple the governor already stores. The signature
        is kept verbatim, even when it is not canonical ("set(uint)"); its types
        are normalized only to decode the calldata.
        """
        calldata = self._to_bytes(calldata)
        compact = signature.replace(" ", "")
        types = [normalize(t) for t in self.argument_types(compact)]
        if f"{compact.split('(', 1)[0]}({','.join(types)})" != signature:
            logger.warning(f"Stored signature {signature} is not canonical")
        return ProposalAction(
            target=to_checksum_address(target),
            value=value,
            signature=signature,
            calldata=calldata,
            decoded_args=self._decode(signature, types, calldata),
        )

    def decode_args(self, signature: str, calldata: Union[bytes, str]) -> Tuple[Any, ...]:
        return self._decode(signature, self.argument_types(signature), calldata)

    def _decode(self, signature: str, types: List[str], calldata: Union[bytes, str]) -> Tuple[Any, ...]:
        try:
            return tuple(decode(types, self._to_bytes(calldata)))
        except (DecodingError, ABITypeError, ValueError) as e:
            raise ActionDecodeError(f"Could not decode calldata for {signature}: {e}") from e

    @staticmethod
    def selector(signature: str) -> bytes:
        return function_signature_to_4byte_selector(signature)

    def function_data(self, signature: str, calldata: Union[bytes, str]) -> bytes:
        """Selector followed by the encoded arguments, as a direct call to the target expects."""
        return self.selector(signature) + self._to_bytes(calldata)

    def encode_function_data(self, signature: str, args: Sequence[Any]) -> bytes:
        try:
            return self.selector(signature) + encode(self.argument_types(signature), list(args))
        except (EncodingError, ABITypeError, TypeError, ValueError, OverflowError) as e:
            raise ActionCodecError(f"Could not encode arguments for {signature}: {e}") from e

    @staticmethod
    def _to_bytes(data: Union[bytes, str]) -> bytes:
        if isinstance(data, str):
            hex_data = data[2:] if data.startswith("0x") else data
            try:
                return bytes.fromhex(hex_data)
            except ValueError as e:
                raise ActionDecodeError(f"Calldata is not valid hex: {data}") from e
        return bytes(data)
