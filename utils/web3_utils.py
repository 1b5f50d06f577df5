from typing import Any, List, Sequence
from urllib.parse import urlparse

from eth_abi import decode, encode
from eth_utils import encode_hex, function_signature_to_4byte_selector, to_bytes
from web3 import AsyncHTTPProvider, AsyncWeb3

from utils.logger_utils import get_logger

logger = get_logger("Web3 Utils")

DEFAULT_TIMEOUT = 60


def get_async_web3(uri_string: str, timeout: int = DEFAULT_TIMEOUT) -> AsyncWeb3:
    """
    Creates an AsyncWeb3 instance based on the URI scheme.
    Currently supports HTTP/HTTPS.
    """
    uri = urlparse(uri_string)

    if uri.scheme == "http" or uri.scheme == "https":
        request_kwargs = {"timeout": timeout}
        return AsyncWeb3(AsyncHTTPProvider(uri_string, request_kwargs=request_kwargs))
    else:
        raise ValueError(f"Unknown uri scheme {uri_string}. Supported: http, https")


def function_selector(signature: str) -> str:
    return encode_hex(function_signature_to_4byte_selector(signature))


def parse_signature_types(signature: str) -> List[str]:
    """
    Splits the argument list of a canonical function signature into ABI types.

    >>> parse_signature_types("depositForBurn(uint256,uint32,bytes32,address)")
    ['uint256', 'uint32', 'bytes32', 'address']
    """
    open_paren = signature.find("(")
    if open_paren < 0 or not signature.endswith(")"):
        raise ValueError(f"Invalid function signature: {signature}")

    body = signature[open_paren + 1 : -1]
    types: List[str] = []
    depth = 0
    current = ""
    for char in body:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        if char == "," and depth == 0:
            types.append(current.strip())
            current = ""
        else:
            current += char
    if current.strip():
        types.append(current.strip())
    return types


def encode_function_call(signature: str, args: Sequence[Any]) -> str:
    """Builds calldata (selector + encoded args) for a canonical function signature."""
    selector = function_signature_to_4byte_selector(signature)
    return encode_hex(selector + encode(parse_signature_types(signature), list(args)))


def decode_arguments(signature: str, data: str | bytes) -> tuple:
    """Decodes ABI-encoded argument bytes (without selector) for the given signature."""
    raw = data if isinstance(data, bytes) else to_bytes(hexstr=data)
    return decode(parse_signature_types(signature), raw)


async def call_contract_function(func, ignore_errors, default_value=None):
    try:
        return await func.call()
    except Exception as ex:
        if isinstance(ex, ignore_errors):
            logger.debug(
                "An exception occurred in function {} of contract {}. ".format(func.fn_name, func.address)
                + "This exception can be safely ignored.",
                exc_info=True,
            )
            return default_value
        raise ex
