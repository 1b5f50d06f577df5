from typing import Any, Awaitable, Callable, Optional, Sequence

from web3 import AsyncWeb3

from decoding.abi_resolver import BaseAbiResolver
from decoding.token_metadata_service import TokenMetadataService
from governance.enums.chain import Chain
from utils.exceptions import AbiNotFound
from utils.formatter_utils import defactor, to_normalized_address


class FormatterContext(object):
    """Read-only collaborators a formatter may use to enrich its prose."""

    def __init__(
        self,
        chain: Chain,
        web3: AsyncWeb3,
        token_metadata_service: TokenMetadataService,
        abi_resolver: Optional[BaseAbiResolver] = None,
    ):
        self.chain = chain
        self.web3 = web3
        self.token_metadata_service = token_metadata_service
        self.abi_resolver = abi_resolver


class ExecuteTransaction(object):
    """The proposal action a formatter describes."""

    def __init__(self, target: str, value: int, calldata: str, signature: Optional[str] = None):
        self.target = target
        self.value = value
        self.calldata = calldata
        self.signature = signature


# (context, transaction, decoded args) -> prose
TransactionFormatter = Callable[[FormatterContext, ExecuteTransaction, Sequence[Any]], Awaitable[str]]


def address_link(chain: Chain, address: str, label: Optional[str] = None) -> str:
    address = to_normalized_address(address)
    return f"[{label or address}](https://{chain.explorer_domain}/address/{address})"


async def contract_name_with_link(context: FormatterContext, address: str) -> str:
    name = None
    if context.abi_resolver is not None:
        try:
            name = (await context.abi_resolver.resolve(context.chain, address)).contract_name
        except AbiNotFound:
            name = None
    return address_link(context.chain, address, name)


async def token_name_with_link(context: FormatterContext, token_address: str) -> str:
    token = await context.token_metadata_service.get_token(token_address)
    return address_link(context.chain, token_address, token.symbol)


async def token_amount_with_link(context: FormatterContext, token_address: str, amount: int) -> str:
    token = await context.token_metadata_service.get_token(token_address)
    if token.decimals is None:
        raise ValueError(f"Token {token_address} has no decimals()")
    return f"{defactor(amount, token.decimals)} {address_link(context.chain, token_address, token.symbol)}"
