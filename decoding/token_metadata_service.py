from typing import Optional

from async_lru import alru_cache
from pydantic import BaseModel, ConfigDict
from web3 import AsyncWeb3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from abi.erc20_abi import ERC20_ABI, ERC20_ABI_ALTERNATIVE_1
from utils.formatter_utils import to_normalized_address
from utils.logger_utils import get_logger
from utils.web3_utils import call_contract_function

logger = get_logger("Token Metadata Service")

# BadFunctionCallOutput exception happens if the token doesn't implement a particular function
# OverflowError exception happens if the return type of the function doesn't match the expected type
TOKEN_CALL_IGNORED_ERRORS = (BadFunctionCallOutput, ContractLogicError, OverflowError, ValueError)


class TokenMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    symbol: Optional[str] = None
    name: Optional[str] = None
    decimals: Optional[int] = None


class TokenMetadataService(object):
    """Read-only ERC20 metadata lookups used by the action formatters."""

    def __init__(self, web3: AsyncWeb3):
        self._web3 = web3

    @alru_cache(maxsize=1024)
    async def get_token(self, token_address: str) -> TokenMetadata:
        checksum_address = to_normalized_address(token_address)
        contract = self._web3.eth.contract(address=checksum_address, abi=ERC20_ABI)
        contract_alt = self._web3.eth.contract(address=checksum_address, abi=ERC20_ABI_ALTERNATIVE_1)

        symbol = await self._get_first_result(contract.functions.symbol(), contract_alt.functions.symbol())
        if isinstance(symbol, bytes):
            symbol = self._bytes_to_string(symbol)

        name = await self._get_first_result(contract.functions.name(), contract_alt.functions.name())
        if isinstance(name, bytes):
            name = self._bytes_to_string(name)

        decimals = await self._get_first_result(contract.functions.decimals())

        return TokenMetadata(address=checksum_address, symbol=symbol, name=name, decimals=decimals)

    async def _get_first_result(self, *funcs):
        for func in funcs:
            result = await call_contract_function(func, TOKEN_CALL_IGNORED_ERRORS, default_value=None)
            if result is not None:
                return result
        return None

    @staticmethod
    def _bytes_to_string(b: bytes) -> Optional[str]:
        try:
            return b.rstrip(b"\x00").decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("A UnicodeDecodeError exception occurred while trying to decode bytes to string", exc_info=True)
            return None
