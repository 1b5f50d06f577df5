import asyncio
import pathlib
from typing import Any, Dict, List, Optional

import aiohttp
import orjson
from async_lru import alru_cache

from config.settings import EtherscanSettings
from decoding.models.contract_abi import ContractAbi
from governance.enums.chain import Chain
from utils.exceptions import AbiNotFound
from utils.file_utils import smart_open
from utils.formatter_utils import to_normalized_address
from utils.logger_utils import get_logger

logger = get_logger("ABI Resolver")

UNVERIFIED_ABI_MESSAGE = "Contract source code not verified"


class BaseAbiResolver(object):
    async def resolve(self, chain: Chain, address: str) -> ContractAbi:
        """Returns the contract name and ABI of address, or raises AbiNotFound."""
        raise NotImplementedError()


class EtherscanAbiResolver(BaseAbiResolver):
    """
    Reads verified source metadata from the Etherscan v2 multichain API.

    Proxies are followed one level: the implementation's ABI is returned under the
    implementation's contract name.
    """

    def __init__(self, etherscan_settings: EtherscanSettings):
        self.settings = etherscan_settings
        self.session: Optional[aiohttp.ClientSession] = None
        self._semaphore = asyncio.Semaphore(etherscan_settings.max_concurrent_requests)

    async def __aenter__(self):
        self.session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=30))
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.session:
            await self.session.close()
            self.session = None

    async def resolve(self, chain: Chain, address: str) -> ContractAbi:
        checksum_address = to_normalized_address(address)
        source = await self._get_source_code(chain, checksum_address)

        implementation = to_normalized_address(source.get("Implementation") or None)
        if source.get("Proxy") == "1" and implementation and implementation != checksum_address:
            logger.debug(f"{checksum_address} is a proxy for {implementation}")
            impl_source = await self._get_source_code(chain, implementation)
            return ContractAbi(
                address=checksum_address,
                contract_name=impl_source.get("ContractName") or source.get("ContractName") or "",
                abi=_parse_abi(checksum_address, impl_source),
                implementation=implementation,
            )

        return ContractAbi(
            address=checksum_address,
            contract_name=source.get("ContractName") or "",
            abi=_parse_abi(checksum_address, source),
        )

    async def _get_source_code(self, chain: Chain, address: str) -> Dict[str, Any]:
        if self.session is None:
            raise AbiNotFound(address, "resolver used outside of its async context")
        if not self.settings.api_key:
            raise AbiNotFound(address, "ETHERSCAN_API_KEY is not set")

        params = {
            "chainid": str(chain.chain_id),
            "module": "contract",
            "action": "getsourcecode",
            "address": address,
            "apikey": self.settings.api_key,
        }
        try:
            async with self._semaphore:
                async with self.session.get(self.settings.base_url, params=params) as response:
                    if response.status != 200:
                        raise AbiNotFound(address, f"explorer returned HTTP {response.status}")
                    data = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise AbiNotFound(address, f"explorer request failed: {e!r}") from e

        result = data.get("result") if isinstance(data, dict) else None
        if str(data.get("status")) != "1" or not isinstance(result, list) or not result:
            raise AbiNotFound(address, f"explorer error: {result}")
        return result[0]


def _parse_abi(address: str, source: Dict[str, Any]) -> List[Dict[str, Any]]:
    raw_abi = source.get("ABI")
    if not raw_abi or raw_abi == UNVERIFIED_ABI_MESSAGE:
        raise AbiNotFound(address, "contract is not verified")
    try:
        return orjson.loads(raw_abi)
    except orjson.JSONDecodeError as e:
        raise AbiNotFound(address, f"invalid ABI JSON: {e}") from e


class FileAbiResolver(BaseAbiResolver):
    """
    Local ABI cache laid out as <cache_dir>/<chain>/<address>.json, each file holding
    {"contract_name": ..., "abi": [...]}.
    """

    def __init__(self, cache_dir: str):
        self.cache_dir = pathlib.Path(cache_dir)

    def path_for(self, chain: Chain, address: str) -> pathlib.Path:
        return self.cache_dir / chain.value / f"{address.lower()}.json"

    async def resolve(self, chain: Chain, address: str) -> ContractAbi:
        path = self.path_for(chain, address)
        if not path.is_file():
            raise AbiNotFound(address, f"{path} does not exist")
        try:
            with smart_open(path, "r", binary=True) as file_handle:
                content = orjson.loads(file_handle.read())
            return ContractAbi(address=to_normalized_address(address), **content)
        except (orjson.JSONDecodeError, TypeError, ValueError) as e:
            raise AbiNotFound(address, f"unreadable cache file {path}: {e}") from e

    def save(self, chain: Chain, contract_abi: ContractAbi) -> None:
        content = {"contract_name": contract_abi.contract_name, "abi": contract_abi.abi}
        if contract_abi.implementation:
            content["implementation"] = contract_abi.implementation
        with smart_open(self.path_for(chain, contract_abi.address), "w", binary=True) as file_handle:
            file_handle.write(orjson.dumps(content))


class CachingAbiResolver(BaseAbiResolver):
    """
    Tries each resolver in order and memoizes hits for the lifetime of the process.
    Results fetched remotely are written back to the file cache when one is configured.
    """

    def __init__(self, resolvers: List[BaseAbiResolver], file_cache: Optional[FileAbiResolver] = None):
        self._resolvers = resolvers
        self._file_cache = file_cache

    @alru_cache(maxsize=1024)
    async def resolve(self, chain: Chain, address: str) -> ContractAbi:
        checksum_address = to_normalized_address(address)
        reasons = []
        for resolver in self._resolvers:
            try:
                contract_abi = await resolver.resolve(chain, checksum_address)
            except AbiNotFound as e:
                reasons.append(str(e))
                continue

            if self._file_cache is not None and resolver is not self._file_cache:
                try:
                    self._file_cache.save(chain, contract_abi)
                except OSError:
                    logger.warning(f"Could not write ABI cache for {checksum_address}", exc_info=True)
            return contract_abi

        raise AbiNotFound(checksum_address, "; ".join(reasons) or "no resolver configured")
