import orjson
import pytest
from unittest.mock import AsyncMock, MagicMock

from config.settings import EtherscanSettings
from decoding.abi_resolver import CachingAbiResolver, EtherscanAbiResolver, FileAbiResolver
from decoding.models.contract_abi import ContractAbi
from governance.enums.chain import Chain
from tests.unit.factories import GOVERNOR_ADDRESS, TOKEN_ADDRESS
from utils.exceptions import AbiNotFound

TOKEN_ABI = [{"type": "function", "name": "decimals", "inputs": [], "outputs": [{"name": "", "type": "uint8"}]}]


def _remote(contract_abi=None, error=None):
    resolver = MagicMock()
    resolver.resolve = AsyncMock(return_value=contract_abi, side_effect=error)
    return resolver


def _response(json_body, status=200):
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=json_body)
    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=False)
    return context


def _source(contract_name, abi, proxy="0", implementation=""):
    return {
        "status": "1",
        "result": [
            {"ContractName": contract_name, "ABI": abi, "Proxy": proxy, "Implementation": implementation}
        ],
    }


@pytest.mark.asyncio
async def test_file_resolver_round_trip(tmp_path):
    file_resolver = FileAbiResolver(str(tmp_path))
    contract_abi = ContractAbi(address=TOKEN_ADDRESS, contract_name="FiatTokenProxy", abi=TOKEN_ABI)

    file_resolver.save(Chain.MAINNET, contract_abi)

    assert file_resolver.path_for(Chain.MAINNET, TOKEN_ADDRESS) == tmp_path / "mainnet" / f"{TOKEN_ADDRESS.lower()}.json"
    assert await file_resolver.resolve(Chain.MAINNET, TOKEN_ADDRESS) == contract_abi


@pytest.mark.asyncio
async def test_file_resolver_missing_file(tmp_path):
    with pytest.raises(AbiNotFound):
        await FileAbiResolver(str(tmp_path)).resolve(Chain.MAINNET, TOKEN_ADDRESS)


@pytest.mark.asyncio
async def test_caching_resolver_memoizes_and_writes_back(tmp_path):
    file_cache = FileAbiResolver(str(tmp_path))
    remote = _remote(ContractAbi(address=TOKEN_ADDRESS, contract_name="FiatTokenProxy", abi=TOKEN_ABI))
    resolver = CachingAbiResolver([file_cache, remote], file_cache=file_cache)

    first = await resolver.resolve(Chain.MAINNET, TOKEN_ADDRESS)
    second = await resolver.resolve(Chain.MAINNET, TOKEN_ADDRESS)

    assert first == second
    remote.resolve.assert_awaited_once()
    assert file_cache.path_for(Chain.MAINNET, TOKEN_ADDRESS).is_file()

    # A fresh process is served from disk
    offline = CachingAbiResolver([file_cache])
    assert (await offline.resolve(Chain.MAINNET, TOKEN_ADDRESS)).contract_name == "FiatTokenProxy"


@pytest.mark.asyncio
async def test_caching_resolver_tries_resolvers_in_order():
    first = _remote(error=AbiNotFound(TOKEN_ADDRESS, "first"))
    second = _remote(ContractAbi(address=TOKEN_ADDRESS, contract_name="Second"))
    third = _remote(ContractAbi(address=TOKEN_ADDRESS, contract_name="Third"))

    contract_abi = await CachingAbiResolver([first, second, third]).resolve(Chain.MAINNET, TOKEN_ADDRESS)

    assert contract_abi.contract_name == "Second"
    third.resolve.assert_not_awaited()


@pytest.mark.asyncio
async def test_caching_resolver_all_fail():
    resolver = CachingAbiResolver(
        [_remote(error=AbiNotFound(TOKEN_ADDRESS, "first")), _remote(error=AbiNotFound(TOKEN_ADDRESS, "second"))]
    )

    with pytest.raises(AbiNotFound) as exc_info:
        await resolver.resolve(Chain.MAINNET, TOKEN_ADDRESS)

    assert "first" in str(exc_info.value)
    assert "second" in str(exc_info.value)


@pytest.mark.asyncio
async def test_etherscan_resolver_follows_proxy():
    resolver = EtherscanAbiResolver(EtherscanSettings(api_key="key"))
    resolver.session = MagicMock()
    resolver.session.get.side_effect = [
        _response(_source("FiatTokenProxy", "[]", proxy="1", implementation=GOVERNOR_ADDRESS)),
        _response(_source("FiatTokenV2_2", orjson.dumps(TOKEN_ABI).decode())),
    ]

    contract_abi = await resolver.resolve(Chain.MAINNET, TOKEN_ADDRESS)

    assert contract_abi.address == TOKEN_ADDRESS
    assert contract_abi.contract_name == "FiatTokenV2_2"
    assert contract_abi.implementation == GOVERNOR_ADDRESS
    assert contract_abi.abi == TOKEN_ABI
    params = resolver.session.get.call_args_list[1].kwargs["params"]
    assert params["address"] == GOVERNOR_ADDRESS
    assert params["chainid"] == "1"


@pytest.mark.asyncio
async def test_etherscan_resolver_unverified_contract():
    resolver = EtherscanAbiResolver(EtherscanSettings(api_key="key"))
    resolver.session = MagicMock()
    resolver.session.get.return_value = _response(_source("", "Contract source code not verified"))

    with pytest.raises(AbiNotFound):
        await resolver.resolve(Chain.MAINNET, TOKEN_ADDRESS)
