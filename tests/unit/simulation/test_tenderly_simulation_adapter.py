import aiohttp
import pytest
from unittest.mock import AsyncMock, MagicMock

from config.settings import TenderlySettings
from governance.enums.governor_type import GovernorType
from simulation.adapters.tenderly_simulation_adapter import TenderlySimulationAdapter
from simulation.models.simulation_config import OverridePlan, PrivilegedCall, SimulationConfigProposed
from tests.unit.factories import GOVERNOR_ADDRESS, TIMELOCK_ADDRESS
from utils.exceptions import SimulationAdapterFailure


@pytest.fixture
def tenderly_settings():
    return TenderlySettings(access_token="token", user="auditor", project_slug="governance")


def _response(status=200, json_body=None, text=""):
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=json_body)
    response.text = AsyncMock(return_value=text)
    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=False)
    return context


def _adapter(tenderly_settings, session):
    adapter = TenderlySimulationAdapter(MagicMock(), tenderly_settings)
    adapter.session = session
    return adapter


def _proposed_config(privileged_calls=(), state_block=100, fork_block=100):
    execution = PrivilegedCall(from_address=GOVERNOR_ADDRESS, to=TIMELOCK_ADDRESS, data="0x01", timestamp=1000)
    return SimulationConfigProposed(
        dao_name="Uniswap",
        governor_address=GOVERNOR_ADDRESS,
        governor_type=GovernorType.OZ,
        proposal_id=1,
        override_plan=OverridePlan(
            state_block=state_block,
            fork_block=fork_block,
            fork_timestamp=1000,
            privileged_calls=privileged_calls,
            execution_call=execution,
        ),
    )


def test_project_url(tenderly_settings):
    adapter = TenderlySimulationAdapter(MagicMock(), tenderly_settings)

    assert adapter.project_url == "https://api.tenderly.co/api/v1/account/auditor/project/governance"


@pytest.mark.asyncio
async def test_missing_credentials_fail_on_enter():
    adapter = TenderlySimulationAdapter(MagicMock(), TenderlySettings(access_token=None, user=None, project_slug=None))

    with pytest.raises(SimulationAdapterFailure):
        async with adapter:
            pass


@pytest.mark.asyncio
async def test_non_2xx_response_is_adapter_failure(tenderly_settings):
    session = MagicMock()
    session.post.return_value = _response(status=429, text="rate limited")
    adapter = _adapter(tenderly_settings, session)

    with pytest.raises(SimulationAdapterFailure) as exc_info:
        await adapter.simulate(_proposed_config())

    assert "429" in str(exc_info.value)
    assert exc_info.value.proposal_id == 1
    session.post.assert_called_once()


@pytest.mark.asyncio
async def test_client_error_is_adapter_failure(tenderly_settings):
    session = MagicMock()
    session.post.side_effect = aiohttp.ClientConnectionError("connection reset")
    adapter = _adapter(tenderly_settings, session)

    with pytest.raises(SimulationAdapterFailure):
        await adapter.simulate(_proposed_config())


@pytest.mark.asyncio
async def test_malformed_body_is_adapter_failure(tenderly_settings):
    session = MagicMock()
    session.post.return_value = _response(json_body={"unexpected": True})
    adapter = _adapter(tenderly_settings, session)

    with pytest.raises(SimulationAdapterFailure):
        await adapter.simulate(_proposed_config())


@pytest.mark.asyncio
async def test_privileged_calls_are_sent_as_one_bundle(tenderly_settings):
    schedule = PrivilegedCall(from_address=GOVERNOR_ADDRESS, to=TIMELOCK_ADDRESS, data="0x02", timestamp=900)
    session = MagicMock()
    session.post.return_value = _response(
        json_body={
            "simulation_results": [
                {"transaction": {"status": False, "block_number": 100, "error_message": "not ready"}},
                {"transaction": {"status": True, "block_number": 100}},
            ]
        }
    )
    adapter = _adapter(tenderly_settings, session)

    with pytest.raises(SimulationAdapterFailure) as exc_info:
        await adapter.simulate(_proposed_config(privileged_calls=(schedule,)))

    assert "reverted" in str(exc_info.value)
    url = session.post.call_args.args[0]
    payload = session.post.call_args.kwargs["json"]
    assert url.endswith("/simulate-bundle")
    assert [simulation["block_header"]["timestamp"] for simulation in payload["simulations"]] == [hex(900), hex(1000)]


@pytest.mark.asyncio
async def test_future_fork_reads_state_from_existing_block(tenderly_settings):
    session = MagicMock()
    session.post.return_value = _response(json_body={"unexpected": True})
    adapter = _adapter(tenderly_settings, session)

    with pytest.raises(SimulationAdapterFailure):
        await adapter.simulate(_proposed_config(state_block=100, fork_block=201))

    payload = session.post.call_args.kwargs["json"]
    assert payload["block_number"] == 100
    assert payload["block_header"]["number"] == hex(201)
