import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from decoding.models.decoded_action import DecodedAction
from governance.enums.governor_type import GovernorType
from governance.enums.proposal_stage import ProposalStage
from governance.enums.simulation_type import SimulationType
from orchestration.batch_orchestrator import ProposalBatchOrchestrator, SimulationFailurePolicy
from simulation.models.simulation_config import (
    OverridePlan,
    PrivilegedCall,
    ReplayRequest,
    SimulationConfigExecuted,
    SimulationConfigProposed,
)
from tests.unit.factories import (
    GOVERNOR_ADDRESS,
    TIMELOCK_ADDRESS,
    TOKEN_ADDRESS,
    build_proposal,
    build_simulation_result,
)
from utils.exceptions import MissingTimelock, SimulationAdapterFailure

ACTIVE = 1
EXECUTED = 7
ENABLED_CHECKS = ["checkSimulationSucceeds"]


def _executed_config(proposal_id: int) -> SimulationConfigExecuted:
    return SimulationConfigExecuted(
        dao_name="Compound",
        governor_address=GOVERNOR_ADDRESS,
        governor_type=GovernorType.BRAVO,
        proposal_id=proposal_id,
        replay=ReplayRequest(tx_hash="0x" + "ab" * 32, block_number=50),
    )


def _proposed_config(proposal_id: int) -> SimulationConfigProposed:
    return SimulationConfigProposed(
        dao_name="Compound",
        governor_address=GOVERNOR_ADDRESS,
        governor_type=GovernorType.BRAVO,
        proposal_id=proposal_id,
        override_plan=OverridePlan(
            state_block=100,
            fork_block=101,
            fork_timestamp=1_700_000_012,
            execution_call=PrivilegedCall(
                from_address=TIMELOCK_ADDRESS, to=GOVERNOR_ADDRESS, data="0x", timestamp=1_700_000_012
            ),
        ),
    )


async def _build_config(proposal, governor, stage, latest_block):
    if stage is ProposalStage.EXECUTED:
        return _executed_config(proposal.id)
    return _proposed_config(proposal.id)


async def _get_block(block_identifier):
    number = 100 if block_identifier == "latest" else block_identifier
    return {"number": number, "timestamp": 1_700_000_000 - (100 - number) * 12}


async def _decode_proposal(proposal):
    return [
        DecodedAction(index=index, target=target, prose=f"Call {target}")
        for index, target in enumerate(proposal.targets)
    ]


def _governor(states):
    governor = MagicMock()
    governor.governor_type = GovernorType.BRAVO
    governor.address = GOVERNOR_ADDRESS
    governor.format_proposal_id = str
    governor.timelock = AsyncMock(return_value=TIMELOCK_ADDRESS)
    governor.proposal_ids = AsyncMock(return_value=list(states))
    governor.state = AsyncMock(side_effect=lambda proposal_id: states[proposal_id])
    governor.proposal_details = AsyncMock(side_effect=lambda proposal_id: build_proposal(proposal_id))
    return governor


async def _simulate(config):
    return build_simulation_result(build_proposal(config.proposal_id, stage=ProposalStage.ACTIVE))


@pytest.fixture
def adapter():
    adapter = MagicMock()
    adapter.simulate = AsyncMock(side_effect=_simulate)
    return adapter


@pytest.fixture
def store():
    store = MagicMock()
    store.exists.return_value = False
    return store


@pytest.fixture
def renderer():
    renderer = MagicMock()
    renderer.render.return_value = "reports/Compound/report.json"
    return renderer


def _orchestrator(adapter, store, renderer, failure_policy=SimulationFailurePolicy.ABORT):
    web3 = MagicMock()
    web3.eth.get_block = AsyncMock(side_effect=_get_block)
    decoder = MagicMock()
    decoder.decode_proposal = AsyncMock(side_effect=_decode_proposal)

    orchestrator = ProposalBatchOrchestrator(
        web3,
        "Compound",
        GOVERNOR_ADDRESS,
        simulation_adapter=adapter,
        report_renderer=renderer,
        report_store=store,
        abi_resolver=MagicMock(),
        decoder=decoder,
        check_allow_list=ENABLED_CHECKS,
        failure_policy=failure_policy,
    )
    orchestrator._config_builder = MagicMock()
    orchestrator._config_builder.build = AsyncMock(side_effect=_build_config)
    return orchestrator


async def _run(orchestrator, governor, proposal_ids=None):
    with patch(
        "orchestration.batch_orchestrator.infer_governor_type", AsyncMock(return_value=GovernorType.BRAVO)
    ), patch("orchestration.batch_orchestrator.get_governor", return_value=governor):
        return await orchestrator.run(proposal_ids)


@pytest.mark.asyncio
async def test_reports_every_proposal_in_order(adapter, store, renderer):
    governor = _governor({1: EXECUTED, 2: ACTIVE, 3: ACTIVE})

    reports = await _run(_orchestrator(adapter, store, renderer), governor)

    assert [report.proposal_id for report in reports] == [1, 2, 3]
    assert [report.sim_type for report in reports] == [
        SimulationType.EXECUTED,
        SimulationType.PROPOSED,
        SimulationType.PROPOSED,
    ]
    assert renderer.render.call_count == 3
    report = reports[0]
    assert list(report.check_results) == ENABLED_CHECKS
    assert report.decoded_actions[0].target == TOKEN_ADDRESS
    assert report.blocks.start.number == 90
    assert report.blocks.current.number == 100


@pytest.mark.asyncio
async def test_executed_proposal_with_report_is_skipped(adapter, store, renderer):
    store.exists.return_value = True
    governor = _governor({1: EXECUTED})

    reports = await _run(_orchestrator(adapter, store, renderer), governor)

    assert reports == []
    store.exists.assert_called_once_with("Compound", GOVERNOR_ADDRESS, 1)
    adapter.simulate.assert_not_awaited()
    renderer.render.assert_not_called()


@pytest.mark.asyncio
async def test_proposed_proposals_are_always_simulated(adapter, store, renderer):
    store.exists.return_value = True
    governor = _governor({4: ACTIVE})

    reports = await _run(_orchestrator(adapter, store, renderer), governor)

    assert [report.proposal_id for report in reports] == [4]
    store.exists.assert_not_called()


@pytest.mark.asyncio
async def test_explicit_proposal_ids_skip_discovery(adapter, store, renderer):
    governor = _governor({1: ACTIVE, 2: ACTIVE})

    reports = await _run(_orchestrator(adapter, store, renderer), governor, proposal_ids=[2])

    assert [report.proposal_id for report in reports] == [2]
    governor.proposal_ids.assert_not_awaited()


@pytest.mark.asyncio
async def test_abort_policy_stops_the_batch(adapter, store, renderer):
    adapter.simulate.side_effect = [
        await _simulate(_proposed_config(1)),
        SimulationAdapterFailure("Tenderly simulate returned 500", proposal_id=2),
    ]
    governor = _governor({1: ACTIVE, 2: ACTIVE, 3: ACTIVE})

    with pytest.raises(SimulationAdapterFailure):
        await _run(_orchestrator(adapter, store, renderer), governor)

    assert adapter.simulate.await_count == 2
    assert renderer.render.call_count == 1


@pytest.mark.asyncio
async def test_skip_policy_continues(adapter, store, renderer):
    adapter.simulate.side_effect = [
        await _simulate(_proposed_config(1)),
        SimulationAdapterFailure("Tenderly simulate returned 500", proposal_id=2),
        await _simulate(_proposed_config(3)),
    ]
    governor = _governor({1: ACTIVE, 2: ACTIVE, 3: ACTIVE})

    reports = await _run(_orchestrator(adapter, store, renderer, SimulationFailurePolicy.SKIP), governor)

    assert [report.proposal_id for report in reports] == [1, 3]


@pytest.mark.asyncio
async def test_unknown_state_excludes_only_that_proposal(adapter, store, renderer):
    governor = _governor({1: ACTIVE, 2: 99, 3: ACTIVE})

    reports = await _run(_orchestrator(adapter, store, renderer), governor)

    assert [report.proposal_id for report in reports] == [1, 3]
    assert adapter.simulate.await_count == 2


@pytest.mark.asyncio
async def test_unreadable_state_excludes_only_that_proposal(adapter, store, renderer):
    governor = _governor({1: ACTIVE, 2: ACTIVE})
    governor.state = AsyncMock(side_effect=[ConnectionError("rpc down"), ACTIVE])

    reports = await _run(_orchestrator(adapter, store, renderer), governor)

    assert [report.proposal_id for report in reports] == [2]


@pytest.mark.asyncio
async def test_missing_timelock_excludes_proposal(adapter, store, renderer):
    governor = _governor({1: ACTIVE, 2: ACTIVE})
    orchestrator = _orchestrator(adapter, store, renderer)
    orchestrator._config_builder.build.side_effect = [MissingTimelock(GOVERNOR_ADDRESS), _proposed_config(2)]

    reports = await _run(orchestrator, governor)

    assert [report.proposal_id for report in reports] == [2]


@pytest.mark.asyncio
async def test_unexpected_proposal_error_excludes_only_that_proposal(adapter, store, renderer):
    governor = _governor({1: ACTIVE, 2: ACTIVE, 3: ACTIVE})

    async def _details(proposal_id):
        if proposal_id == 2:
            raise ValueError("expected 2 calldatas, got 1")
        return build_proposal(proposal_id)

    governor.proposal_details = AsyncMock(side_effect=_details)

    reports = await _run(_orchestrator(adapter, store, renderer), governor)

    assert [report.proposal_id for report in reports] == [1, 3]
    assert adapter.simulate.await_count == 2


@pytest.mark.asyncio
async def test_run_config(adapter, store, renderer):
    governor = _governor({})
    orchestrator = _orchestrator(adapter, store, renderer)

    with patch("orchestration.batch_orchestrator.get_governor", return_value=governor) as get_governor:
        report = await orchestrator.run_config(_executed_config(213))

    assert report.proposal_id == 213
    assert report.sim_type is SimulationType.EXECUTED
    assert get_governor.call_args.args[1] is GovernorType.BRAVO
    renderer.render.assert_called_once_with(report)
