import asyncio
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Union

from web3 import AsyncWeb3

from checks.check_executor import resolve_enabled_checks, run_checks
from checks.check_types import ProposalCheckDeps
from constants.constants import DEFAULT_LOG_CHUNK_SIZE
from decoding.abi_resolver import BaseAbiResolver
from decoding.transaction_decoder import TransactionDecoder
from governance.enums.chain import Chain
from governance.enums.simulation_type import SimulationType
from governance.models.block import BlockSnapshot
from governance.models.proposal import Proposal
from governance.service.governor_service import BaseGovernor, get_governor, infer_governor_type
from governance.service.proposal_state_service import derive_simulation_type, resolve_proposal_stage
from reporting.models.proposal_report import ProposalReport, ReportBlocks
from reporting.report_renderer import BaseReportRenderer
from reporting.report_store import BaseReportStore
from reporting.report_validation import validate_report_completeness
from simulation.adapters.base_simulation_adapter import BaseSimulationAdapter
from simulation.config_builder import SimulationConfigBuilder, describe_config
from simulation.models.simulation_config import SimulationConfigExecuted, SimulationConfigProposed
from utils.async_utils import gather_settled
from utils.exceptions import (
    MissingExecution,
    MissingTimelock,
    SimulationAdapterFailure,
    UnknownProposalState,
    UnsupportedGovernor,
)
from utils.logger_utils import get_logger

logger = get_logger("Batch Orchestrator")

# Faults that exclude one proposal from the output without stopping the batch
PROPOSAL_FATAL_ERRORS = (UnsupportedGovernor, UnknownProposalState, MissingTimelock, MissingExecution)


class SimulationFailurePolicy(str, Enum):
    ABORT = "abort"
    SKIP = "skip"


class ProposalBatchOrchestrator(object):
    """
    Drives every proposal of one governor through simulation, checks, decoding and
    rendering.

    Proposals are handled strictly one after another: the simulation service is rate
    limited and each request must finish before the next one is sent. Work inside a
    proposal (checks, action decoding) runs concurrently.
    """

    def __init__(
        self,
        web3: AsyncWeb3,
        dao_name: str,
        governor_address: str,
        simulation_adapter: BaseSimulationAdapter,
        report_renderer: BaseReportRenderer,
        report_store: BaseReportStore,
        abi_resolver: BaseAbiResolver,
        decoder: TransactionDecoder,
        chain: Chain = Chain.MAINNET,
        check_allow_list: Optional[Iterable[str]] = None,
        failure_policy: SimulationFailurePolicy = SimulationFailurePolicy.ABORT,
        governor_from_block: int = 0,
        log_chunk_size: int = DEFAULT_LOG_CHUNK_SIZE,
    ):
        self._web3 = web3
        self.dao_name = dao_name
        self.governor_address = governor_address
        self._simulation_adapter = simulation_adapter
        self._report_renderer = report_renderer
        self._report_store = report_store
        self._abi_resolver = abi_resolver
        self._decoder = decoder
        self.chain = chain
        self.check_allow_list = list(check_allow_list) if check_allow_list else None
        self.failure_policy = SimulationFailurePolicy(failure_policy)
        self._governor_from_block = governor_from_block
        self._log_chunk_size = log_chunk_size
        self._config_builder = SimulationConfigBuilder(web3, dao_name, chain)

    async def run(self, proposal_ids: Optional[Sequence[int]] = None) -> List[ProposalReport]:
        governor_type = await infer_governor_type(self._web3, self.governor_address)
        governor = get_governor(
            self._web3,
            governor_type,
            self.governor_address,
            from_block=self._governor_from_block,
            log_chunk_size=self._log_chunk_size,
        )
        timelock = await governor.timelock()
        latest_block = BlockSnapshot.from_web3_block(await self._web3.eth.get_block("latest"))

        if proposal_ids is None:
            proposal_ids = await governor.proposal_ids(latest_block.number)
        proposal_ids = list(proposal_ids)
        states = await gather_settled(*(governor.state(proposal_id) for proposal_id in proposal_ids))

        logger.info(
            f"Simulating {len(proposal_ids)} {self.dao_name} proposals: IDs of "
            f"{', '.join(governor.format_proposal_id(proposal_id) for proposal_id in proposal_ids)}"
        )

        queue: asyncio.Queue = asyncio.Queue()
        for proposal_id, state in zip(proposal_ids, states):
            queue.put_nowait((proposal_id, state))
        queue.put_nowait(None)

        reports = await self._worker_loop(queue, governor, timelock, latest_block)

        logger.info(f"Done! {len(reports)} of {len(proposal_ids)} proposals reported")
        return reports

    async def _worker_loop(
        self,
        queue: asyncio.Queue,
        governor: BaseGovernor,
        timelock: Optional[str],
        latest_block: BlockSnapshot,
    ) -> List[ProposalReport]:
        """
        Single consumer over the batch. A proposal is taken off the queue only after the
        previous one has been fully simulated and reported.
        """
        reports: List[ProposalReport] = []
        while True:
            item = await queue.get()
            if item is None:
                queue.task_done()
                break

            proposal_id, state = item
            formatted_id = governor.format_proposal_id(proposal_id)
            try:
                if not state.ok:
                    logger.error(f"Proposal {formatted_id}: could not read state: {state.error!r}")
                    continue
                report = await self._process_proposal(governor, timelock, proposal_id, state.value, latest_block)
            except PROPOSAL_FATAL_ERRORS as e:
                logger.error(f"Proposal {formatted_id} excluded: {e}")
                continue
            except SimulationAdapterFailure as e:
                if self.failure_policy is SimulationFailurePolicy.SKIP:
                    logger.error(f"Proposal {formatted_id} skipped after simulation failure: {e}")
                    continue
                logger.error(f"Proposal {formatted_id}: simulation failed, aborting the batch: {e}")
                raise
            except Exception as e:
                logger.error(f"Proposal {formatted_id} failed: {e!r}", exc_info=True)
                continue
            finally:
                queue.task_done()

            if report is not None:
                reports.append(report)
        return reports

    async def run_config(
        self, config: Union[SimulationConfigExecuted, SimulationConfigProposed]
    ) -> ProposalReport:
        """Simulates a single pre-built config, bypassing proposal discovery."""
        governor = get_governor(
            self._web3,
            config.governor_type,
            config.governor_address,
            from_block=self._governor_from_block,
            log_chunk_size=self._log_chunk_size,
        )
        timelock = await governor.timelock()
        logger.info(f"Running {config.dao_name} proposal {governor.format_proposal_id(config.proposal_id)}: {describe_config(config)}")
        return await self._simulate_and_report(config, governor, timelock)

    async def _process_proposal(
        self,
        governor: BaseGovernor,
        timelock: Optional[str],
        proposal_id: int,
        raw_state: int,
        latest_block: BlockSnapshot,
    ) -> Optional[ProposalReport]:
        formatted_id = governor.format_proposal_id(proposal_id)
        stage = resolve_proposal_stage(governor.governor_type, proposal_id, raw_state)
        sim_type = derive_simulation_type(stage)

        if sim_type is SimulationType.EXECUTED and self._report_store.exists(
            self.dao_name, governor.address, proposal_id
        ):
            logger.info(f"Skipping proposal {formatted_id}: it is executed and already has a report")
            return None

        proposal = (await governor.proposal_details(proposal_id)).with_stage(stage)
        config = await self._config_builder.build(proposal, governor, stage, latest_block)
        logger.info(f"Simulating {self.dao_name} proposal {formatted_id} ({stage.value}): {describe_config(config)}")
        return await self._simulate_and_report(config, governor, timelock)

    async def _simulate_and_report(
        self,
        config: Union[SimulationConfigExecuted, SimulationConfigProposed],
        governor: BaseGovernor,
        timelock: Optional[str],
    ) -> ProposalReport:
        result = await self._simulation_adapter.simulate(config)
        proposal = result.proposal

        deps = ProposalCheckDeps(
            governor=governor,
            web3=self._web3,
            timelock=timelock,
            chain=self.chain,
            decoder=self._decoder,
            abi_resolver=self._abi_resolver,
        )
        check_results = await run_checks(proposal, result, deps, self.check_allow_list)
        decoded_actions = await self._decoder.decode_proposal(proposal)
        blocks = await self._report_blocks(proposal, result.latest_block)

        report = ProposalReport(
            dao_name=config.dao_name,
            governor_address=governor.address,
            governor_type=governor.governor_type,
            proposal_id=proposal.id,
            formatted_proposal_id=governor.format_proposal_id(proposal.id),
            proposal=proposal,
            sim_type=SimulationType(config.type),
            simulation_id=result.sim.simulation_id,
            simulation_success=result.sim.success,
            check_results=check_results,
            decoded_actions=tuple(decoded_actions),
            blocks=blocks,
        )
        validate_report_completeness(report, resolve_enabled_checks(self.check_allow_list))
        location = self._report_renderer.render(report)
        logger.info(f"Proposal {report.formatted_proposal_id} reported at {location}")
        return report

    async def _report_blocks(self, proposal: Proposal, latest_block: BlockSnapshot) -> ReportBlocks:
        async def snapshot(block_number: int) -> Optional[BlockSnapshot]:
            if block_number > latest_block.number:
                return None
            return BlockSnapshot.from_web3_block(await self._web3.eth.get_block(block_number))

        start, end = await asyncio.gather(snapshot(proposal.start_block), snapshot(proposal.end_block))
        return ReportBlocks(start=start, end=end, current=latest_block)
