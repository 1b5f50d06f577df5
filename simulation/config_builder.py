from typing import Dict, List, Union

from eth_utils import to_bytes
from web3 import AsyncWeb3

from abi.timelock_abi import TIMELOCK_CONTROLLER_ABI
from constants.constants import (
    BRAVO_PROPOSAL_ABSTAIN_VOTES_OFFSET,
    BRAVO_PROPOSAL_AGAINST_VOTES_OFFSET,
    BRAVO_PROPOSAL_ETA_OFFSET,
    BRAVO_PROPOSAL_FLAGS_OFFSET,
    BRAVO_PROPOSAL_FOR_VOTES_OFFSET,
    ZERO_ADDRESS,
    ZERO_BYTES32,
)
from governance.enums.chain import Chain
from governance.enums.proposal_stage import ProposalStage
from governance.enums.simulation_type import SimulationType
from governance.models.block import BlockSnapshot
from governance.models.proposal import Proposal
from governance.service.governor_service import BaseGovernor, description_hash
from governance.service.proposal_state_service import derive_simulation_type
from simulation.models.simulation_config import (
    OverridePlan,
    PrivilegedCall,
    ReplayRequest,
    SimulationConfigExecuted,
    SimulationConfigProposed,
)
from simulation.storage_slots import (
    bravo_proposal_field_slot,
    compound_timelock_tx_hash,
    governor_timelock_salt,
    queued_transaction_slot,
    to_word,
)
from utils.exceptions import MissingExecution, MissingTimelock
from utils.logger_utils import get_logger
from utils.web3_utils import encode_function_call

logger = get_logger("Simulation Config Builder")

SCHEDULE_BATCH_SIGNATURE = "scheduleBatch(address[],uint256[],bytes[],bytes32,bytes32,uint256)"
EXECUTE_BATCH_SIGNATURE = "executeBatch(address[],uint256[],bytes[],bytes32,bytes32)"


class SimulationConfigBuilder(object):
    """
    Decides how a proposal is pushed through a fork.

    Executed proposals are replayed from their historical transaction. Anything else is
    forced: with direct storage overrides when the governor's layout is known, or with
    impersonated calls against the timelock otherwise. The proposal payload itself is
    never modified.
    """

    def __init__(self, web3: AsyncWeb3, dao_name: str, chain: Chain = Chain.MAINNET):
        self._web3 = web3
        self.dao_name = dao_name
        self.chain = chain

    async def build(
        self,
        proposal: Proposal,
        governor: BaseGovernor,
        stage: ProposalStage,
        latest_block: BlockSnapshot,
    ) -> Union[SimulationConfigExecuted, SimulationConfigProposed]:
        sim_type = derive_simulation_type(stage)
        if sim_type is SimulationType.EXECUTED:
            return await self._build_executed(proposal, governor)
        return await self._build_proposed(proposal, governor, latest_block)

    async def _build_executed(self, proposal: Proposal, governor: BaseGovernor) -> SimulationConfigExecuted:
        execution = await governor.find_execution(proposal.id)
        if execution is None:
            raise MissingExecution(proposal.id, governor.address)

        return SimulationConfigExecuted(
            dao_name=self.dao_name,
            governor_address=governor.address,
            governor_type=governor.governor_type,
            proposal_id=proposal.id,
            replay=ReplayRequest(tx_hash=execution.tx_hash, block_number=execution.block_number),
        )

    async def _build_proposed(
        self, proposal: Proposal, governor: BaseGovernor, latest_block: BlockSnapshot
    ) -> SimulationConfigProposed:
        timelock = await governor.timelock()
        if timelock is None:
            raise MissingTimelock(governor.address)

        fork_block = max(latest_block.number, proposal.end_block + 1)
        fork_timestamp = self._project_timestamp(latest_block, fork_block)

        if governor.governor_type.has_predictable_storage:
            plan = await self._storage_override_plan(proposal, governor, timelock, latest_block, fork_block, fork_timestamp)
        else:
            plan = await self._privileged_call_plan(proposal, governor, timelock, latest_block, fork_block, fork_timestamp)

        return SimulationConfigProposed(
            dao_name=self.dao_name,
            governor_address=governor.address,
            governor_type=governor.governor_type,
            proposal_id=proposal.id,
            override_plan=plan,
        )

    def _project_timestamp(self, latest_block: BlockSnapshot, block_number: int) -> int:
        blocks_ahead = max(block_number - latest_block.number, 0)
        return latest_block.timestamp + blocks_ahead * self.chain.block_time_seconds

    async def _storage_override_plan(
        self,
        proposal: Proposal,
        governor: BaseGovernor,
        timelock: str,
        latest_block: BlockSnapshot,
        fork_block: int,
        fork_timestamp: int,
    ) -> OverridePlan:
        # eta == fork timestamp makes the proposal Queued and immediately executable
        eta = fork_timestamp
        snapshot_block = min(proposal.start_block, max(latest_block.number - 1, 0))
        quorum = await governor.quorum(snapshot_block)

        governor_storage: Dict[str, str] = {
            bravo_proposal_field_slot(proposal.id, BRAVO_PROPOSAL_ETA_OFFSET): to_word(eta),
            bravo_proposal_field_slot(proposal.id, BRAVO_PROPOSAL_FOR_VOTES_OFFSET): to_word(quorum + 1),
            bravo_proposal_field_slot(proposal.id, BRAVO_PROPOSAL_AGAINST_VOTES_OFFSET): to_word(0),
            bravo_proposal_field_slot(proposal.id, BRAVO_PROPOSAL_ABSTAIN_VOTES_OFFSET): to_word(0),
            # clears both canceled and executed
            bravo_proposal_field_slot(proposal.id, BRAVO_PROPOSAL_FLAGS_OFFSET): to_word(0),
        }

        timelock_storage: Dict[str, str] = {}
        for index in range(proposal.action_count):
            tx_hash = compound_timelock_tx_hash(
                proposal.targets[index],
                proposal.values[index],
                proposal.signature_at(index) or "",
                proposal.calldatas[index],
                eta,
            )
            timelock_storage[queued_transaction_slot(tx_hash)] = to_word(1)

        logger.info(
            f"Proposal {governor.format_proposal_id(proposal.id)}: storage overrides for "
            f"{len(governor_storage)} governor and {len(timelock_storage)} timelock slots"
        )
        return OverridePlan(
            state_block=latest_block.number,
            fork_block=fork_block,
            fork_timestamp=fork_timestamp,
            storage_overrides={governor.address: governor_storage, timelock: timelock_storage},
            execution_call=PrivilegedCall(
                from_address=proposal.proposer or ZERO_ADDRESS,
                to=governor.address,
                data=governor.execute_calldata(proposal),
                value=sum(proposal.values),
                timestamp=fork_timestamp,
                description="execute proposal through the governor",
            ),
        )

    async def _privileged_call_plan(
        self,
        proposal: Proposal,
        governor: BaseGovernor,
        timelock: str,
        latest_block: BlockSnapshot,
        fork_block: int,
        fork_timestamp: int,
    ) -> OverridePlan:
        timelock_contract = self._web3.eth.contract(address=timelock, abi=TIMELOCK_CONTROLLER_ABI)
        min_delay = await timelock_contract.functions.getMinDelay().call()

        salt = governor_timelock_salt(governor.address, description_hash(proposal.description or ""))
        targets = list(proposal.targets)
        values = list(proposal.values)
        payloads: List[bytes] = [to_bytes(hexstr=calldata) for calldata in proposal.calldatas]
        predecessor = to_bytes(hexstr=ZERO_BYTES32)

        executable_at = fork_timestamp + min_delay
        schedule = PrivilegedCall(
            from_address=governor.address,
            to=timelock,
            data=encode_function_call(SCHEDULE_BATCH_SIGNATURE, [targets, values, payloads, predecessor, salt, min_delay]),
            timestamp=fork_timestamp,
            description="queue proposal actions in the timelock as the governor",
        )
        execute = PrivilegedCall(
            from_address=governor.address,
            to=timelock,
            data=encode_function_call(EXECUTE_BATCH_SIGNATURE, [targets, values, payloads, predecessor, salt]),
            value=sum(values),
            timestamp=executable_at,
            description="execute queued actions from the timelock as the governor",
        )

        logger.info(
            f"Proposal {governor.format_proposal_id(proposal.id)}: privileged timelock calls, "
            f"executable at {executable_at} (min delay {min_delay}s)"
        )
        return OverridePlan(
            state_block=latest_block.number,
            fork_block=fork_block,
            fork_timestamp=executable_at,
            privileged_calls=(schedule,),
            execution_call=execute,
        )


def describe_config(config: Union[SimulationConfigExecuted, SimulationConfigProposed]) -> str:
    if isinstance(config, SimulationConfigExecuted):
        return f"replay {config.replay.tx_hash} at block {config.replay.block_number}"
    plan = config.override_plan
    return (
        f"forced execution from state of block {plan.state_block} as block {plan.fork_block} "
        f"(timestamp {plan.fork_timestamp}) with "
        f"{sum(len(slots) for slots in plan.storage_overrides.values())} storage overrides and "
        f"{len(plan.privileged_calls)} privileged calls"
    )
