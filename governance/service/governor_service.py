from typing import Any, Dict, List, Optional, Type

from eth_utils import encode_hex, keccak
from web3 import AsyncWeb3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError, Web3Exception

from abi.dao_governance_abi import GOVERNOR_BRAVO_ABI, GOVERNOR_BRAVO_COMPATIBILITY_ABI, OZ_GOVERNOR_ABI
from constants.constants import DEFAULT_LOG_CHUNK_SIZE, ZERO_ADDRESS
from governance.enums.governor_type import GovernorType
from governance.models.proposal import Proposal
from utils.exceptions import UnsupportedGovernor
from utils.formatter_utils import to_normalized_address
from utils.logger_utils import get_logger
from utils.web3_utils import call_contract_function, encode_function_call

logger = get_logger("Governor Service")

# BadFunctionCallOutput: the contract doesn't implement the function
# ContractLogicError: the call reverted (no matching selector and no fallback)
VIEW_CALL_IGNORED_ERRORS = (BadFunctionCallOutput, ContractLogicError, Web3Exception, OverflowError, ValueError)


class ExecutionRecord(object):
    """Where a proposal was executed on chain."""

    def __init__(self, tx_hash: str, block_number: int):
        self.tx_hash = tx_hash
        self.block_number = block_number

    def __repr__(self) -> str:
        return f"ExecutionRecord(tx_hash={self.tx_hash}, block_number={self.block_number})"


async def _responds(func) -> bool:
    sentinel = object()
    return await call_contract_function(func, VIEW_CALL_IGNORED_ERRORS, default_value=sentinel) is not sentinel


class BaseGovernor(object):
    """
    Uniform view over a governor contract. Subclasses bind the dialect ABI once at
    construction; callers never branch on the dialect.
    """

    governor_type: GovernorType
    abi: List[Dict[str, Any]]
    # Name of the proposal id argument in ProposalCreated / ProposalExecuted
    id_arg: str

    def __init__(
        self,
        web3: AsyncWeb3,
        address: str,
        from_block: int = 0,
        log_chunk_size: int = DEFAULT_LOG_CHUNK_SIZE,
    ):
        self._web3 = web3
        self.address = to_normalized_address(address)
        self.contract = web3.eth.contract(address=self.address, abi=self.abi)
        self._from_block = from_block
        self._log_chunk_size = log_chunk_size
        self._created_events: Dict[int, Any] = {}

    async def state(self, proposal_id: int) -> int:
        return await self.contract.functions.state(proposal_id).call()

    async def proposal_details(self, proposal_id: int) -> Proposal:
        raise NotImplementedError()

    async def voting_delay(self) -> int:
        return await self.contract.functions.votingDelay().call()

    async def voting_period(self) -> int:
        return await self.contract.functions.votingPeriod().call()

    async def quorum(self, block_number: int) -> int:
        return await self.contract.functions.quorum(block_number).call()

    async def timelock(self) -> Optional[str]:
        """Returns the executor address, or None when the governor has none."""
        address = await call_contract_function(self.contract.functions.timelock(), VIEW_CALL_IGNORED_ERRORS)
        if address is None or to_normalized_address(address) == ZERO_ADDRESS:
            return None
        return to_normalized_address(address)

    def execute_calldata(self, proposal: Proposal) -> str:
        raise NotImplementedError()

    def format_proposal_id(self, proposal_id: int) -> str:
        return format_proposal_id(self.governor_type, proposal_id)

    async def proposal_ids(self, as_of_block: int) -> List[int]:
        """Ids of every proposal created up to as_of_block, in creation order."""
        events = await self._get_logs(self.contract.events.ProposalCreated, self._from_block, as_of_block)
        events.sort(key=lambda event: (event["blockNumber"], event["logIndex"]))

        proposal_ids = []
        for event in events:
            proposal_id = int(event["args"][self.id_arg])
            self._created_events[proposal_id] = event
            proposal_ids.append(proposal_id)
        return proposal_ids

    async def find_execution(self, proposal_id: int) -> Optional[ExecutionRecord]:
        latest_block = await self._web3.eth.block_number
        events = await self._get_logs(self.contract.events.ProposalExecuted, self._from_block, latest_block)
        for event in events:
            if int(event["args"][self.id_arg]) == proposal_id:
                return ExecutionRecord(
                    tx_hash=_to_hex(event["transactionHash"]),
                    block_number=event["blockNumber"],
                )
        return None

    async def _get_created_event(self, proposal_id: int) -> Any:
        if proposal_id not in self._created_events:
            await self.proposal_ids(await self._web3.eth.block_number)
        event = self._created_events.get(proposal_id)
        if event is None:
            raise ValueError(f"No ProposalCreated event for proposal {proposal_id} on {self.address}")
        return event

    async def _get_logs(self, event, from_block: int, to_block: int) -> List[Any]:
        logs: List[Any] = []
        start = from_block
        while start <= to_block:
            end = min(start + self._log_chunk_size - 1, to_block)
            logger.debug(f"Fetching {event.event_name} logs for {self.address} in blocks {start}-{end}")
            logs.extend(await event.get_logs(from_block=start, to_block=end))
            start = end + 1
        return logs


class BravoGovernor(BaseGovernor):
    governor_type = GovernorType.BRAVO
    abi = GOVERNOR_BRAVO_ABI
    id_arg = "id"

    async def proposal_details(self, proposal_id: int) -> Proposal:
        (
            _id,
            proposer,
            eta,
            start_block,
            end_block,
            for_votes,
            against_votes,
            abstain_votes,
            _canceled,
            _executed,
        ) = await self.contract.functions.proposals(proposal_id).call()
        targets, values, signatures, calldatas = await self.contract.functions.getActions(proposal_id).call()

        description = None
        if proposal_id in self._created_events:
            description = self._created_events[proposal_id]["args"]["description"]

        return Proposal(
            id=proposal_id,
            proposer=proposer,
            targets=targets,
            values=values,
            signatures=signatures,
            calldatas=calldatas,
            start_block=start_block,
            end_block=end_block,
            eta=eta or None,
            description=description,
            for_votes=for_votes,
            against_votes=against_votes,
            abstain_votes=abstain_votes,
        )

    async def quorum(self, block_number: int) -> int:
        # Bravo quorum is a constant and ignores the block
        return await self.contract.functions.quorumVotes().call()

    def execute_calldata(self, proposal: Proposal) -> str:
        return encode_function_call("execute(uint256)", [proposal.id])


class OzGovernor(BaseGovernor):
    governor_type = GovernorType.OZ
    abi = OZ_GOVERNOR_ABI
    id_arg = "proposalId"

    async def proposal_details(self, proposal_id: int) -> Proposal:
        event = await self._get_created_event(proposal_id)
        args = event["args"]
        eta = await call_contract_function(self.contract.functions.proposalEta(proposal_id), VIEW_CALL_IGNORED_ERRORS)
        votes = await call_contract_function(self.contract.functions.proposalVotes(proposal_id), VIEW_CALL_IGNORED_ERRORS)
        against_votes, for_votes, abstain_votes = votes if votes is not None else (None, None, None)

        return Proposal(
            id=proposal_id,
            proposer=args["proposer"],
            targets=args["targets"],
            values=args["values"],
            signatures=args["signatures"],
            calldatas=args["calldatas"],
            start_block=args["startBlock"],
            end_block=args["endBlock"],
            eta=eta or None,
            description=args["description"],
            for_votes=for_votes,
            against_votes=against_votes,
            abstain_votes=abstain_votes,
        )

    def execute_calldata(self, proposal: Proposal) -> str:
        return encode_function_call(
            "execute(address[],uint256[],bytes[],bytes32)",
            [
                list(proposal.targets),
                list(proposal.values),
                [bytes.fromhex(calldata[2:]) for calldata in proposal.calldatas],
                description_hash(proposal.description or ""),
            ],
        )


class BravoCompatibleGovernor(OzGovernor):
    governor_type = GovernorType.BRAVO_COMPATIBLE
    abi = GOVERNOR_BRAVO_COMPATIBILITY_ABI


GOVERNOR_CLASSES: Dict[GovernorType, Type[BaseGovernor]] = {
    GovernorType.BRAVO: BravoGovernor,
    GovernorType.BRAVO_COMPATIBLE: BravoCompatibleGovernor,
    GovernorType.OZ: OzGovernor,
}


def _to_hex(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return encode_hex(bytes(value))
    return str(value)


def description_hash(description: str) -> bytes:
    return keccak(text=description)


def format_proposal_id(governor_type: GovernorType, proposal_id: int) -> str:
    """Bravo ids are small counters; hashed ids read better in hex."""
    if governor_type.uses_hashed_proposal_ids:
        return hex(proposal_id)
    return str(proposal_id)


async def infer_governor_type(web3: AsyncWeb3, address: str) -> GovernorType:
    """
    Classifies a governor by the read-only functions it answers.
    """
    checksum_address = to_normalized_address(address)
    contract = web3.eth.contract(
        address=checksum_address,
        abi=GOVERNOR_BRAVO_COMPATIBILITY_ABI + [GOVERNOR_BRAVO_ABI[0]],
    )

    if await _responds(contract.functions.initialProposalId()):
        governor_type = GovernorType.BRAVO
    else:
        has_snapshot = await _responds(contract.functions.proposalSnapshot(0))
        if not has_snapshot:
            raise UnsupportedGovernor(checksum_address, "neither initialProposalId() nor proposalSnapshot() answered")
        has_bravo_views = await _responds(contract.functions.proposals(0))
        governor_type = GovernorType.BRAVO_COMPATIBLE if has_bravo_views else GovernorType.OZ

    logger.info(f"Governor {checksum_address} inferred as {governor_type.value}")
    return governor_type


def get_governor(
    web3: AsyncWeb3,
    governor_type: GovernorType,
    address: str,
    from_block: int = 0,
    log_chunk_size: int = DEFAULT_LOG_CHUNK_SIZE,
) -> BaseGovernor:
    governor_class = GOVERNOR_CLASSES.get(governor_type)
    if governor_class is None:
        raise UnsupportedGovernor(address, f"no implementation for {governor_type}")
    return governor_class(web3, address, from_block=from_block, log_chunk_size=log_chunk_size)


async def get_proposal_ids(
    web3: AsyncWeb3,
    governor_type: GovernorType,
    address: str,
    as_of_block: int,
    from_block: int = 0,
    log_chunk_size: int = DEFAULT_LOG_CHUNK_SIZE,
) -> List[int]:
    governor = get_governor(web3, governor_type, address, from_block=from_block, log_chunk_size=log_chunk_size)
    return await governor.proposal_ids(as_of_block)
