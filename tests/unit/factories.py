from eth_utils import to_checksum_address

from governance.enums.proposal_stage import ProposalStage
from governance.models.block import BlockSnapshot
from governance.models.proposal import Proposal
from simulation.models.simulation_result import SimulationBundle, SimulationResult

GOVERNOR_ADDRESS = to_checksum_address("0xc0da02939e1441f497fd74f78ce7decb17b66529")
TIMELOCK_ADDRESS = to_checksum_address("0x6d903f6003cca6255d85cca4d3b5e5146dc33925")
TOKEN_ADDRESS = to_checksum_address("0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48")
RECIPIENT_ADDRESS = to_checksum_address("0x2775b1c75658be0f640272ccb8c72ac986009e38")


def build_proposal(proposal_id: int = 1, **overrides) -> Proposal:
    fields = dict(
        id=proposal_id,
        proposer=RECIPIENT_ADDRESS,
        targets=[TOKEN_ADDRESS],
        values=[0],
        calldatas=["0x"],
        start_block=90,
        end_block=95,
        description="# Test proposal",
    )
    fields.update(overrides)
    return Proposal(**fields)


def build_simulation_result(proposal: Proposal = None, success: bool = True, **bundle_fields) -> SimulationResult:
    bundle = SimulationBundle(success=success, block_number=100, gas_used=21000, **bundle_fields)
    return SimulationResult(
        sim=bundle,
        proposal=proposal or build_proposal(stage=ProposalStage.ACTIVE),
        latest_block=BlockSnapshot(number=100, timestamp=1_700_000_000),
    )
