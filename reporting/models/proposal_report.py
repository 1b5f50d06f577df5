from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from checks.check_types import CheckResult
from decoding.models.decoded_action import DecodedAction
from governance.enums.governor_type import GovernorType
from governance.enums.simulation_type import SimulationType
from governance.models.block import BlockSnapshot
from governance.models.proposal import Proposal


class ReportBlocks(BaseModel):
    model_config = ConfigDict(frozen=True)

    # None when the block is still in the future
    start: Optional[BlockSnapshot] = None
    end: Optional[BlockSnapshot] = None
    current: BlockSnapshot


class ProposalReport(BaseModel):
    """Everything the renderer needs for one proposal."""

    model_config = ConfigDict(frozen=True)

    dao_name: str
    governor_address: str
    governor_type: GovernorType
    proposal_id: int
    formatted_proposal_id: str
    proposal: Proposal
    sim_type: SimulationType
    simulation_id: Optional[str] = None
    simulation_success: bool
    # Keyed by check id in registry order
    check_results: Dict[str, CheckResult]
    decoded_actions: Tuple[DecodedAction, ...]
    blocks: ReportBlocks
