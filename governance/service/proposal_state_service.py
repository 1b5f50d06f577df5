from types import MappingProxyType
from typing import Mapping

from governance.enums.governor_type import GovernorType
from governance.enums.proposal_stage import ProposalStage
from governance.enums.simulation_type import SimulationType
from utils.exceptions import UnknownProposalState

# GovernorBravoDelegate.ProposalState
_BRAVO_STATES = {
    0: ProposalStage.PENDING,
    1: ProposalStage.ACTIVE,
    2: ProposalStage.CANCELED,
    3: ProposalStage.DEFEATED,
    4: ProposalStage.SUCCEEDED,
    5: ProposalStage.QUEUED,
    6: ProposalStage.EXPIRED,
    7: ProposalStage.EXECUTED,
}

# IGovernor.ProposalState, same ordinals as Bravo
_OZ_STATES = dict(_BRAVO_STATES)

PROPOSAL_STATES: Mapping[GovernorType, Mapping[int, ProposalStage]] = MappingProxyType(
    {
        GovernorType.BRAVO: MappingProxyType(_BRAVO_STATES),
        GovernorType.BRAVO_COMPATIBLE: MappingProxyType(_OZ_STATES),
        GovernorType.OZ: MappingProxyType(_OZ_STATES),
    }
)


def resolve_proposal_stage(governor_type: GovernorType, proposal_id: int, raw_state: int) -> ProposalStage:
    stage = PROPOSAL_STATES[governor_type].get(int(raw_state))
    if stage is None:
        raise UnknownProposalState(proposal_id, int(raw_state), governor_type.value)
    return stage


def derive_simulation_type(stage: ProposalStage) -> SimulationType:
    """Executed proposals are replayed; every other stage has to be forced through the fork."""
    if stage is ProposalStage.EXECUTED:
        return SimulationType.EXECUTED
    return SimulationType.PROPOSED
