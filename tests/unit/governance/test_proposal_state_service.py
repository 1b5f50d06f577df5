import pytest

from governance.enums.governor_type import GovernorType
from governance.enums.proposal_stage import ProposalStage
from governance.enums.simulation_type import SimulationType
from governance.service.proposal_state_service import (
    PROPOSAL_STATES,
    derive_simulation_type,
    resolve_proposal_stage,
)
from utils.exceptions import UnknownProposalState


@pytest.mark.parametrize("governor_type", list(GovernorType))
def test_every_ordinal_maps_to_a_stage(governor_type):
    stages = [resolve_proposal_stage(governor_type, 1, ordinal) for ordinal in range(8)]

    assert stages == [
        ProposalStage.PENDING,
        ProposalStage.ACTIVE,
        ProposalStage.CANCELED,
        ProposalStage.DEFEATED,
        ProposalStage.SUCCEEDED,
        ProposalStage.QUEUED,
        ProposalStage.EXPIRED,
        ProposalStage.EXECUTED,
    ]


@pytest.mark.parametrize("stage", list(ProposalStage))
def test_only_executed_stage_is_replayed(stage):
    expected = SimulationType.EXECUTED if stage is ProposalStage.EXECUTED else SimulationType.PROPOSED

    assert derive_simulation_type(stage) is expected


def test_unknown_ordinal_raises():
    with pytest.raises(UnknownProposalState) as exc_info:
        resolve_proposal_stage(GovernorType.OZ, 42, 8)

    assert exc_info.value.proposal_id == 42
    assert exc_info.value.raw_state == 8


def test_state_table_is_read_only():
    with pytest.raises(TypeError):
        PROPOSAL_STATES[GovernorType.BRAVO][8] = ProposalStage.EXECUTED
