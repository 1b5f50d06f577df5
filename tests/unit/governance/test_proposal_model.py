import pytest
from pydantic import ValidationError

from governance.enums.proposal_stage import ProposalStage
from tests.unit.factories import RECIPIENT_ADDRESS, TOKEN_ADDRESS, build_proposal


def test_mismatched_action_lengths_fail_construction():
    with pytest.raises(ValidationError):
        build_proposal(targets=[TOKEN_ADDRESS, RECIPIENT_ADDRESS], values=[0], calldatas=["0x"])


def test_mismatched_calldatas_fail_construction():
    with pytest.raises(ValidationError):
        build_proposal(values=[0], calldatas=["0x", "0x"])


def test_signature_count_must_match_targets():
    with pytest.raises(ValidationError):
        build_proposal(signatures=["transfer(address,uint256)", ""])


def test_empty_signatures_are_dropped():
    proposal = build_proposal(signatures=[""])

    assert proposal.signatures is None
    assert proposal.signature_at(0) is None


def test_calldata_bytes_and_targets_are_normalized():
    proposal = build_proposal(targets=[TOKEN_ADDRESS.lower()], calldatas=[b"\x12\x34"])

    assert proposal.targets == (TOKEN_ADDRESS,)
    assert proposal.calldatas == ("0x1234",)
    assert proposal.action_count == 1


def test_proposal_is_frozen_and_with_stage_copies():
    proposal = build_proposal()

    with pytest.raises(ValidationError):
        proposal.stage = ProposalStage.ACTIVE

    staged = proposal.with_stage(ProposalStage.QUEUED)
    assert staged.stage is ProposalStage.QUEUED
    assert proposal.stage is None
