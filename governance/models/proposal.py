from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from governance.enums.proposal_stage import ProposalStage
from utils.formatter_utils import to_normalized_address


def _to_hex(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return value


class Proposal(BaseModel):
    """
    A governance proposal as read from the governor.

    The action triple (targets, values, calldatas) is index-aligned: the i-th
    call sends values[i] wei to targets[i] with calldatas[i].
    """

    model_config = ConfigDict(frozen=True)

    id: int
    proposer: Optional[str] = None

    targets: Tuple[str, ...]
    values: Tuple[int, ...]
    calldatas: Tuple[str, ...]
    # Bravo-style proposals may carry the function signature separately from the calldata
    signatures: Optional[Tuple[str, ...]] = None

    start_block: int
    end_block: int
    eta: Optional[int] = None
    description: Optional[str] = None

    for_votes: Optional[int] = None
    against_votes: Optional[int] = None
    abstain_votes: Optional[int] = None

    stage: Optional[ProposalStage] = None

    @field_validator("targets", mode="before")
    @classmethod
    def _normalize_targets(cls, targets: Any) -> Any:
        return tuple(to_normalized_address(target) for target in targets)

    @field_validator("calldatas", mode="before")
    @classmethod
    def _calldatas_to_hex(cls, calldatas: Any) -> Any:
        return tuple(_to_hex(calldata) for calldata in calldatas)

    @field_validator("signatures", mode="before")
    @classmethod
    def _empty_signatures_to_none(cls, signatures: Any) -> Any:
        if signatures is None:
            return None
        signatures = tuple(signatures)
        if not any(signatures):
            return None
        return signatures

    @model_validator(mode="after")
    def _check_action_lengths(self) -> "Proposal":
        lengths = (len(self.targets), len(self.values), len(self.calldatas))
        if len(set(lengths)) != 1:
            raise ValueError(
                f"targets, values and calldatas must have equal length, got {lengths[0]}, {lengths[1]}, {lengths[2]}"
            )
        if self.signatures is not None and len(self.signatures) != len(self.targets):
            raise ValueError(f"expected {len(self.targets)} signatures, got {len(self.signatures)}")
        return self

    @property
    def action_count(self) -> int:
        return len(self.targets)

    def signature_at(self, index: int) -> Optional[str]:
        if self.signatures is None:
            return None
        return self.signatures[index] or None

    def with_stage(self, stage: ProposalStage) -> "Proposal":
        return self.model_copy(update={"stage": stage})
