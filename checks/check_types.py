from typing import Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from web3 import AsyncWeb3

from decoding.abi_resolver import BaseAbiResolver
from decoding.transaction_decoder import TransactionDecoder
from governance.enums.chain import Chain
from governance.models.proposal import Proposal
from governance.service.governor_service import BaseGovernor
from simulation.models.simulation_result import SimulationResult


class CheckResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    check_id: str
    name: str
    info: Tuple[str, ...] = Field(default_factory=tuple)
    warnings: Tuple[str, ...] = Field(default_factory=tuple)
    errors: Tuple[str, ...] = Field(default_factory=tuple)

    @property
    def passed(self) -> bool:
        return not self.errors


class ProposalCheckDeps(object):
    """Shared, read-only collaborators handed to every check of a proposal."""

    __slots__ = ("governor", "web3", "timelock", "chain", "decoder", "abi_resolver")

    def __init__(
        self,
        governor: BaseGovernor,
        web3: AsyncWeb3,
        timelock: Optional[str],
        chain: Chain,
        decoder: TransactionDecoder,
        abi_resolver: BaseAbiResolver,
    ):
        object.__setattr__(self, "governor", governor)
        object.__setattr__(self, "web3", web3)
        object.__setattr__(self, "timelock", timelock)
        object.__setattr__(self, "chain", chain)
        object.__setattr__(self, "decoder", decoder)
        object.__setattr__(self, "abi_resolver", abi_resolver)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is read-only")


class ProposalCheck(object):
    """A named, side-effect free inspection of one simulated proposal."""

    check_id: str
    name: str

    async def check_proposal(
        self, proposal: Proposal, sim: SimulationResult, deps: ProposalCheckDeps
    ) -> CheckResult:
        raise NotImplementedError()

    def result(
        self,
        info: Iterable[str] = (),
        warnings: Iterable[str] = (),
        errors: Iterable[str] = (),
    ) -> CheckResult:
        return CheckResult(
            check_id=self.check_id,
            name=self.name,
            info=tuple(info),
            warnings=tuple(warnings),
            errors=tuple(errors),
        )


def unique_targets(proposal: Proposal) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(proposal.targets))
