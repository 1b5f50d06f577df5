from checks.check_types import CheckResult, ProposalCheck, ProposalCheckDeps
from governance.models.proposal import Proposal
from simulation.models.simulation_result import SimulationResult
from utils.formatter_utils import defactor


class CheckValueRequired(ProposalCheck):
    check_id = "checkValueRequired"
    name = "Reports on whether the caller needs to send ETH with the call"

    async def check_proposal(self, proposal: Proposal, sim: SimulationResult, deps: ProposalCheckDeps) -> CheckResult:
        required = sum(sim.proposal.values)
        if required == 0:
            return self.result(info=["No ETH is required to execute this proposal"])

        if deps.timelock is None:
            return self.result(
                warnings=[f"This proposal requires {defactor(required, 18)} ETH and the governor has no timelock"]
            )

        balance = await deps.web3.eth.get_balance(deps.timelock)
        if balance >= required:
            return self.result(
                info=[
                    f"This proposal requires {defactor(required, 18)} ETH, "
                    f"covered by the timelock balance of {defactor(balance, 18)} ETH"
                ]
            )
        return self.result(
            warnings=[
                f"This proposal requires {defactor(required, 18)} ETH but the timelock only holds "
                f"{defactor(balance, 18)} ETH; the difference must be sent with the execute call"
            ]
        )
