from checks.check_types import CheckResult, ProposalCheck, ProposalCheckDeps
from governance.models.proposal import Proposal
from simulation.models.simulation_result import SimulationResult


class CheckSimulationSucceeds(ProposalCheck):
    check_id = "checkSimulationSucceeds"
    name = "Simulation executes successfully"

    async def check_proposal(self, proposal: Proposal, sim: SimulationResult, deps: ProposalCheckDeps) -> CheckResult:
        bundle = sim.sim
        if bundle.success:
            return self.result(info=[f"Transactions executed successfully (gas used: {bundle.gas_used})"])
        return self.result(errors=[f"Transaction reverted: {bundle.error_message or 'no reason given'}"])
