from checks.check_types import CheckResult, ProposalCheck, ProposalCheckDeps
from governance.models.proposal import Proposal
from simulation.models.simulation_result import SimulationResult


class CheckDecodeCalldata(ProposalCheck):
    check_id = "checkDecodeCalldata"
    name = "Decodes target calldata into a human-readable format"

    async def check_proposal(self, proposal: Proposal, sim: SimulationResult, deps: ProposalCheckDeps) -> CheckResult:
        actions = await deps.decoder.decode_proposal(sim.proposal)
        info = []
        warnings = []
        for action in actions:
            info.append(f"Action {action.index + 1}: {action.prose}")
            if action.used_fallback:
                warnings.append(f"Action {action.index + 1} on {action.target} could not be described by a formatter")
        return self.result(info=info, warnings=warnings)
