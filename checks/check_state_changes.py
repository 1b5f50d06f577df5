from collections import OrderedDict
from typing import List

from checks.check_types import CheckResult, ProposalCheck, ProposalCheckDeps
from governance.models.proposal import Proposal
from simulation.models.simulation_result import SimulationResult


class CheckStateChanges(ProposalCheck):
    check_id = "checkStateChanges"
    name = "Reports all state changes from the proposal"

    async def check_proposal(self, proposal: Proposal, sim: SimulationResult, deps: ProposalCheckDeps) -> CheckResult:
        if not sim.sim.state_diffs:
            return self.result(info=["No state changes"])

        by_address: "OrderedDict[str, List[str]]" = OrderedDict()
        for diff in sim.sim.state_diffs:
            by_address.setdefault(diff.address, []).append(f"`{diff.key}` changed from `{diff.original}` to `{diff.dirty}`")

        info = []
        for address, changes in by_address.items():
            lines = "\n".join(f"    - {change}" for change in changes)
            info.append(f"{address}\n{lines}")
        return self.result(info=info)
