from collections import OrderedDict
from typing import List

from checks.check_types import CheckResult, ProposalCheck, ProposalCheckDeps
from constants.event_signatures import KNOWN_EVENT_NAMES
from governance.models.proposal import Proposal
from simulation.models.simulation_result import SimulationLog, SimulationResult


def _describe_log(log: SimulationLog) -> str:
    if log.name:
        args = ", ".join(f"{name}: {value}" for name, value in log.inputs)
        return f"`{log.name}({args})`"
    topic0 = log.topics[0] if log.topics else None
    known = KNOWN_EVENT_NAMES.get(topic0) if topic0 else None
    label = known or "Undecoded log"
    return f"`{label}` topics {list(log.topics)} data {log.data}"


class CheckLogs(ProposalCheck):
    check_id = "checkLogs"
    name = "Reports all events emitted from the proposal"

    async def check_proposal(self, proposal: Proposal, sim: SimulationResult, deps: ProposalCheckDeps) -> CheckResult:
        if not sim.sim.logs:
            return self.result(info=["No events emitted"])

        by_address: "OrderedDict[str, List[str]]" = OrderedDict()
        for log in sim.sim.logs:
            by_address.setdefault(log.address, []).append(_describe_log(log))

        info = []
        for address, descriptions in by_address.items():
            lines = "\n".join(f"    - {description}" for description in descriptions)
            info.append(f"{address}\n{lines}")
        return self.result(info=info)
