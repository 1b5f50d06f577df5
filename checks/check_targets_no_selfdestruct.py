import asyncio
from typing import Tuple

from pyevmasm import disassemble_all

from checks.check_types import CheckResult, ProposalCheck, ProposalCheckDeps, unique_targets
from decoding.formatters.formatter_helpers import address_link
from governance.models.proposal import Proposal
from simulation.models.simulation_result import SimulationResult

SELFDESTRUCT = "SELFDESTRUCT"
DELEGATECALL = "DELEGATECALL"


def scan_opcodes(bytecode: bytes) -> Tuple[bool, bool]:
    """Returns (has_selfdestruct, has_delegatecall) for runtime bytecode."""
    names = {instruction.name for instruction in disassemble_all(bytecode)}
    return SELFDESTRUCT in names, DELEGATECALL in names


class CheckTargetsNoSelfdestruct(ProposalCheck):
    check_id = "checkTargetsNoSelfdestruct"
    name = "Check all targets do not contain selfdestruct"

    async def check_proposal(self, proposal: Proposal, sim: SimulationResult, deps: ProposalCheckDeps) -> CheckResult:
        targets = unique_targets(sim.proposal)
        codes = await asyncio.gather(*(deps.web3.eth.get_code(target) for target in targets))

        info = []
        warnings = []
        errors = []
        for target, code in zip(targets, codes):
            link = address_link(deps.chain, target)
            if not code or len(code) == 0:
                info.append(f"{link}: EOA")
                continue

            has_selfdestruct, has_delegatecall = scan_opcodes(bytes(code))
            if has_selfdestruct:
                errors.append(f"{link}: Contract (with SELFDESTRUCT)")
            elif has_delegatecall:
                warnings.append(f"{link}: Contract (with DELEGATECALL, code may be replaced)")
            else:
                info.append(f"{link}: Contract (looks safe)")
        return self.result(info=info, warnings=warnings, errors=errors)
