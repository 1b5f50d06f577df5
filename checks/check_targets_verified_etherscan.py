import asyncio

from checks.check_types import CheckResult, ProposalCheck, ProposalCheckDeps, unique_targets
from decoding.formatters.formatter_helpers import address_link
from governance.models.proposal import Proposal
from simulation.models.simulation_result import SimulationResult
from utils.exceptions import AbiNotFound


class CheckTargetsVerifiedEtherscan(ProposalCheck):
    check_id = "checkTargetsVerifiedEtherscan"
    name = "Check all targets are verified on Etherscan"

    async def check_proposal(self, proposal: Proposal, sim: SimulationResult, deps: ProposalCheckDeps) -> CheckResult:
        targets = unique_targets(sim.proposal)
        verdicts = await asyncio.gather(*(self._verdict(target, deps) for target in targets))

        info = []
        warnings = []
        for target, (verified, label) in zip(targets, verdicts):
            line = f"{address_link(deps.chain, target)}: {label}"
            (info if verified else warnings).append(line)
        return self.result(info=info, warnings=warnings)

    @staticmethod
    async def _verdict(target: str, deps: ProposalCheckDeps):
        try:
            contract_abi = await deps.abi_resolver.resolve(deps.chain, target)
            return True, f"Contract (verified) {contract_abi.contract_name}".rstrip()
        except AbiNotFound:
            code = await deps.web3.eth.get_code(target)
            if not code or len(code) == 0:
                return True, "EOA (verification not applicable)"
            return False, "Contract (not verified)"
