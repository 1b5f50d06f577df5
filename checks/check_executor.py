from typing import Dict, Iterable, List, Mapping, Optional

from checks import ALL_CHECKS
from checks.check_types import CheckResult, ProposalCheck, ProposalCheckDeps
from governance.models.proposal import Proposal
from simulation.models.simulation_result import SimulationResult
from utils.async_utils import gather_settled
from utils.exceptions import CheckFailure
from utils.logger_utils import get_logger

logger = get_logger("Check Executor")


def resolve_enabled_checks(
    allow_list: Optional[Iterable[str]] = None, registry: Mapping[str, ProposalCheck] = ALL_CHECKS
) -> List[str]:
    """Registry ids that are also in allow_list, in registry order. No allow-list enables everything."""
    allowed = [check_id.strip() for check_id in allow_list or [] if check_id and check_id.strip()]
    if not allowed:
        return list(registry)

    unknown = [check_id for check_id in allowed if check_id not in registry]
    if unknown:
        logger.warning(f"Ignoring unknown check ids: {', '.join(unknown)}")
    allowed_set = set(allowed)
    return [check_id for check_id in registry if check_id in allowed_set]


async def run_checks(
    proposal: Proposal,
    sim: SimulationResult,
    deps: ProposalCheckDeps,
    allow_list: Optional[Iterable[str]] = None,
    registry: Mapping[str, ProposalCheck] = ALL_CHECKS,
) -> Dict[str, CheckResult]:
    """
    Runs every enabled check concurrently and waits for all of them to settle.

    A check that raises is reported as a CheckResult carrying the error instead of
    propagating, so the returned dict always holds exactly the enabled ids.
    """
    check_ids = resolve_enabled_checks(allow_list, registry)
    logger.info(f"Running {len(check_ids)} checks for proposal {proposal.id}: {', '.join(check_ids)}")

    outcomes = await gather_settled(
        *(registry[check_id].check_proposal(proposal, sim, deps) for check_id in check_ids)
    )

    results: Dict[str, CheckResult] = {}
    for check_id, outcome in zip(check_ids, outcomes):
        check = registry[check_id]
        if outcome.ok:
            results[check_id] = outcome.value
            continue

        failure = CheckFailure(check_id, outcome.error)
        logger.warning(f"Proposal {proposal.id}: {failure}")
        results[check_id] = CheckResult(check_id=check_id, name=check.name, errors=(str(failure),))
    return results
