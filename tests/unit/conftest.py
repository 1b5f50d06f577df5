import pytest

from governance.models.proposal import Proposal
from simulation.models.simulation_result import SimulationResult
from tests.unit.factories import build_proposal, build_simulation_result


@pytest.fixture
def proposal() -> Proposal:
    return build_proposal()


@pytest.fixture
def simulation_result(proposal) -> SimulationResult:
    return build_simulation_result(proposal)
