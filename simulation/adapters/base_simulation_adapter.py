from typing import Union

from simulation.models.simulation_config import SimulationConfigExecuted, SimulationConfigProposed
from simulation.models.simulation_result import SimulationResult


class BaseSimulationAdapter(object):
    """
    Boundary to an external fork simulation service.

    One call to simulate() per proposal per run. Implementations do not retry; any
    failure surfaces as SimulationAdapterFailure.
    """

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass

    async def simulate(self, config: Union[SimulationConfigExecuted, SimulationConfigProposed]) -> SimulationResult:
        raise NotImplementedError()
