from pathlib import Path
from typing import Annotated, Dict, Literal, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from governance.enums.governor_type import GovernorType


class ReplayRequest(BaseModel):
    """The historical execution transaction to replay, anchored at its block."""

    model_config = ConfigDict(frozen=True)

    tx_hash: str
    block_number: int


class PrivilegedCall(BaseModel):
    """A call sent from an impersonated account inside the fork."""

    model_config = ConfigDict(frozen=True)

    from_address: str
    to: str
    data: str
    value: int = 0
    timestamp: int
    description: str = ""


class OverridePlan(BaseModel):
    """
    How to force a not-yet-executed proposal through a fork.

    State is read at state_block, which must already exist on chain; the simulated
    block header carries fork_block and fork_timestamp, which may lie in the future.
    storage_overrides maps contract address -> {slot: 32-byte value}. Privileged calls
    run in order before the execution call.
    """

    model_config = ConfigDict(frozen=True)

    state_block: int
    fork_block: int
    fork_timestamp: int
    storage_overrides: Dict[str, Dict[str, str]] = Field(default_factory=dict)
    privileged_calls: Tuple[PrivilegedCall, ...] = ()
    execution_call: PrivilegedCall


class SimulationConfigBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    dao_name: str
    governor_address: str
    governor_type: GovernorType
    proposal_id: int


class SimulationConfigExecuted(SimulationConfigBase):
    type: Literal["executed"] = "executed"
    replay: ReplayRequest


class SimulationConfigProposed(SimulationConfigBase):
    type: Literal["proposed"] = "proposed"
    override_plan: OverridePlan


SimulationConfig = Annotated[
    Union[SimulationConfigExecuted, SimulationConfigProposed],
    Field(discriminator="type"),
]

SIMULATION_CONFIG_ADAPTER: TypeAdapter = TypeAdapter(SimulationConfig)


def load_simulation_config(path: Union[str, Path]) -> Union[SimulationConfigExecuted, SimulationConfigProposed]:
    """Loads a pre-built simulation config from a JSON file."""
    return SIMULATION_CONFIG_ADAPTER.validate_json(Path(path).read_bytes())
