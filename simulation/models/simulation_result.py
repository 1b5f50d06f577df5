from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from governance.models.block import BlockSnapshot
from governance.models.proposal import Proposal


class SimulationLog(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    topics: Tuple[str, ...] = ()
    data: str = "0x"
    # Filled in when the simulation service could decode the event
    name: Optional[str] = None
    inputs: Tuple[Tuple[str, str], ...] = ()


class StateDiff(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    contract_name: Optional[str] = None
    # Variable name when known, raw slot otherwise
    key: str
    original: Optional[str] = None
    dirty: Optional[str] = None


class CallTrace(BaseModel):
    model_config = ConfigDict(frozen=True)

    call_type: str = "CALL"
    from_address: Optional[str] = None
    to: Optional[str] = None
    input: str = "0x"
    value: int = 0
    error: Optional[str] = None
    calls: Tuple["CallTrace", ...] = ()


CallTrace.model_rebuild()


class SimulationBundle(BaseModel):
    """Execution outcome as reported by the fork simulation service."""

    model_config = ConfigDict(frozen=True)

    simulation_id: Optional[str] = None
    success: bool
    gas_used: int = 0
    block_number: int
    error_message: Optional[str] = None
    logs: Tuple[SimulationLog, ...] = ()
    state_diffs: Tuple[StateDiff, ...] = ()
    call_trace: Optional[CallTrace] = None


class SimulationResult(BaseModel):
    """Created once per proposal by the simulation adapter and shared read-only afterwards."""

    model_config = ConfigDict(frozen=True)

    sim: SimulationBundle
    proposal: Proposal
    latest_block: BlockSnapshot
