import orjson
import pytest
from pydantic import ValidationError

from governance.enums.governor_type import GovernorType
from simulation.models.simulation_config import (
    SimulationConfigExecuted,
    SimulationConfigProposed,
    load_simulation_config,
)
from tests.unit.factories import GOVERNOR_ADDRESS


def test_load_executed_config(tmp_path):
    path = tmp_path / "compound-213.json"
    path.write_bytes(
        orjson.dumps(
            {
                "type": "executed",
                "dao_name": "Compound",
                "governor_address": GOVERNOR_ADDRESS,
                "governor_type": "bravo",
                "proposal_id": 213,
                "replay": {"tx_hash": "0x" + "ab" * 32, "block_number": 18_000_000},
            }
        )
    )

    config = load_simulation_config(path)

    assert isinstance(config, SimulationConfigExecuted)
    assert config.governor_type is GovernorType.BRAVO
    assert config.replay.block_number == 18_000_000


def test_load_proposed_config(tmp_path):
    path = tmp_path / "uniswap.json"
    path.write_bytes(
        orjson.dumps(
            {
                "type": "proposed",
                "dao_name": "Uniswap",
                "governor_address": GOVERNOR_ADDRESS,
                "governor_type": "oz",
                "proposal_id": 1,
                "override_plan": {
                    "state_block": 100,
                    "fork_block": 100,
                    "fork_timestamp": 1000,
                    "execution_call": {"from_address": GOVERNOR_ADDRESS, "to": GOVERNOR_ADDRESS, "data": "0x", "timestamp": 1000},
                },
            }
        )
    )

    config = load_simulation_config(path)

    assert isinstance(config, SimulationConfigProposed)
    assert config.override_plan.privileged_calls == ()


def test_unknown_simulation_type_is_rejected(tmp_path):
    path = tmp_path / "bad.json"
    path.write_bytes(orjson.dumps({"type": "new", "dao_name": "X", "governor_address": GOVERNOR_ADDRESS}))

    with pytest.raises(ValidationError):
        load_simulation_config(path)
