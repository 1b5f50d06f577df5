from simulation.mappers.tenderly_mapper import TenderlyResponseMapper
from tests.unit.factories import TIMELOCK_ADDRESS, TOKEN_ADDRESS

TENDERLY_RESPONSE = {
    "simulation": {"id": "sim-123"},
    "transaction": {
        "status": True,
        "gas_used": 123456,
        "block_number": 100,
        "error_message": "",
        "transaction_info": {
            "logs": [
                {
                    "name": "Transfer",
                    "inputs": [
                        {"soltype": {"name": "from"}, "value": TIMELOCK_ADDRESS},
                        {"soltype": {"name": "value"}, "value": "1000000"},
                    ],
                    "raw": {"address": TOKEN_ADDRESS, "topics": ["0xddf2"], "data": "0x01"},
                }
            ],
            "state_diff": [
                {
                    "address": TOKEN_ADDRESS,
                    "soltype": {"name": "balances"},
                    "original": {"0xabc": "1"},
                    "dirty": None,
                },
                {
                    "address": TIMELOCK_ADDRESS,
                    "soltype": None,
                    "raw": [{"address": TIMELOCK_ADDRESS, "key": "0x01", "original": "0x00", "dirty": "0x01"}],
                },
            ],
            "call_trace": {
                "call_type": "CALL",
                "from": TIMELOCK_ADDRESS,
                "to": TOKEN_ADDRESS,
                "input": "0xa9059cbb",
                "value": "0x0",
                "calls": [{"call_type": "DELEGATECALL", "to": TOKEN_ADDRESS, "calls": None}],
            },
        },
    },
}


def test_json_dict_to_bundle():
    bundle = TenderlyResponseMapper.json_dict_to_bundle(TENDERLY_RESPONSE)

    assert bundle.simulation_id == "sim-123"
    assert bundle.success is True
    assert bundle.gas_used == 123456
    assert bundle.error_message is None

    (log,) = bundle.logs
    assert log.address == TOKEN_ADDRESS
    assert log.name == "Transfer"
    assert log.inputs == (("from", TIMELOCK_ADDRESS), ("value", "1000000"))

    decoded_diff, raw_diff = bundle.state_diffs
    assert decoded_diff.key == "balances"
    assert decoded_diff.dirty is None
    assert raw_diff.key == "0x01"
    assert raw_diff.original == "0x00"

    assert bundle.call_trace.to == TOKEN_ADDRESS
    assert bundle.call_trace.calls[0].call_type == "DELEGATECALL"


def test_reverted_transaction_without_info():
    bundle = TenderlyResponseMapper.json_dict_to_bundle(
        {"transaction": {"status": False, "block_number": 5, "error_message": "execution reverted"}}
    )

    assert bundle.success is False
    assert bundle.error_message == "execution reverted"
    assert bundle.logs == ()
    assert bundle.call_trace is None
