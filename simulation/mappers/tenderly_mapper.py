from typing import Any, Dict, List, Optional

from simulation.models.simulation_result import CallTrace, SimulationBundle, SimulationLog, StateDiff
from utils.formatter_utils import format_arg, hex_to_dec


def _to_int(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, str) and value.startswith("0x"):
        return hex_to_dec(value) or 0
    return int(value)


def _optional_arg(value: Any) -> Optional[str]:
    return None if value is None else format_arg(value)


class TenderlyResponseMapper(object):
    @staticmethod
    def json_dict_to_bundle(response: Dict[str, Any]) -> SimulationBundle:
        """Maps one entry of a Tenderly simulate / simulate-bundle response."""
        transaction = response["transaction"]
        transaction_info = transaction.get("transaction_info") or {}

        return SimulationBundle(
            simulation_id=(response.get("simulation") or {}).get("id"),
            success=bool(transaction.get("status")),
            gas_used=_to_int(transaction.get("gas_used")),
            block_number=_to_int(transaction.get("block_number")),
            error_message=transaction.get("error_message") or None,
            logs=tuple(TenderlyResponseMapper.json_dict_to_log(log) for log in transaction_info.get("logs") or []),
            state_diffs=tuple(TenderlyResponseMapper.json_dict_to_state_diffs(transaction_info.get("state_diff") or [])),
            call_trace=TenderlyResponseMapper.json_dict_to_call_trace(transaction_info.get("call_trace")),
        )

    @staticmethod
    def json_dict_to_log(json_dict: Dict[str, Any]) -> SimulationLog:
        raw = json_dict.get("raw") or {}
        inputs = tuple(
            ((item.get("soltype") or {}).get("name", ""), format_arg(item.get("value")))
            for item in json_dict.get("inputs") or []
        )
        return SimulationLog(
            address=raw.get("address", ""),
            topics=tuple(raw.get("topics") or ()),
            data=raw.get("data") or "0x",
            name=json_dict.get("name"),
            inputs=inputs,
        )

    @staticmethod
    def json_dict_to_state_diffs(state_diff: List[Dict[str, Any]]) -> List[StateDiff]:
        diffs: List[StateDiff] = []
        for item in state_diff:
            soltype = item.get("soltype")
            if soltype:
                diffs.append(
                    StateDiff(
                        address=item.get("address", ""),
                        key=soltype.get("name", ""),
                        original=_optional_arg(item.get("original")),
                        dirty=_optional_arg(item.get("dirty")),
                    )
                )
                continue
            # Undecoded contract storage: one entry per raw slot
            for raw in item.get("raw") or []:
                diffs.append(
                    StateDiff(
                        address=raw.get("address", item.get("address", "")),
                        key=raw.get("key", ""),
                        original=raw.get("original"),
                        dirty=raw.get("dirty"),
                    )
                )
        return diffs

    @staticmethod
    def json_dict_to_call_trace(json_dict: Optional[Dict[str, Any]]) -> Optional[CallTrace]:
        if not json_dict:
            return None
        return CallTrace(
            call_type=json_dict.get("call_type") or "CALL",
            from_address=json_dict.get("from"),
            to=json_dict.get("to"),
            input=json_dict.get("input") or "0x",
            value=_to_int(json_dict.get("value")),
            error=json_dict.get("error") or None,
            calls=tuple(
                trace
                for trace in (TenderlyResponseMapper.json_dict_to_call_trace(call) for call in json_dict.get("calls") or [])
                if trace is not None
            ),
        )
