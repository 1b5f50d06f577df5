from typing import Any, Dict, Sequence

from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from abi.timelock_abi import COMPOUND_TIMELOCK_ABI
from decoding.formatters.formatter_helpers import ExecuteTransaction, FormatterContext, TransactionFormatter, address_link
from utils.formatter_utils import to_normalized_address
from utils.web3_utils import call_contract_function


def _describe_seconds(seconds: int) -> str:
    if seconds % 86400 == 0:
        return f"{seconds // 86400} days"
    if seconds % 3600 == 0:
        return f"{seconds // 3600} hours"
    return f"{seconds} seconds"


async def format_set_delay(context: FormatterContext, transaction: ExecuteTransaction, args: Sequence[Any]) -> str:
    (new_delay,) = args
    timelock = context.web3.eth.contract(address=to_normalized_address(transaction.target), abi=COMPOUND_TIMELOCK_ABI)
    previous = await call_contract_function(
        timelock.functions.delay(), (BadFunctionCallOutput, ContractLogicError), default_value=None
    )

    timelock_link = address_link(context.chain, transaction.target, "Timelock")
    if previous is not None and previous != new_delay:
        return f"Set {timelock_link} delay from {_describe_seconds(previous)} to {_describe_seconds(new_delay)}."
    return f"Set {timelock_link} delay to {_describe_seconds(new_delay)}."


TIMELOCK_FORMATTERS: Dict[str, TransactionFormatter] = {
    "setDelay(uint256)": format_set_delay,
}
