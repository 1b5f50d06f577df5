from typing import Any, Dict, Optional, Sequence

from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from abi.dao_governance_abi import GOVERNOR_BRAVO_ABI
from decoding.formatters.formatter_helpers import (
    ExecuteTransaction,
    FormatterContext,
    TransactionFormatter,
    address_link,
)
from utils.formatter_utils import defactor, to_normalized_address
from utils.web3_utils import call_contract_function


async def _current_value(context: FormatterContext, governor_address: str, function_name: str) -> Optional[int]:
    governor = context.web3.eth.contract(address=to_normalized_address(governor_address), abi=GOVERNOR_BRAVO_ABI)
    func = getattr(governor.functions, function_name)()
    return await call_contract_function(func, (BadFunctionCallOutput, ContractLogicError), default_value=None)


def _change(label: str, previous: Optional[int], new: int, unit: str) -> str:
    if previous is not None and previous != new:
        return f"Set {label} from {previous} to {new} {unit}."
    return f"Set {label} to {new} {unit}."


async def format_set_voting_delay(context: FormatterContext, transaction: ExecuteTransaction, args: Sequence[Any]) -> str:
    (new_delay,) = args
    previous = await _current_value(context, transaction.target, "votingDelay")
    return _change("voting delay", previous, new_delay, "blocks")


async def format_set_voting_period(context: FormatterContext, transaction: ExecuteTransaction, args: Sequence[Any]) -> str:
    (new_period,) = args
    previous = await _current_value(context, transaction.target, "votingPeriod")
    return _change("voting period", previous, new_period, "blocks")


async def format_set_proposal_threshold(
    context: FormatterContext, transaction: ExecuteTransaction, args: Sequence[Any]
) -> str:
    (new_threshold,) = args
    # Voting weight uses 18 decimals
    return f"Set proposal threshold to {defactor(new_threshold, 18)} votes."


async def format_set_pending_admin(context: FormatterContext, transaction: ExecuteTransaction, args: Sequence[Any]) -> str:
    (new_admin,) = args
    return (
        f"Set pending admin of {address_link(context.chain, transaction.target, 'governor')} "
        f"to {address_link(context.chain, new_admin)}."
    )


GOVERNOR_BRAVO_FORMATTERS: Dict[str, TransactionFormatter] = {
    "_setVotingDelay(uint256)": format_set_voting_delay,
    "_setVotingPeriod(uint256)": format_set_voting_period,
    "_setProposalThreshold(uint256)": format_set_proposal_threshold,
    "_setPendingAdmin(address)": format_set_pending_admin,
}
