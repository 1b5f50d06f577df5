from typing import Any, Dict, Sequence

from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from abi.erc20_abi import CTOKEN_ABI
from decoding.formatters.formatter_helpers import (
    ExecuteTransaction,
    FormatterContext,
    TransactionFormatter,
    address_link,
    contract_name_with_link,
    token_amount_with_link,
    token_name_with_link,
)
from utils.formatter_utils import defactor, get_percentage_for_factor, to_normalized_address
from utils.web3_utils import call_contract_function


async def format_transfer(context: FormatterContext, transaction: ExecuteTransaction, args: Sequence[Any]) -> str:
    recipient, amount = args
    amount_with_link = await token_amount_with_link(context, transaction.target, amount)
    return f"Transfer {amount_with_link} to {address_link(context.chain, recipient)}."


async def format_approve(context: FormatterContext, transaction: ExecuteTransaction, args: Sequence[Any]) -> str:
    spender, amount = args
    amount_with_link = await token_amount_with_link(context, transaction.target, amount)
    return f"Approve {amount_with_link} tokens to {address_link(context.chain, spender)}."


async def format_set_reserve_factor(context: FormatterContext, transaction: ExecuteTransaction, args: Sequence[Any]) -> str:
    (new_factor,) = args
    ctoken = context.web3.eth.contract(address=to_normalized_address(transaction.target), abi=CTOKEN_ABI)
    previous_factor = await call_contract_function(
        ctoken.functions.reserveFactorMantissa(), (BadFunctionCallOutput, ContractLogicError), default_value=None
    )

    token_link = await token_name_with_link(context, transaction.target)
    new_percentage = get_percentage_for_factor(new_factor)
    if previous_factor is not None:
        previous_percentage = get_percentage_for_factor(previous_factor)
        if previous_percentage != new_percentage:
            return f"Set reserve factor for {token_link} from {previous_percentage} to {new_percentage}."
    return f"Set reserve factor for {token_link} to {new_percentage}."


async def format_set_interest_rate_model(
    context: FormatterContext, transaction: ExecuteTransaction, args: Sequence[Any]
) -> str:
    (model_address,) = args
    token_link = await token_name_with_link(context, transaction.target)
    return f"Set {address_link(context.chain, model_address, 'interest rate model')} for {token_link}."


async def format_deposit_for_burn(context: FormatterContext, transaction: ExecuteTransaction, args: Sequence[Any]) -> str:
    amount, destination_domain, mint_recipient, burn_token = args
    messenger_link = await contract_name_with_link(context, transaction.target)
    token = await context.token_metadata_service.get_token(burn_token)
    if token.decimals is None:
        raise ValueError(f"Token {burn_token} has no decimals()")
    if isinstance(mint_recipient, (bytes, bytearray)):
        mint_recipient = "0x" + bytes(mint_recipient).hex()

    return (
        f"Deposit for burn through {messenger_link}: burn {defactor(amount, token.decimals)} "
        f"{address_link(context.chain, burn_token, token.symbol)}, destination domain {destination_domain}, "
        f"mint recipient {mint_recipient}."
    )


ERC20_FORMATTERS: Dict[str, TransactionFormatter] = {
    "transfer(address,uint256)": format_transfer,
    "approve(address,uint256)": format_approve,
    "_setReserveFactor(uint256)": format_set_reserve_factor,
    "_setInterestRateModel(address)": format_set_interest_rate_model,
    "depositForBurn(uint256,uint32,bytes32,address)": format_deposit_for_burn,
}
