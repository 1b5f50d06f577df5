import asyncio
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from eth_abi import decode
from eth_abi.exceptions import DecodingError, ParseError
from eth_utils import abi_to_signature, encode_hex, function_abi_to_4byte_selector, get_abi_input_types, to_bytes

from constants.contract_function_selectors import get_function_signature
from decoding.abi_resolver import BaseAbiResolver
from decoding.formatters import get_formatter
from decoding.formatters.formatter_helpers import ExecuteTransaction, FormatterContext
from decoding.models.contract_abi import ContractAbi
from decoding.models.decoded_action import DecodedAction, DecodedArgument
from governance.models.proposal import Proposal
from utils.async_utils import gather_settled
from utils.exceptions import AbiNotFound, FormatterFailure
from utils.formatter_utils import format_arg
from utils.logger_utils import get_logger
from utils.web3_utils import decode_arguments, parse_signature_types

logger = get_logger("Transaction Decoder")

SELECTOR_HEX_LENGTH = 10


class _DecodedCall(object):
    def __init__(self, signature: str, types: Sequence[str], names: Sequence[Optional[str]], values: Sequence[Any]):
        self.signature = signature
        self.types = list(types)
        self.names = list(names)
        self.values = list(values)

    def to_arguments(self) -> Tuple[DecodedArgument, ...]:
        return tuple(
            DecodedArgument(name=name or None, abi_type=abi_type, value=format_arg(value))
            for name, abi_type, value in zip(self.names, self.types, self.values)
        )


def _function_abis_by_selector(abi: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    return {
        encode_hex(function_abi_to_4byte_selector(item)): item for item in abi if item.get("type") == "function"
    }


def _function_abis_by_signature(abi: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    return {abi_to_signature(item): item for item in abi if item.get("type") == "function"}


def _arg_names(fn_abi: Optional[Mapping[str, Any]], count: int) -> List[Optional[str]]:
    if fn_abi is None:
        return [None] * count
    return [item.get("name") for item in fn_abi.get("inputs", [])]


class TransactionDecoder(object):
    """
    Turns each proposal action into a DecodedAction.

    Actions are decoded concurrently and independently. Missing ABIs, undecodable
    calldata and formatter faults degrade to a generic description; decode_proposal
    never raises for a single action.
    """

    def __init__(self, abi_resolver: BaseAbiResolver, formatter_context: FormatterContext):
        self._abi_resolver = abi_resolver
        self._formatter_context = formatter_context

    @property
    def chain(self):
        return self._formatter_context.chain

    async def decode_proposal(self, proposal: Proposal) -> List[DecodedAction]:
        outcomes = await gather_settled(*(self.decode_action(proposal, index) for index in range(proposal.action_count)))
        actions = []
        for index, outcome in enumerate(outcomes):
            if outcome.ok:
                actions.append(outcome.value)
                continue
            logger.warning(f"Action {index} of proposal {proposal.id} could not be decoded: {outcome.error!r}")
            transaction = self._transaction_at(proposal, index)
            actions.append(
                DecodedAction(
                    index=index,
                    target=transaction.target,
                    value=transaction.value,
                    calldata=transaction.calldata,
                    function_signature=transaction.signature,
                    prose=self._fallback_prose(transaction, None, None),
                    used_fallback=True,
                )
            )
        return actions

    @staticmethod
    def _transaction_at(proposal: Proposal, index: int) -> ExecuteTransaction:
        return ExecuteTransaction(
            target=proposal.targets[index],
            value=proposal.values[index],
            calldata=proposal.calldatas[index],
            signature=proposal.signature_at(index),
        )

    async def decode_action(self, proposal: Proposal, index: int) -> DecodedAction:
        transaction = self._transaction_at(proposal, index)

        contract_abi = await self._resolve_abi(transaction.target)
        contract_name = contract_abi.contract_name if contract_abi is not None else None
        decoded = self._decode_calldata(contract_abi, transaction)

        formatter = get_formatter(contract_name, decoded.signature if decoded else None)
        if formatter is not None:
            try:
                prose = await formatter(self._formatter_context, transaction, decoded.values)
                if prose and prose.strip():
                    return DecodedAction(
                        index=index,
                        target=transaction.target,
                        value=transaction.value,
                        calldata=transaction.calldata,
                        contract_name=contract_name,
                        function_signature=decoded.signature,
                        args=decoded.to_arguments(),
                        prose=prose.strip(),
                    )
                logger.warning(f"Formatter {contract_name}.{decoded.signature} returned no text for action {index}")
            except asyncio.CancelledError:
                raise
            except Exception as e:
                failure = FormatterFailure(contract_name, decoded.signature, e)
                logger.warning(f"Action {index} of proposal {proposal.id}: {failure}")

        return DecodedAction(
            index=index,
            target=transaction.target,
            value=transaction.value,
            calldata=transaction.calldata,
            contract_name=contract_name,
            function_signature=decoded.signature if decoded else None,
            args=decoded.to_arguments() if decoded else (),
            prose=self._fallback_prose(transaction, contract_name, decoded),
            used_fallback=True,
        )

    async def _resolve_abi(self, target: str) -> Optional[ContractAbi]:
        try:
            return await self._abi_resolver.resolve(self.chain, target)
        except AbiNotFound as e:
            logger.warning(str(e))
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.warning(f"ABI resolution for {target} failed", exc_info=True)
        return None

    def _decode_calldata(self, contract_abi: Optional[ContractAbi], transaction: ExecuteTransaction) -> Optional[_DecodedCall]:
        abi = contract_abi.abi if contract_abi is not None else []
        try:
            if transaction.signature:
                # Bravo-style action: calldata holds only the encoded arguments
                fn_abi = _function_abis_by_signature(abi).get(transaction.signature)
                types = parse_signature_types(transaction.signature)
                values = decode_arguments(transaction.signature, transaction.calldata)
                return _DecodedCall(transaction.signature, types, _arg_names(fn_abi, len(types)), values)

            if len(transaction.calldata) < SELECTOR_HEX_LENGTH:
                return None
            selector = transaction.calldata[:SELECTOR_HEX_LENGTH].lower()
            arguments = to_bytes(hexstr="0x" + transaction.calldata[SELECTOR_HEX_LENGTH:])

            fn_abi = _function_abis_by_selector(abi).get(selector)
            if fn_abi is not None:
                types = get_abi_input_types(fn_abi)
                return _DecodedCall(abi_to_signature(fn_abi), types, _arg_names(fn_abi, len(types)), decode(types, arguments))

            signature = get_function_signature(selector)
            if signature is not None:
                types = parse_signature_types(signature)
                return _DecodedCall(signature, types, [None] * len(types), decode_arguments(signature, arguments))
        except (DecodingError, ParseError, ValueError, TypeError) as e:
            logger.warning(f"Could not decode calldata for {transaction.target}: {e}")
        return None

    @staticmethod
    def _fallback_prose(
        transaction: ExecuteTransaction, contract_name: Optional[str], decoded: Optional[_DecodedCall]
    ) -> str:
        target = f"{contract_name} ({transaction.target})" if contract_name else transaction.target
        lines = [f"Call {target} with {transaction.value} wei and calldata {transaction.calldata or '0x'}"]
        if decoded is not None:
            args = ", ".join(format_arg(value) for value in decoded.values)
            lines.append(f"Decoded as {decoded.signature}({args})")
        elif transaction.signature:
            lines.append(f"Signature: {transaction.signature}")
        return "\n".join(lines)
