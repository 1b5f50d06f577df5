from typing import Any, Dict, Sequence

from decoding.formatters.formatter_helpers import (
    ExecuteTransaction,
    FormatterContext,
    TransactionFormatter,
    contract_name_with_link,
)
from utils.formatter_utils import format_arg

COMMUNITY_LICENSES_NAME = "compound-community-licenses.eth"
ADDITIONAL_GRANTS_LABEL = "v3-additional-grants"

# namehash -> readable ENS name
KNOWN_ENS_NODES: Dict[str, str] = {
    "0x7dcf87198fd673716e5a32b206d9379c4fcbad8875073f52bfd0656759bf89ed": (
        f"{ADDITIONAL_GRANTS_LABEL}.{COMMUNITY_LICENSES_NAME}"
    ),
}


async def format_set_text(context: FormatterContext, transaction: ExecuteTransaction, args: Sequence[Any]) -> str:
    node, key, value = args
    name = KNOWN_ENS_NODES.get(format_arg(node).lower(), "Unknown ENS Name")
    return f"Set ENS text for {name} with key: {key} and value:\n\n{value}"


async def format_set_subnode_record(
    context: FormatterContext, transaction: ExecuteTransaction, args: Sequence[Any]
) -> str:
    _node, _label, owner, resolver, ttl = args
    owner_link = await contract_name_with_link(context, owner)
    resolver_link = await contract_name_with_link(context, resolver)
    return (
        f"Create new {ADDITIONAL_GRANTS_LABEL} ENS subdomain for {COMMUNITY_LICENSES_NAME} "
        f"with {owner_link} as owner and {resolver_link} as resolver and ttl = {ttl}."
    )


ENS_FORMATTERS: Dict[str, TransactionFormatter] = {
    "setText(bytes32,string,string)": format_set_text,
    "setSubnodeRecord(bytes32,bytes32,address,address,uint64)": format_set_subnode_record,
}
