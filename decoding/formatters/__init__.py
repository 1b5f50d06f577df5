from types import MappingProxyType
from typing import Mapping, Optional

from decoding.formatters.erc20_formatters import ERC20_FORMATTERS
from decoding.formatters.ens_formatters import ENS_FORMATTERS
from decoding.formatters.formatter_helpers import TransactionFormatter
from decoding.formatters.governor_bravo_formatters import GOVERNOR_BRAVO_FORMATTERS
from decoding.formatters.timelock_formatters import TIMELOCK_FORMATTERS

# contract name -> function signature -> formatter
FORMATTERS_LOOKUP: Mapping[str, Mapping[str, TransactionFormatter]] = MappingProxyType(
    {
        "ERC20": MappingProxyType(ERC20_FORMATTERS),
        "ENS": MappingProxyType(ENS_FORMATTERS),
        "GovernorBravo": MappingProxyType(GOVERNOR_BRAVO_FORMATTERS),
        "Timelock": MappingProxyType(TIMELOCK_FORMATTERS),
    }
)

# Verified contract names that share a formatter table
CONTRACT_NAME_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "CErc20Delegator": "ERC20",
        "CErc20Delegate": "ERC20",
        "CErc20Immutable": "ERC20",
        "CEther": "ERC20",
        "Comp": "ERC20",
        "FiatTokenProxy": "ERC20",
        "FiatTokenV2_1": "ERC20",
        "FiatTokenV2_2": "ERC20",
        "TokenMessenger": "ERC20",
        "ENSRegistryWithFallback": "ENS",
        "PublicResolver": "ENS",
        "GovernorBravoDelegator": "GovernorBravo",
        "GovernorBravoDelegate": "GovernorBravo",
    }
)


def get_formatter(contract_name: Optional[str], function_signature: Optional[str]) -> Optional[TransactionFormatter]:
    if not contract_name or not function_signature:
        return None
    table = FORMATTERS_LOOKUP.get(contract_name) or FORMATTERS_LOOKUP.get(CONTRACT_NAME_ALIASES.get(contract_name, ""))
    if table is None:
        return None
    return table.get(function_signature)
