from typing import Dict, Iterable, Optional

from eth_utils import function_signature_to_4byte_selector

# ERC-20 Standard Functions
ERC20_FUNCTION_SIGNATURES = (
    "totalSupply()",
    "balanceOf(address)",
    "transfer(address,uint256)",
    "allowance(address,address)",
    "approve(address,uint256)",
    "transferFrom(address,address,uint256)",
)

# Compound cToken / Comptroller admin functions
COMPOUND_FUNCTION_SIGNATURES = (
    "_setReserveFactor(uint256)",
    "_setInterestRateModel(address)",
    "_setCollateralFactor(address,uint256)",
    "_supportMarket(address)",
)

# Circle CCTP TokenMessenger
BRIDGE_FUNCTION_SIGNATURES = ("depositForBurn(uint256,uint32,bytes32,address)",)

# ENS registry and resolver records
ENS_FUNCTION_SIGNATURES = (
    "setText(bytes32,string,string)",
    "setSubnodeRecord(bytes32,bytes32,address,address,uint64)",
)

# Governance (Governor Bravo admin + Timelock) Functions
GOVERNANCE_FUNCTION_SIGNATURES = (
    "propose(address[],uint256[],string[],bytes[],string)",
    "castVote(uint256,uint8)",
    "state(uint256)",
    "quorumVotes()",
    "_setVotingDelay(uint256)",
    "_setVotingPeriod(uint256)",
    "_setProposalThreshold(uint256)",
    "_setPendingAdmin(address)",
    "_acceptAdmin()",
    "setDelay(uint256)",
    "setPendingAdmin(address)",
    "updateDelay(uint256)",
)

# Proxy upgrades
PROXY_FUNCTION_SIGNATURES = (
    "upgradeTo(address)",
    "upgradeToAndCall(address,bytes)",
)


def _to_selector_map(signatures: Iterable[str]) -> Dict[str, str]:
    return {"0x" + function_signature_to_4byte_selector(sig).hex(): sig for sig in signatures}


# Combined dictionary for easy lookup: selector -> function signature
ALL_FUNCTION_SELECTORS = _to_selector_map(
    ERC20_FUNCTION_SIGNATURES
    + COMPOUND_FUNCTION_SIGNATURES
    + BRIDGE_FUNCTION_SIGNATURES
    + ENS_FUNCTION_SIGNATURES
    + GOVERNANCE_FUNCTION_SIGNATURES
    + PROXY_FUNCTION_SIGNATURES
)


def get_function_signature(selector: str) -> Optional[str]:
    """
    Get function signature from selector

    Args:
        selector: Function selector (e.g., "0xa9059cbb")

    Returns:
        Function signature or None if the selector is not known
    """
    return ALL_FUNCTION_SELECTORS.get(selector.lower())
