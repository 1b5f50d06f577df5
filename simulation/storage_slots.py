from eth_abi import encode
from eth_utils import keccak, to_bytes

from constants.constants import BRAVO_PROPOSALS_SLOT, COMPOUND_TIMELOCK_QUEUED_TRANSACTIONS_SLOT


def to_word(value: int) -> str:
    """Formats an integer as a 0x-prefixed 32-byte storage word."""
    return "0x" + format(value, "064x")


def mapping_slot(key, slot: int, key_type: str = "uint256") -> int:
    """Storage slot of mapping[key] for a mapping declared at `slot`: keccak256(key . slot)."""
    return int.from_bytes(keccak(encode([key_type, "uint256"], [key, slot])), "big")


def bravo_proposal_field_slot(proposal_id: int, offset: int) -> str:
    """Slot of a word inside GovernorBravo's proposals[proposal_id] struct."""
    return to_word(mapping_slot(proposal_id, BRAVO_PROPOSALS_SLOT) + offset)


def compound_timelock_tx_hash(target: str, value: int, signature: str, data: str, eta: int) -> bytes:
    """keccak256(abi.encode(target, value, signature, data, eta)) as computed by Timelock.queueTransaction."""
    return keccak(
        encode(
            ["address", "uint256", "string", "bytes", "uint256"],
            [target, value, signature, to_bytes(hexstr=data), eta],
        )
    )


def queued_transaction_slot(tx_hash: bytes) -> str:
    return to_word(mapping_slot(tx_hash, COMPOUND_TIMELOCK_QUEUED_TRANSACTIONS_SLOT, key_type="bytes32"))


def governor_timelock_salt(governor_address: str, description_hash: bytes) -> bytes:
    """GovernorTimelockControl salt: bytes20(address(governor)) ^ descriptionHash."""
    padded_address = to_bytes(hexstr=governor_address).ljust(32, b"\x00")
    return (int.from_bytes(padded_address, "big") ^ int.from_bytes(description_hash, "big")).to_bytes(32, "big")
