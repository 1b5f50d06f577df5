from eth_abi import encode
from eth_utils import keccak, to_bytes

from constants.constants import BRAVO_PROPOSAL_ETA_OFFSET
from simulation.storage_slots import (
    bravo_proposal_field_slot,
    compound_timelock_tx_hash,
    governor_timelock_salt,
    mapping_slot,
    to_word,
)
from tests.unit.factories import GOVERNOR_ADDRESS, TOKEN_ADDRESS


def test_to_word_pads_to_32_bytes():
    assert to_word(1) == "0x" + "0" * 63 + "1"
    assert len(to_word(2**255)) == 66


def test_bravo_field_slot_offsets_from_struct_base():
    base = int.from_bytes(keccak(encode(["uint256", "uint256"], [42, 10])), "big")

    assert mapping_slot(42, 10) == base
    assert bravo_proposal_field_slot(42, BRAVO_PROPOSAL_ETA_OFFSET) == to_word(base + 2)


def test_timelock_tx_hash_depends_on_eta():
    first = compound_timelock_tx_hash(TOKEN_ADDRESS, 0, "transfer(address,uint256)", "0x1234", 100)
    second = compound_timelock_tx_hash(TOKEN_ADDRESS, 0, "transfer(address,uint256)", "0x1234", 101)

    assert len(first) == 32
    assert first != second


def test_governor_salt_xors_address_into_description_hash():
    description_hash = keccak(text="# Proposal")

    salt = governor_timelock_salt(GOVERNOR_ADDRESS, description_hash)

    address_bytes = to_bytes(hexstr=GOVERNOR_ADDRESS)
    assert bytes(a ^ b for a, b in zip(salt[:20], description_hash[:20])) == address_bytes
    assert salt[20:] == description_hash[20:]
