import pytest

from decoding.formatters import FORMATTERS_LOOKUP, get_formatter
from decoding.formatters.erc20_formatters import format_transfer
from decoding.formatters.ens_formatters import format_set_subnode_record, format_set_text
from decoding.formatters.governor_bravo_formatters import format_set_voting_delay
from decoding.formatters.timelock_formatters import format_set_delay


def test_lookup_by_contract_name():
    assert get_formatter("ERC20", "transfer(address,uint256)") is format_transfer
    assert get_formatter("Timelock", "setDelay(uint256)") is format_set_delay


def test_lookup_through_alias():
    assert get_formatter("CErc20Delegator", "transfer(address,uint256)") is format_transfer
    assert get_formatter("GovernorBravoDelegator", "_setVotingDelay(uint256)") is format_set_voting_delay
    assert get_formatter("PublicResolver", "setText(bytes32,string,string)") is format_set_text
    assert (
        get_formatter("ENSRegistryWithFallback", "setSubnodeRecord(bytes32,bytes32,address,address,uint64)")
        is format_set_subnode_record
    )


@pytest.mark.parametrize(
    "contract_name, signature",
    [
        ("ERC20", "mint(address,uint256)"),
        ("UnknownContract", "transfer(address,uint256)"),
        (None, "transfer(address,uint256)"),
        ("ERC20", None),
    ],
)
def test_lookup_miss(contract_name, signature):
    assert get_formatter(contract_name, signature) is None


def test_lookup_is_read_only():
    with pytest.raises(TypeError):
        FORMATTERS_LOOKUP["ERC20"]["mint(address,uint256)"] = format_transfer
    with pytest.raises(TypeError):
        FORMATTERS_LOOKUP["Custom"] = {}
