import pytest
from eth_abi import encode

from utils.web3_utils import decode_arguments, encode_function_call, function_selector, parse_signature_types


def test_function_selector():
    assert function_selector("transfer(address,uint256)") == "0xa9059cbb"


@pytest.mark.parametrize(
    "signature, expected",
    [
        ("execute(uint256)", ["uint256"]),
        ("queue()", []),
        ("setRoute((address,uint24)[],bool)", ["(address,uint24)[]", "bool"]),
        ("f(uint256,(bytes,(address,bool)),string)", ["uint256", "(bytes,(address,bool))", "string"]),
    ],
)
def test_parse_signature_types(signature, expected):
    assert parse_signature_types(signature) == expected


def test_parse_signature_types_rejects_malformed_signature():
    with pytest.raises(ValueError):
        parse_signature_types("transfer")


def test_encode_function_call():
    calldata = encode_function_call("execute(uint256)", [42])

    assert calldata == "0xfe0d94c1" + encode(["uint256"], [42]).hex()


def test_decode_arguments():
    data = "0x" + encode(["uint256", "bool"], [7, True]).hex()

    assert decode_arguments("f(uint256,bool)", data) == (7, True)
