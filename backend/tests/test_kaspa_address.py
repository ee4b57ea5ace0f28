import sys
from pathlib import Path

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from services.kaspa.address import (  # noqa: E402
    AddressFormat,
    decode_address,
    encode_address,
    is_valid_address,
    script_public_key_to_address,
)

MAINNET = AddressFormat.for_network("mainnet")
TESTNET = AddressFormat.for_network("testnet")


def test_encode_zero_pubkey_matches_reference_vectors():
    assert (
        encode_address(MAINNET, 0, bytes(32))
        == "kaspa:qqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqkx9awp4e"
    )
    assert (
        encode_address(TESTNET, 0, bytes(32))
        == "kaspatest:qqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqhqrxplya"
    )


def test_encode_known_pubkey():
    payload = bytes.fromhex("5fff3c4da18f45adcdd499e44611e9fff148ba69db3c4ea2ddd955fc46a59522")
    assert (
        encode_address(MAINNET, 0, payload)
        == "kaspa:qp0l70zd5x85ttwd6jv7g3s3a8llzj96d8dncn4zmhv4tlzx5k2jyqh70xmfj"
    )


def test_decode_address_returns_format_version_and_payload():
    address_format, version, payload = decode_address(
        "kaspa:pz424242424242424242424242424242424242424242424242425dkp4j7pk"
    )
    assert address_format == MAINNET
    assert version == 8
    assert payload == b"\xaa" * 32


def test_decode_rejects_bad_checksum():
    good = "kaspa:qqg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zng5quzmq"
    bad = good[:-1] + ("p" if good[-1] != "p" else "q")
    assert is_valid_address(good)
    assert not is_valid_address(bad)
    with pytest.raises(ValueError):
        decode_address(bad)


def test_is_valid_address_checks_network():
    address = "kaspatest:qrxvenxvenxvenxvenxvenxvenxvenxvenxvenxvenxvenxvenxvc3rysjr0d"
    assert is_valid_address(address, network="testnet")
    assert not is_valid_address(address, network="mainnet")
    assert not is_valid_address("bitcoin:qqqq")
    assert not is_valid_address("")


def test_address_format_for_address_and_network_agree():
    assert AddressFormat.for_address("kaspatest:qxyz") == TESTNET
    assert AddressFormat.for_network("MAINNET") == MAINNET
    with pytest.raises(ValueError):
        AddressFormat.for_address("no-prefix")
    with pytest.raises(ValueError):
        AddressFormat.for_network("regtest")


def test_script_decoding_schnorr_with_and_without_version_prefix():
    script = "20" + "11" * 32 + "ac"
    expected = "kaspa:qqg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zng5quzmq"
    assert script_public_key_to_address(script, MAINNET) == expected
    assert script_public_key_to_address("0000" + script, MAINNET) == expected


def test_script_decoding_uses_the_given_format():
    script = "20" + "cc" * 32 + "ac"
    assert (
        script_public_key_to_address(script, TESTNET)
        == "kaspatest:qrxvenxvenxvenxvenxvenxvenxvenxvenxvenxvenxvenxvenxvc3rysjr0d"
    )


def test_script_decoding_ecdsa_and_script_hash():
    ecdsa = "21" + "02" + "11" * 32 + "ab"
    p2sh = "aa20" + "aa" * 32 + "87"
    assert (
        script_public_key_to_address(ecdsa, MAINNET)
        == "kaspa:qyppzyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zyg3zygem5xjym5"
    )
    assert (
        script_public_key_to_address(p2sh, MAINNET)
        == "kaspa:pz424242424242424242424242424242424242424242424242425dkp4j7pk"
    )


@pytest.mark.parametrize("script", ["", "zz", "6a0401020304", "20" + "11" * 31 + "ac"])
def test_script_decoding_returns_none_for_non_standard_scripts(script):
    assert script_public_key_to_address(script, MAINNET) is None
