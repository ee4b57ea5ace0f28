"""
Kaspa address encoding.

Kaspa addresses are ``<prefix>:<payload><checksum>`` strings using the
CashAddr flavour of bech32: payload bytes are ``[version] + key_or_hash``
regrouped into 5-bit words, followed by an 8-word checksum computed with a
40-bit BCH polymod over the prefix, a zero separator and the payload.

Versions:
    0  Schnorr public key (32 bytes)   script: 20 <32 bytes> ac
    1  ECDSA public key (33 bytes)     script: 21 <33 bytes> ab
    8  Script hash (32 bytes)          script: aa 20 <32 bytes> 87
"""

from dataclasses import dataclass
from typing import Optional

from config import KASPA_ADDRESS_PREFIXES, KASPA_NETWORKS
from utils.logger import get_logger

logger = get_logger("kaspa_address")

# ==================== CONSTANTS ====================

CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_CHARSET_INDEX = {char: index for index, char in enumerate(CHARSET)}

_GENERATORS = (
    0x98F2BC8E61,
    0x79B76D99E2,
    0xF33E5FB3C4,
    0xAE2EABE2A8,
    0x1E4F43E470,
)

_CHECKSUM_WORDS = 8

VERSION_PUBKEY = 0
VERSION_PUBKEY_ECDSA = 1
VERSION_SCRIPT_HASH = 8

_PAYLOAD_LENGTHS = {
    VERSION_PUBKEY: 32,
    VERSION_PUBKEY_ECDSA: 33,
    VERSION_SCRIPT_HASH: 32,
}

NETWORK_PREFIXES = KASPA_ADDRESS_PREFIXES
_PREFIX_NETWORKS = {prefix: network for network, prefix in NETWORK_PREFIXES.items()}


# ==================== ADDRESS FORMAT ====================


@dataclass(frozen=True)
class AddressFormat:
    """Chain prefix plus network variant used to render decoded scripts."""

    prefix: str
    network: str

    @classmethod
    def for_network(cls, network: str) -> "AddressFormat":
        normalized = (network or "").strip().lower()
        if normalized not in KASPA_NETWORKS:
            raise ValueError(f"Unsupported Kaspa network: {network!r}")
        return cls(prefix=NETWORK_PREFIXES[normalized], network=normalized)

    @classmethod
    def for_address(cls, address: str) -> "AddressFormat":
        prefix, sep, _ = (address or "").strip().lower().partition(":")
        if not sep or prefix not in _PREFIX_NETWORKS:
            raise ValueError(f"Unrecognized Kaspa address prefix: {address!r}")
        return cls(prefix=prefix, network=_PREFIX_NETWORKS[prefix])


# ==================== BECH32 HELPERS ====================


def _polymod(values: list[int]) -> int:
    checksum = 1
    for value in values:
        top = checksum >> 35
        checksum = ((checksum & 0x07FFFFFFFF) << 5) ^ value
        for bit, generator in enumerate(_GENERATORS):
            if (top >> bit) & 1:
                checksum ^= generator
    return checksum ^ 1


def _prefix_words(prefix: str) -> list[int]:
    return [ord(char) & 0x1F for char in prefix]


def _checksum(prefix: str, words: list[int]) -> list[int]:
    value = _polymod(_prefix_words(prefix) + [0] + words + [0] * _CHECKSUM_WORDS)
    return [(value >> (5 * (_CHECKSUM_WORDS - 1 - i))) & 0x1F for i in range(_CHECKSUM_WORDS)]


def _convert_bits(data: bytes | list[int], from_bits: int, to_bits: int, pad: bool) -> Optional[list[int]]:
    acc = 0
    bits = 0
    out: list[int] = []
    max_value = (1 << to_bits) - 1
    for value in data:
        if value < 0 or value >> from_bits:
            return None
        acc = (acc << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            out.append((acc >> bits) & max_value)
    if pad:
        if bits:
            out.append((acc << (to_bits - bits)) & max_value)
    elif bits >= from_bits or ((acc << (to_bits - bits)) & max_value):
        return None
    return out


# ==================== PUBLIC API ====================


def encode_address(address_format: AddressFormat, version: int, payload: bytes) -> str:
    """Render ``payload`` as a Kaspa address for the given format."""
    expected = _PAYLOAD_LENGTHS.get(version)
    if expected is None:
        raise ValueError(f"Unsupported address version: {version}")
    if len(payload) != expected:
        raise ValueError(f"Version {version} payload must be {expected} bytes, got {len(payload)}")

    words = _convert_bits(bytes([version]) + bytes(payload), 8, 5, pad=True)
    words = words + _checksum(address_format.prefix, words)
    return f"{address_format.prefix}:" + "".join(CHARSET[w] for w in words)


def decode_address(address: str) -> tuple[AddressFormat, int, bytes]:
    """Split a Kaspa address into (format, version, payload).

    Raises ValueError on a bad prefix, character, checksum or length.
    """
    text = (address or "").strip()
    if text != text.lower() and text != text.upper():
        raise ValueError("Mixed-case Kaspa address")
    text = text.lower()

    address_format = AddressFormat.for_address(text)
    _, _, body = text.partition(":")
    if len(body) <= _CHECKSUM_WORDS:
        raise ValueError("Kaspa address too short")

    try:
        words = [_CHARSET_INDEX[char] for char in body]
    except KeyError as exc:
        raise ValueError(f"Invalid character in Kaspa address: {exc.args[0]!r}") from None

    if _polymod(_prefix_words(address_format.prefix) + [0] + words) != 0:
        raise ValueError("Kaspa address checksum mismatch")

    data = _convert_bits(words[:-_CHECKSUM_WORDS], 5, 8, pad=False)
    if not data:
        raise ValueError("Invalid Kaspa address payload")

    version, payload = data[0], bytes(data[1:])
    expected = _PAYLOAD_LENGTHS.get(version)
    if expected is None or len(payload) != expected:
        raise ValueError(f"Invalid Kaspa address payload for version {version}")
    return address_format, version, payload


def is_valid_address(address: str, network: Optional[str] = None) -> bool:
    try:
        address_format, _, _ = decode_address(address)
    except ValueError:
        return False
    return network is None or address_format.network == network


def _script_to_version_payload(script: bytes) -> Optional[tuple[int, bytes]]:
    if len(script) == 34 and script[0] == 0x20 and script[-1] == 0xAC:
        return VERSION_PUBKEY, script[1:33]
    if len(script) == 35 and script[0] == 0x21 and script[-1] == 0xAB:
        return VERSION_PUBKEY_ECDSA, script[1:34]
    if len(script) == 35 and script[0] == 0xAA and script[1] == 0x20 and script[-1] == 0x87:
        return VERSION_SCRIPT_HASH, script[2:34]
    return None


def script_public_key_to_address(script_hex: str, address_format: AddressFormat) -> Optional[str]:
    """Decode a locking script into an address, or None for non-standard scripts.

    Accepts the bare script as served by the REST API, or the same script
    prefixed with its 2-byte script version (``0000...``).
    """
    text = (script_hex or "").strip().lower()
    if text.startswith("0x"):
        text = text[2:]
    try:
        script = bytes.fromhex(text)
    except ValueError:
        logger.debug("Undecodable script public key", script=script_hex)
        return None

    decoded = _script_to_version_payload(script)
    if decoded is None and len(script) > 2 and script[:2] == b"\x00\x00":
        decoded = _script_to_version_payload(script[2:])
    if decoded is None:
        logger.debug("Non-standard script public key", script=script_hex)
        return None

    version, payload = decoded
    return encode_address(address_format, version, payload)
