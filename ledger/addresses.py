"""
Ledger - Address Validation.

============================================================
RESPONSIBILITY
============================================================
Decides whether a ledger address is a canonical destination
address. Entries that fail are "placeholder" accounts.

Address format (c32check):
    "S" + version char + c32(hash160 || checksum)
    checksum = sha256(sha256(version_byte || hash160))[:4]

Each leading zero byte of the payload is written as one
leading "0" character; the rest is the payload's integer
value in Crockford base32.

============================================================
"""

import hashlib
from dataclasses import dataclass
from typing import Optional, Sequence


C32_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"

HASH160_LENGTH = 20
CHECKSUM_LENGTH = 4

_NORMALIZE = str.maketrans({"O": "0", "L": "1", "I": "1"})


class InvalidAddressError(ValueError):
    """Address is not well-formed c32check."""


@dataclass(frozen=True)
class DecodedAddress:
    version: int
    hash160: bytes

    @property
    def version_char(self) -> str:
        return C32_ALPHABET[self.version]


def _checksum(version: int, payload: bytes) -> bytes:
    digest = hashlib.sha256(hashlib.sha256(bytes([version]) + payload).digest()).digest()
    return digest[:CHECKSUM_LENGTH]


def c32_encode(data: bytes) -> str:
    leading_zeros = len(data) - len(data.lstrip(b"\x00"))
    value = int.from_bytes(data, "big")
    digits = []
    while value > 0:
        value, rem = divmod(value, 32)
        digits.append(C32_ALPHABET[rem])
    return "0" * leading_zeros + "".join(reversed(digits))


def c32_decode(text: str) -> bytes:
    text = text.upper().translate(_NORMALIZE)
    leading_zeros = len(text) - len(text.lstrip("0"))
    value = 0
    for ch in text[leading_zeros:]:
        index = C32_ALPHABET.find(ch)
        if index < 0:
            raise InvalidAddressError(f"invalid c32 character {ch!r}")
        value = value * 32 + index
    body = value.to_bytes((value.bit_length() + 7) // 8, "big") if value else b""
    return b"\x00" * leading_zeros + body


def encode_address(version: int, hash160: bytes) -> str:
    """Build the canonical address for a version and 20-byte hash."""
    if not 0 <= version < 32:
        raise InvalidAddressError(f"version out of range: {version}")
    if len(hash160) != HASH160_LENGTH:
        raise InvalidAddressError(f"hash160 must be {HASH160_LENGTH} bytes")
    return "S" + C32_ALPHABET[version] + c32_encode(hash160 + _checksum(version, hash160))


def decode_address(address: str) -> DecodedAddress:
    """
    Decode and verify a c32check address.

    Raises:
        InvalidAddressError on any structural or checksum failure
    """
    if not isinstance(address, str) or len(address) < 3:
        raise InvalidAddressError("address too short")

    normalized = address.strip().upper().translate(_NORMALIZE)
    if normalized[0] != "S":
        raise InvalidAddressError("address must start with 'S'")

    version = C32_ALPHABET.find(normalized[1])
    if version < 0:
        raise InvalidAddressError(f"invalid version character {normalized[1]!r}")

    data = c32_decode(normalized[2:])
    if len(data) != HASH160_LENGTH + CHECKSUM_LENGTH:
        raise InvalidAddressError(f"payload is {len(data)} bytes, expected 24")

    hash160, checksum = data[:HASH160_LENGTH], data[HASH160_LENGTH:]
    if _checksum(version, hash160) != checksum:
        raise InvalidAddressError("checksum mismatch")

    return DecodedAddress(version=version, hash160=hash160)


def is_valid_address(
    address: str,
    allowed_versions: Optional[Sequence[str]] = None,
) -> bool:
    """
    True when `address` is canonical c32check with an allowed version.

    Non-canonical spellings (lower case, O for 0, extra padding) are
    rejected even when they decode.
    """
    try:
        decoded = decode_address(address)
    except InvalidAddressError:
        return False

    if allowed_versions is not None and decoded.version_char not in allowed_versions:
        return False

    return encode_address(decoded.version, decoded.hash160) == address

