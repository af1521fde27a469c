"""
secp256k1 account keys.

An account address is the last 20 bytes of keccak256 over the 64-byte
uncompressed public key (x || y, without the 0x04 prefix).

Transaction signatures need the recovery parity of the nonce point R so
nodes can recover the sender. The signing library does not expose R, but
the signer knows the private key d, so the nonce is recoverable from the
signature itself: k = s^-1 * (z + r * d) mod n, and R = k * G.
"""

from __future__ import annotations

from dataclasses import dataclass

from Crypto.Hash import keccak
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed, decode_dss_signature
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from rollup_harness.types import Address, Bytes32

SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
"""Order n of the secp256k1 base point."""

HALF_ORDER = SECP256K1_ORDER // 2
"""Signatures with s above this are rejected by execution clients (EIP-2)."""


def keccak256(data: bytes) -> Bytes32:
    """Keccak-256 digest (the pre-standard SHA-3 variant Ethereum uses)."""
    k = keccak.new(digest_bits=256)
    k.update(data)
    return Bytes32(k.digest())


@dataclass(frozen=True, slots=True)
class Signature:
    """ECDSA signature in the form typed transactions carry it."""

    y_parity: int
    """Parity of the y coordinate of the nonce point R (0 or 1)."""

    r: int
    s: int


class PrivateKey:
    """A secp256k1 signing key and its derived account address."""

    __slots__ = ("_key", "address")

    def __init__(self, key: ec.EllipticCurvePrivateKey) -> None:
        if not isinstance(key.curve, ec.SECP256K1):
            raise ValueError(f"Expected a secp256k1 key, got {key.curve.name}")
        self._key = key
        self.address = self._derive_address(key)

    @classmethod
    def generate(cls) -> PrivateKey:
        """Create a fresh random key."""
        return cls(ec.generate_private_key(ec.SECP256K1()))

    @classmethod
    def from_bytes(cls, secret: bytes) -> PrivateKey:
        """Load a key from its 32-byte big-endian scalar."""
        if len(secret) != 32:
            raise ValueError(f"Private key must be 32 bytes, got {len(secret)}")
        return cls(ec.derive_private_key(int.from_bytes(secret, "big"), ec.SECP256K1()))

    @classmethod
    def from_hex(cls, secret: str) -> PrivateKey:
        """Load a key from a hex string, with or without `0x`."""
        return cls.from_bytes(bytes.fromhex(secret.removeprefix("0x")))

    def to_bytes(self) -> bytes:
        """The 32-byte big-endian scalar."""
        return self._key.private_numbers().private_value.to_bytes(32, "big")

    @staticmethod
    def _derive_address(key: ec.EllipticCurvePrivateKey) -> Address:
        uncompressed = key.public_key().public_bytes(Encoding.X962, PublicFormat.UncompressedPoint)
        return Address(keccak256(uncompressed[1:])[12:])

    def sign_digest(self, digest: bytes) -> Signature:
        """
        Sign a 32-byte digest.

        Uses RFC 6979 deterministic nonces and returns a low-s signature.
        """
        if len(digest) != 32:
            raise ValueError(f"Digest must be 32 bytes, got {len(digest)}")

        der_signature = self._key.sign(
            digest, ec.ECDSA(Prehashed(hashes.SHA256()), deterministic_signing=True)
        )
        r, s = decode_dss_signature(der_signature)

        # Recover the nonce point R to learn its y parity.
        d = self._key.private_numbers().private_value
        z = int.from_bytes(digest, "big")
        k = pow(s, -1, SECP256K1_ORDER) * (z + r * d) % SECP256K1_ORDER
        nonce_point = ec.derive_private_key(k, ec.SECP256K1()).public_key().public_numbers()
        y_parity = nonce_point.y & 1

        # Negating s corresponds to negating R, which flips its parity.
        if s > HALF_ORDER:
            s = SECP256K1_ORDER - s
            y_parity ^= 1

        return Signature(y_parity=y_parity, r=r, s=s)

    def __repr__(self) -> str:
        return f"PrivateKey(address={self.address})"
