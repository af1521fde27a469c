"""
EIP-1559 (type 2) transactions.

Wire format::

    0x02 || rlp([chain_id, nonce, max_priority_fee_per_gas, max_fee_per_gas,
                 gas, to, value, data, access_list, y_parity, r, s])

The signing hash is keccak256 over the same envelope without the last
three fields. The transaction hash is keccak256 over the signed envelope.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

from rollup_harness.types import Address, Bytes32, encode_rlp
from rollup_harness.types.rlp import RLPItem

from .keys import PrivateKey, Signature, keccak256

DYNAMIC_FEE_TX_TYPE: Final = 0x02
"""EIP-2718 type byte of EIP-1559 transactions."""

GWEI: Final = 10**9
ETHER: Final = 10**18

TRANSFER_GAS: Final = 21_000
"""Intrinsic gas of a plain value transfer."""


@dataclass(frozen=True, slots=True)
class DynamicFeeTx:
    """An unsigned EIP-1559 transaction."""

    chain_id: int
    nonce: int
    gas: int
    max_priority_fee_per_gas: int
    max_fee_per_gas: int
    to: Address | None
    """Recipient; None creates a contract."""
    value: int = 0
    data: bytes = b""
    access_list: list[tuple[Address, list[Bytes32]]] = field(default_factory=list)

    def _fields(self) -> list[RLPItem]:
        access_list: list[RLPItem] = [
            [bytes(address), [bytes(key) for key in keys]] for address, keys in self.access_list
        ]
        return [
            self.chain_id,
            self.nonce,
            self.max_priority_fee_per_gas,
            self.max_fee_per_gas,
            self.gas,
            b"" if self.to is None else bytes(self.to),
            self.value,
            self.data,
            access_list,
        ]

    def signing_hash(self) -> Bytes32:
        """Digest the sender signs."""
        return keccak256(bytes([DYNAMIC_FEE_TX_TYPE]) + encode_rlp(self._fields()))

    def encode_signed(self, signature: Signature) -> bytes:
        """Typed envelope carrying `signature`."""
        fields = self._fields() + [signature.y_parity, signature.r, signature.s]
        return bytes([DYNAMIC_FEE_TX_TYPE]) + encode_rlp(fields)

    def sign(self, key: PrivateKey) -> SignedTransaction:
        """Sign with `key`."""
        signature = key.sign_digest(self.signing_hash())
        raw = self.encode_signed(signature)
        return SignedTransaction(tx=self, sender=key.address, signature=signature, raw=raw)


@dataclass(frozen=True, slots=True)
class SignedTransaction:
    """A signed transaction ready for `eth_sendRawTransaction`."""

    tx: DynamicFeeTx
    sender: Address
    signature: Signature
    raw: bytes
    """Encoded typed envelope."""

    @property
    def hash(self) -> Bytes32:
        """Transaction hash nodes index it under."""
        return keccak256(self.raw)
