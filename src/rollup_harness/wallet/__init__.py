"""Account keys, transaction signing and the funded-account vault."""

from .keys import PrivateKey, Signature, keccak256
from .transaction import (
    ETHER,
    GWEI,
    TRANSFER_GAS,
    DynamicFeeTx,
    SignedTransaction,
)
from .vault import Vault, VaultError

__all__ = [
    "ETHER",
    "GWEI",
    "TRANSFER_GAS",
    "DynamicFeeTx",
    "PrivateKey",
    "Signature",
    "SignedTransaction",
    "Vault",
    "VaultError",
    "keccak256",
]
