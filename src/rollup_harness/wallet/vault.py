"""
Key vault for funded test accounts.

The vault holds every private key a run signs with. New accounts are
funded from a faucet key that the devnet genesis pre-allocates.
"""

from __future__ import annotations

import logging

from rollup_harness.rpc import ExecutionApi, wait_receipt_ok
from rollup_harness.types import Address

from .keys import PrivateKey
from .transaction import GWEI, TRANSFER_GAS, DynamicFeeTx, SignedTransaction

logger = logging.getLogger(__name__)

FUNDING_TIP_CAP = 10 * GWEI
FUNDING_FEE_CAP = 20 * GWEI

FUNDING_TIMEOUT = 60.0
"""Seconds to wait for a funding transfer to be mined."""


class VaultError(KeyError):
    """The vault holds no key for the requested address."""


class Vault:
    """Holds signing keys, indexed by account address."""

    def __init__(self, chain_id: int, faucet: PrivateKey | None = None) -> None:
        self.chain_id = chain_id
        self.faucet = faucet
        self._keys: dict[Address, PrivateKey] = {}
        if faucet is not None:
            self.insert_key(faucet)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, address: object) -> bool:
        return address in self._keys

    def generate_key(self) -> Address:
        """Create and store a fresh key; returns its address."""
        return self.insert_key(PrivateKey.generate())

    def insert_key(self, key: PrivateKey) -> Address:
        """Store `key`; returns its address."""
        self._keys[key.address] = key
        return key.address

    def find_key(self, address: Address) -> PrivateKey:
        """
        Look up the key for `address`.

        Raises:
            VaultError: If the vault does not hold it.
        """
        try:
            return self._keys[address]
        except KeyError:
            raise VaultError(f"no key for account {address}") from None

    def sign_transaction(self, address: Address, tx: DynamicFeeTx) -> SignedTransaction:
        """Sign `tx` as `address`."""
        if tx.chain_id != self.chain_id:
            raise ValueError(f"transaction chain id {tx.chain_id} != vault chain id {self.chain_id}")
        return tx.sign(self.find_key(address))

    async def create_account(
        self,
        client: ExecutionApi,
        balance: int,
        timeout: float = FUNDING_TIMEOUT,
    ) -> Address:
        """
        Create a new account and fund it from the faucet.

        Args:
            client: Node to submit the funding transfer to.
            balance: Amount in wei to transfer.
            timeout: Seconds to wait for the transfer to be mined.

        Returns:
            The funded account's address.

        Raises:
            ValueError: If the vault has no faucet key.
            TransportError: If submitting or confirming the transfer fails.
        """
        if self.faucet is None:
            raise ValueError("vault has no faucet key to fund accounts from")

        address = self.generate_key()
        nonce = await client.nonce_at(self.faucet.address)
        tx = DynamicFeeTx(
            chain_id=self.chain_id,
            nonce=nonce,
            gas=TRANSFER_GAS,
            max_priority_fee_per_gas=FUNDING_TIP_CAP,
            max_fee_per_gas=FUNDING_FEE_CAP,
            to=address,
            value=balance,
        )
        signed = self.sign_transaction(self.faucet.address, tx)
        await client.send_transaction(signed)
        receipt = await wait_receipt_ok(client, signed.hash, timeout)
        logger.info(
            "Funded account %s with %d wei in block %d", address, balance, receipt.block_number
        )
        return address
