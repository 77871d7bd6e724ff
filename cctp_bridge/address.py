"""Chain neutral address.

CCTP moves value between chains with incompatible address formats:
20-byte EVM addresses and 32-byte Solana public keys.
:py:class:`Address` carries either in one value type, so the bridge
can store a recipient without knowing the destination architecture.

Example:

.. code-block:: python

    from cctp_bridge.address import Address

    evm = Address.from_evm("0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913")
    sol = Address.new("EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v")

    assert evm.to_evm() == "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"
    pubkey = sol.to_pubkey()
"""

from dataclasses import dataclass

from eth_typing import HexAddress
from hexbytes import HexBytes
from solders.pubkey import Pubkey
from web3 import Web3

from cctp_bridge.error import AddrError, InvalidAddress

#: Capacity of the address buffer
ADDRESS_CAPACITY = 64

#: Length of an EVM address
EVM_ADDRESS_LENGTH = 20

#: Length of a Solana public key
SOLANA_PUBKEY_LENGTH = 32


@dataclass(frozen=True, slots=True)
class Address:
    """EVM address or Solana public key.

    - ``data`` is a fixed 64-byte buffer, only the first ``length`` bytes are meaningful

    - ``length`` is 20 for EVM, 32 for Solana, 0 for an empty address

    Immutable. Equality is structural.
    """

    data: bytes = bytes(ADDRESS_CAPACITY)

    length: int = 0

    def __post_init__(self):
        assert len(self.data) == ADDRESS_CAPACITY, f"Address buffer must be {ADDRESS_CAPACITY} bytes, got {len(self.data)}"
        assert 0 <= self.length <= ADDRESS_CAPACITY, f"Bad address length {self.length}"

    def __str__(self):
        if self.length == EVM_ADDRESS_LENGTH:
            return self.to_evm()
        elif self.length == SOLANA_PUBKEY_LENGTH:
            return str(Pubkey(self.as_bytes()))
        else:
            return "0x" + self.as_bytes().hex()

    @classmethod
    def from_raw(cls, raw: bytes) -> "Address":
        """Wrap raw address bytes.

        The length of ``raw`` becomes the address length.
        """
        assert len(raw) <= ADDRESS_CAPACITY, f"Address too long: {len(raw)} bytes"
        return cls(data=raw.ljust(ADDRESS_CAPACITY, b"\x00"), length=len(raw))

    @classmethod
    def from_evm(cls, address: HexAddress | str | bytes) -> "Address":
        """Create from an EVM address.

        :param address:
            Hex string, with or without 0x, or 20 raw bytes.

        :raise InvalidAddress:
            If the value is not an EVM address.
        """
        if isinstance(address, bytes):
            if len(address) != EVM_ADDRESS_LENGTH:
                raise InvalidAddress(address.hex())
            return cls.from_raw(address)

        if not Web3.is_address(address):
            raise InvalidAddress(address)

        raw = bytes(HexBytes(address))
        if len(raw) != EVM_ADDRESS_LENGTH:
            raise InvalidAddress(address)
        return cls.from_raw(raw)

    @classmethod
    def from_pubkey(cls, pubkey: Pubkey) -> "Address":
        """Create from a Solana public key."""
        return cls.from_raw(bytes(pubkey))

    @classmethod
    def new(cls, value: str) -> "Address":
        """Parse an address string.

        Tries an EVM hex address first, then a base58 Solana public key.

        :raise InvalidAddress:
            If the string is neither.
        """
        if Web3.is_address(value):
            return cls.from_evm(value)

        try:
            pubkey = Pubkey.from_string(value)
        except ValueError as e:
            raise InvalidAddress(value) from e

        return cls.from_pubkey(pubkey)

    def as_bytes(self) -> bytes:
        """The meaningful part of the buffer."""
        return self.data[: self.length]

    def is_empty(self) -> bool:
        return self.length == 0

    def to_evm(self) -> HexAddress:
        """Narrow to a checksummed EVM address.

        :raise AddrError:
            If this is not a 20-byte address.
        """
        if self.length != EVM_ADDRESS_LENGTH:
            raise AddrError(f"Invalid length for EVM address: expected {EVM_ADDRESS_LENGTH}, got {self.length}")
        return Web3.to_checksum_address("0x" + self.as_bytes().hex())

    def to_pubkey(self) -> Pubkey:
        """Narrow to a Solana public key.

        :raise AddrError:
            If this is not a 32-byte address.
        """
        if self.length != SOLANA_PUBKEY_LENGTH:
            raise AddrError(f"Invalid length for Solana address: expected {SOLANA_PUBKEY_LENGTH}, got {self.length} ({self})")
        return Pubkey(self.as_bytes())

    def to_bytes32(self) -> bytes:
        """Left-pad to the 32-byte form CCTP uses for ``mintRecipient`` and ``destinationCaller``."""
        assert self.length <= 32, f"Cannot fit {self.length} bytes into bytes32"
        return self.as_bytes().rjust(32, b"\x00")
