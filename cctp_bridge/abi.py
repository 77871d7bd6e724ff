"""ABI loading from the bundled files.

Only the CCTP and ERC-20 functions the bridge calls are bundled
in ``cctp_bridge/abi/``. Loaded ABI files are cached in-process.
"""

import json
from functools import lru_cache
from pathlib import Path

from eth_typing import HexAddress
from web3 import Web3
from web3.contract import Contract

#: ERC-20 subset: balanceOf, allowance, approve, decimals
ERC20_ABI = "ERC20.json"

#: TokenMessengerV2 subset: depositForBurn
TOKEN_MESSENGER_V2_ABI = "TokenMessengerV2.json"

#: MessageTransmitterV2 subset: receiveMessage, MessageSent
MESSAGE_TRANSMITTER_V2_ABI = "MessageTransmitterV2.json"


@lru_cache(maxsize=32)
def get_abi_by_filename(fname: str) -> list:
    """Reads a bundled ABI file and returns it.

    Example::

        abi = get_abi_by_filename("ERC20.json")

    :param fname:
        File name under ``cctp_bridge/abi``.

    :return:
        ABI as a list of entries
    """
    here = Path(__file__).resolve().parent
    abi_path = here / "abi" / Path(fname)
    with open(abi_path, "rt", encoding="utf-8") as f:
        return json.load(f)


def get_deployed_contract(
    web3: Web3,
    fname: str,
    address: HexAddress | str,
) -> Contract:
    """Get a Contract proxy object for a contract deployed at a specific address.

    :param web3:
        Web3 instance

    :param fname:
        Bundled ABI file name

    :param address:
        Address of the deployed contract

    :return:
        `web3.contract.Contract` proxy
    """
    assert isinstance(web3, Web3), f"Got {type(web3)} instead of Web3"
    assert address, "get_deployed_contract() address was None"
    return web3.eth.contract(
        address=Web3.to_checksum_address(address),
        abi=get_abi_by_filename(fname),
    )
