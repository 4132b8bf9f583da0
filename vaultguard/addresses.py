"""Address syntax checks shared by the scanner and the preparer."""

from web3 import Web3

from vaultguard.errors import InvalidArgument


def is_address(value) -> bool:
    """Hex address with a valid checksum if mixed-case."""
    return isinstance(value, str) and Web3.is_address(value)


def require_address(value, message: str) -> str:
    if not is_address(value):
        raise InvalidArgument(message)
    return Web3.to_checksum_address(value)


def same_address(a: str | None, b: str | None) -> bool:
    if a is None or b is None:
        return False
    return a.lower() == b.lower()
