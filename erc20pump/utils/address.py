import re

ZERO_ADDRESS = "0x" + "0" * 40


def validate_evm_address(address: str) -> bool:
    return bool(re.match(r"^0x[0-9a-fA-F]{40}$", address))


def normalize_address(address: str) -> str:
    """Lowercase an EVM address so string equality is byte equality."""
    if not validate_evm_address(address):
        raise ValueError(f"Invalid EVM address: '{address}'")
    return address.lower()


def address_bytes(address: str) -> bytes:
    return bytes.fromhex(normalize_address(address)[2:])
