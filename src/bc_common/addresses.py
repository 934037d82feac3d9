"""Account / token address helpers (20-byte hex, 0x-prefixed)."""

import re
import secrets

from src.bc_common.errors import InvalidRecipientError

ZERO_ADDRESS = "0x" + "0" * 40

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def is_address(value: str) -> bool:
    return bool(_ADDRESS_RE.match(value))


def validate_recipient(address: str) -> str:
    """Return the address unchanged, or raise InvalidRecipientError.

    The zero address is rejected: value sent there is unrecoverable.
    """
    if not is_address(address) or address.lower() == ZERO_ADDRESS:
        raise InvalidRecipientError(address)
    return address


def new_token_address() -> str:
    """Fresh random address for a newly created token / pool."""
    return "0x" + secrets.token_hex(20)
