"""Identity and signature verification.

Actors sign plain-text intents with their wallet (EIP-191 ``personal_sign``).
The same check serves buyers, organizers and door staff; only the expected
identity and the message differ.
"""

import logging

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_keys.exceptions import BadSignature
from eth_keys.exceptions import ValidationError as KeyValidationError

from ticketing.domain.errors import InvalidSignatureError
from ticketing.domain.value_objects import Identity

logger = logging.getLogger(__name__)

# r (32) + s (32) + v (1)
SIGNATURE_LENGTH = 65


def purchase_message(event_id: int, tier_index: int, buyer: Identity, timestamp_ms: int) -> str:
    """Intent text the wallet client signs before buying."""
    return (
        f"Purchase ticket for event {event_id}, tier {tier_index}, "
        f"buyer {buyer}, timestamp {timestamp_ms}"
    )


def use_ticket_message(ticket_id: int) -> str:
    """Intent text an organizer signs to admit a ticket."""
    return f"Use ticket {ticket_id}"


def recover_signer(message: str | bytes, signature: str | bytes) -> Identity:
    """Return the identity that produced ``signature`` over ``message``.

    Raises:
        InvalidSignatureError: If the signature is malformed or unrecoverable.
    """
    if isinstance(message, bytes):
        signable = encode_defunct(primitive=message)
    else:
        signable = encode_defunct(text=message)
    raw = _signature_bytes(signature)
    try:
        address = Account.recover_message(signable, signature=raw)
    except (ValueError, TypeError, KeyValidationError, BadSignature) as exc:
        raise InvalidSignatureError() from exc
    return Identity(address)


def authorize(expected: Identity, message: str | bytes, signature: str | bytes) -> bool:
    """True when ``signature`` over ``message`` was made by ``expected``."""
    try:
        signer = recover_signer(message, signature)
    except InvalidSignatureError:
        logger.warning("Unrecoverable signature presented for %s", expected)
        return False
    if signer != expected:
        logger.warning("Signature from %s presented for %s", signer, expected)
        return False
    return True


def _signature_bytes(signature: str | bytes) -> bytes:
    if isinstance(signature, str):
        text = signature[2:] if signature[:2].lower() == "0x" else signature
        try:
            signature = bytes.fromhex(text)
        except ValueError as exc:
            raise InvalidSignatureError() from exc
    if not isinstance(signature, bytes) or len(signature) != SIGNATURE_LENGTH:
        raise InvalidSignatureError()
    return signature
