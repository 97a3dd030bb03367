"""Rebuild raw signature bytes from hex components."""
from __future__ import annotations

import binascii

from .errors import SignatureDecodeError
from .models import Signature


def strip_hex_prefix(component: str) -> str:
    """Drop a single leading ``0x``, if present."""
    if component.startswith("0x"):
        return component[2:]
    return component


def combine_signature(signature: Signature) -> str:
    """Concatenate R‖S‖V as one unprefixed hex string."""
    return (
        strip_hex_prefix(signature.r)
        + strip_hex_prefix(signature.s)
        + strip_hex_prefix(signature.v)
    )


def assemble_signature(signature: Signature) -> bytes:
    """Rebuild the raw signature bytes from its hex components.

    Example:
        Signature(r="0xAB", s="CD", v="0x01") → b"\\xab\\xcd\\x01"

    Raises:
        SignatureDecodeError: if a component is not hex or the combined
            length is odd.
    """
    combined = combine_signature(signature)
    try:
        return binascii.unhexlify(combined)
    except (binascii.Error, ValueError) as e:
        raise SignatureDecodeError(
            f"malformed signature hex: {e}",
            reason="malformed-hex",
            details={"r": signature.r, "s": signature.s, "v": signature.v},
        ) from e
