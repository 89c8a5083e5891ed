"""
Transport encoding detection.

Subscriptions are served either as plain text or wrapped in URL-safe
base64, often without padding. Failing to decode is a classification
result, not an error.
"""

import base64
import binascii
import logging

logger = logging.getLogger(__name__)


_URLSAFE_TO_STANDARD = str.maketrans({"-": "+", "_": "/"})


def decode_payload(text: str) -> tuple[str, bool]:
    """
    Try to decode text as URL-safe base64.

    Surrounding whitespace is trimmed and embedded line breaks are
    ignored. Missing padding is restored before decoding.

    Args:
        text: Raw payload text

    Returns:
        (decoded_text, True) if text is valid base64 of UTF-8 data,
        otherwise (text, False)
    """
    candidate = text.strip().replace("\r", "").replace("\n", "")
    candidate = candidate.translate(_URLSAFE_TO_STANDARD)
    candidate += "=" * (-len(candidate) % 4)

    try:
        raw = base64.b64decode(candidate, validate=True)
        decoded = raw.decode("utf-8")
    except (binascii.Error, ValueError) as e:
        logger.debug(f"Payload is not base64 encoded: {e}")
        return text, False

    return decoded, True


def encode_payload(text: str) -> str:
    """Encode text with URL-safe base64, the inverse of decode_payload."""
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")
