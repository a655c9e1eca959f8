"""Opaque cursor tokens for keyset pagination."""

import base64
import binascii
import logging
import re
from typing import Callable, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator


logger = logging.getLogger(__name__)

HEX_REGEX = re.compile(r"^(0x|0h)?[0-9A-F]+$", re.IGNORECASE)
OBJECT_ID_LENGTH = 24

KeyValidator = Callable[[str], bool]


def is_object_id(value: object) -> bool:
    """Check whether a value looks like a 24 character hexadecimal ObjectId."""
    if not isinstance(value, str):
        return False
    return bool(HEX_REGEX.match(value)) and len(value) == OBJECT_ID_LENGTH


def is_uuid(value: object) -> bool:
    """Check whether a value is a canonical (hyphenated) UUID string."""
    if not isinstance(value, str) or len(value) != 36:
        return False
    try:
        UUID(value)
    except ValueError:
        return False
    return True


class DecodedCursor(BaseModel):
    """Position of a record inside an ordered result set.
    
    ``id`` is the record's primary key. ``v`` holds the secondary sort field
    value as text, and is absent when the sort field is the primary key.
    """
    
    model_config = ConfigDict(frozen=True)
    
    id: str
    v: Optional[str] = None
    
    @field_validator("id")
    @classmethod
    def validate_key_format(cls, value: str, info: ValidationInfo) -> str:
        validator = (info.context or {}).get("key_validator", is_object_id)
        if not validator(value):
            raise ValueError("Invalid cursor id")
        return value
    
    @field_validator("v", mode="before")
    @classmethod
    def coerce_sort_value(cls, value):
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)


def encode_cursor(cursor: DecodedCursor) -> str:
    """Encode a cursor as URL-safe base64 JSON.
    
    Args:
        cursor: The position to encode
        
    Returns:
        Opaque token safe for use in a query string
    """
    cursor_json = cursor.model_dump_json(exclude_none=True)
    return base64.urlsafe_b64encode(cursor_json.encode("utf-8")).decode("ascii")


def decode_cursor(
    encoded: Optional[str],
    key_validator: KeyValidator = is_object_id
) -> Optional[DecodedCursor]:
    """Decode a cursor token.
    
    Corrupted or foreign tokens never fail the request: they decode to
    ``None`` and the caller treats them as if no cursor was supplied.
    
    Args:
        encoded: Token produced by ``encode_cursor``
        key_validator: Store-native key format check applied to ``id``
        
    Returns:
        The decoded cursor, or None if the token is not a valid cursor
    """
    if not encoded:
        return None
    
    try:
        raw = base64.urlsafe_b64decode(encoded.encode("ascii"))
        return DecodedCursor.model_validate_json(
            raw,
            context={"key_validator": key_validator}
        )
    except (ValueError, binascii.Error, ValidationError) as e:
        logger.debug(f"Ignoring invalid cursor {encoded!r}: {e}")
        return None
