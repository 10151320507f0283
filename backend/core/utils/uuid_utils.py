"""
UUIDv7 helpers. Time-ordered ids keep correlation ids sortable in the logs.
"""
import secrets
import time
import uuid


def uuid7() -> uuid.UUID:
    """
    Generate a UUIDv7: 48-bit millisecond timestamp, version nibble 0111,
    variant bits 10, remaining bits random.
    """
    timestamp_ms = int(time.time() * 1000)
    uuid_bytes = bytearray(timestamp_ms.to_bytes(6, byteorder='big') + secrets.token_bytes(10))

    uuid_bytes[6] = (uuid_bytes[6] & 0x0f) | 0x70
    uuid_bytes[8] = (uuid_bytes[8] & 0x3f) | 0x80

    return uuid.UUID(bytes=bytes(uuid_bytes))
