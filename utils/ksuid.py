"""
KSUID - K-Sortable Unique Identifier.

4 bytes of seconds since the KSUID epoch followed by 16 random bytes,
encoded as a fixed width 27 character base62 string.
"""

import os
import struct
import time

KSUID_EPOCH = 1400000000
KSUID_LENGTH = 27
BASE62 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"


def _base62(value):
    digits = []
    while value:
        value, remainder = divmod(value, 62)
        digits.append(BASE62[remainder])
    return "".join(reversed(digits)).rjust(KSUID_LENGTH, "0")


def generate_ksuid(seconds=None):
    """Generate a sortable unique ID, optionally stamped with a given unix time."""
    if seconds is None:
        seconds = time.time()
    payload = struct.pack(">I", int(seconds) - KSUID_EPOCH) + os.urandom(16)
    return _base62(int.from_bytes(payload, byteorder="big"))
