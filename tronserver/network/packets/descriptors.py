from __future__ import annotations
from enum import IntEnum


class Descriptor(IntEnum):
    """Legacy message descriptors used by server discovery."""
    LOGOUT                = 7
    SMALL_SERVER_INFO     = 50
    BIG_SERVER_INFO       = 51
    GET_SMALL_SERVER_INFO = 52
    GET_BIG_SERVER_INFO   = 53


DESCRIPTOR_NAMES = {d.value: d.name for d in Descriptor}
