# network/transport/envelope.py
from __future__ import annotations
import struct
from dataclasses import dataclass

HEADER = struct.Struct(">HHH")
HEADER_SIZE = HEADER.size      # descriptor, message id, word length
SENDER_ID_SIZE = 2
MIN_DATAGRAM_SIZE = HEADER_SIZE + SENDER_ID_SIZE
# Largest UDP payload over IPv4
MAX_DATAGRAM_SIZE = 65507


class MalformedEnvelope(ValueError):
    """Raised when a datagram is too short to hold a legacy header."""


@dataclass(frozen=True)
class LegacyEnvelope:
    """
    Legacy UDP framing:
      [u16_be descriptor] [u16_be message id] [u16_be data length in shorts]
      [data...] [pad byte if data is odd] [u16_be sender id]

    'payload' is everything after the header, sender id included.
    'word_length' is what the sender declared; it is never used to slice.
    """
    descriptor_id: int
    message_id: int
    word_length: int
    payload: bytes

    @classmethod
    def decode(cls, datagram: bytes) -> LegacyEnvelope:
        if len(datagram) < MIN_DATAGRAM_SIZE:
            raise MalformedEnvelope(
                f"legacy message too short ({len(datagram)} < {MIN_DATAGRAM_SIZE} bytes)"
            )
        descriptor_id, message_id, word_length = HEADER.unpack_from(datagram)
        return cls(descriptor_id, message_id, word_length, bytes(datagram[HEADER_SIZE:]))

    @staticmethod
    def word_count(payload: bytes) -> int:
        """Number of shorts the data occupies, counting the pad byte."""
        return len(payload) // 2 + len(payload) % 2

    @staticmethod
    def datagram_size(payload: bytes) -> int:
        """Bytes on the wire once 'payload' is framed."""
        return HEADER_SIZE + LegacyEnvelope.word_count(payload) * 2 + SENDER_ID_SIZE

    @staticmethod
    def encode(descriptor_id: int, payload: bytes) -> bytes:
        """
        Wraps a message body. Message id and sender id are always 0 here;
        this server never correlates requests.
        """
        length = LegacyEnvelope.word_count(payload)
        out = bytearray(HEADER.pack(descriptor_id, 0, length))
        out += payload
        if len(payload) % 2:
            out.append(0)
        out += b"\x00" * SENDER_ID_SIZE
        return bytes(out)
