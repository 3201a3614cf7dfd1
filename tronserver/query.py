"""
Legacy server info query tool.

Sends GetSmallServerInfo (or GetBigServerInfo with --big) to a server and
prints the decoded reply.

Usage:
    tronserver-query [host] [port] [--big] [--revision short-flags]
"""
from __future__ import annotations
import argparse
import socket
from typing import Any, Dict, Optional

from tronserver.network.packets import (
    Descriptor, ProtocolRevision, ServerInfoRequestPacket, parse_long_info, parse_short_info,
)
from tronserver.network.transport.envelope import LegacyEnvelope, MalformedEnvelope


def decode_reply(datagram: bytes, revision: ProtocolRevision = ProtocolRevision.CURRENT) -> Dict[str, Any]:
    """
    Decodes a SMALL_SERVER_INFO or BIG_SERVER_INFO datagram into its fields.
    Raises MalformedEnvelope for anything else.
    """
    envelope = LegacyEnvelope.decode(datagram)
    try:
        if envelope.descriptor_id == Descriptor.SMALL_SERVER_INFO:
            return parse_short_info(envelope.payload)
        if envelope.descriptor_id == Descriptor.BIG_SERVER_INFO:
            return parse_long_info(envelope.payload, revision)
    except IndexError as e:
        raise MalformedEnvelope(f"reply body truncated: {e}") from e
    raise MalformedEnvelope(f"unexpected descriptor {envelope.descriptor_id}")


def send_query(
    sock: socket.socket,
    addr: tuple[str, int],
    big: bool = False,
    revision: ProtocolRevision = ProtocolRevision.CURRENT,
    timeout: float = 2.0,
) -> Optional[Dict[str, Any]]:
    """Send one info request and print the response."""
    label = "GetBigServerInfo" if big else "GetSmallServerInfo"
    print(f"\n--- {label} ---")
    print(f"  Sending to {addr[0]}:{addr[1]}")

    sock.sendto(ServerInfoRequestPacket(big=big).serialize(), addr)

    sock.settimeout(timeout)
    try:
        data, sender = sock.recvfrom(2048)
    except socket.timeout:
        print("  NO RESPONSE (timeout)")
        return None

    print(f"  Response from {sender[0]}:{sender[1]} ({len(data)} bytes):")
    print(f"  {data.hex().upper()}")

    try:
        fields = decode_reply(data, revision)
    except MalformedEnvelope as e:
        print(f"  WARNING: {e}")
        return None

    print("  Parsed fields:")
    for k, v in fields.items():
        print(f"    {k} = {v!r}")
    return fields


def main(argv: Optional[list[str]] = None):
    parser = argparse.ArgumentParser(description="Query a legacy server for its info.")
    parser.add_argument('host', nargs='?', default='127.0.0.1')
    parser.add_argument('port', nargs='?', type=int, default=4534)
    parser.add_argument('--big', action='store_true', help='Ask for the big server info.')
    parser.add_argument(
        '--revision', choices=[r.value for r in ProtocolRevision], default=ProtocolRevision.CURRENT.value,
        help='Wire revision used to decode the big server info.'
    )
    arguments = parser.parse_args(argv)

    print(f"Target: {arguments.host}:{arguments.port}")

    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.bind(('', 0))
        send_query(sock, (arguments.host, arguments.port), arguments.big, ProtocolRevision(arguments.revision))
    except OSError as e:
        print(f"  SOCKET ERROR: {e}")
    finally:
        sock.close()


if __name__ == '__main__':
    main()
