# main.py
from __future__ import annotations
import argparse
import dataclasses
import socket
import textwrap
from typing import Optional

from tronserver.core.config import Config
from tronserver.network.dispatcher import PacketDispatcher
from tronserver.network.packet_logger import PacketLogger
from tronserver.network.packets import (
    BigServerInfoPacket, Descriptor, Packet, ServerDescriptor, SmallServerInfoPacket,
)
from tronserver.network.transport.envelope import LegacyEnvelope, MalformedEnvelope
from tronserver.network.transport.udp_transport import UdpTransport

# -------------------------------------------------------------------------
# CONTEXT
# -------------------------------------------------------------------------

class LegacyServerContext:
    """
    Holds configuration, the server identity, the logger and the UDP transport.
    Passed to every handler.
    """
    def __init__(self, cfg: Config, transport: Optional[UdpTransport] = None):
        self.cfg = cfg
        self.server = ServerDescriptor.from_config(cfg)
        self.logger = PacketLogger(
            enabled=cfg.debug.debug_packets,
            show_ascii=cfg.debug.show_ascii,
        )
        self.transport = transport
        self.dispatcher = dispatcher

    def send(self, packet: bytes | Packet, addr: tuple[str, int]) -> None:
        """
        Sends a reply. Accepts a framed datagram OR a Packet object.
        """
        if isinstance(packet, Packet):
            datagram = packet.serialize()
        else:
            datagram = packet

        if self.transport is None:
            print("[ERR] No transport bound, dropping reply")
            return

        try:
            self.transport.send(datagram, addr)
            self.logger.log_packet("SEND", datagram, addr=addr)
        except OSError as e:
            print(f"[ERR] Failed to send packet to {addr[0]}:{addr[1]}: {e}")

    def process_datagram(self, data: bytes, addr: tuple[str, int]) -> None:
        """Entry point for every received datagram. Never raises."""
        self.logger.log_packet("RECV", data, addr=addr)

        try:
            envelope = LegacyEnvelope.decode(data)
        except MalformedEnvelope as e:
            print(f"[WARN] Invalid message from {addr[0]}:{addr[1]}: {e}")
            return

        try:
            self.dispatcher.dispatch(self, envelope, addr)
        except Exception as e:
            print(f"[ERROR] Handler for descriptor {envelope.descriptor_id} failed: {e}")

    def run(self) -> None:
        """Binds the UDP socket and serves until interrupted."""
        host = self.cfg.network.host
        port = self.cfg.network.port

        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, port))
            self.transport = UdpTransport(sock, self.cfg.network.buffer_size)

            print(f"[UDP] Started '{self.server.name}' on port {port}")

            while True:
                try:
                    data, addr = self.transport.recv()
                except OSError as e:
                    print(f"[ERR] Error reading from UDP: {e}")
                    continue
                self.process_datagram(data, addr)
        except KeyboardInterrupt:
            print("\n[!] Stopping server...")
        finally:
            sock.close()


def unknown_packet(ctx: LegacyServerContext, envelope: LegacyEnvelope, addr: tuple[str, int]):
    print(f"[UDP] Unknown descriptor {envelope.descriptor_id} from {addr[0]}:{addr[1]} (len={len(envelope.payload)})")

dispatcher = PacketDispatcher(on_unknown=unknown_packet)

# ------------------ UDP HANDLERS ------------------

@dispatcher.route(Descriptor.GET_SMALL_SERVER_INFO)
def on_get_small_server_info(ctx: LegacyServerContext, envelope: LegacyEnvelope, addr: tuple[str, int]):
    print(">>> GetSmallServerInfo request")
    ctx.send(SmallServerInfoPacket.from_descriptor(ctx.server), addr)

@dispatcher.route(Descriptor.GET_BIG_SERVER_INFO)
def on_get_big_server_info(ctx: LegacyServerContext, envelope: LegacyEnvelope, addr: tuple[str, int]):
    print(">>> GetBigServerInfo request")
    ctx.send(BigServerInfoPacket(ctx.server), addr)

@dispatcher.route(Descriptor.LOGOUT)
def on_logout(ctx: LegacyServerContext, envelope: LegacyEnvelope, addr: tuple[str, int]):
    # Client is disconnecting gracefully, nothing to send back
    print(f">>> Client from {addr[0]}:{addr[1]} logging out")

# ------------------ MAIN ------------------

def handle_user_arguments(argv: Optional[list[str]] = None) -> argparse.Namespace:
    description = textwrap.dedent("""\
    Answer legacy server browser queries (small and big server info) over UDP.
    """)
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument('-c', '--config', default='config.toml', help='TOML config file.')
    parser.add_argument('-p', '--port', type=int, default=None)
    parser.add_argument('-n', '--name', type=str, default=None, help='Server name shown in the browser.')
    parser.add_argument(
        '--hostname', type=str, default=None,
        help='Hostname to advertise. Leave empty to let clients use the sender IP.'
    )
    parser.add_argument(
        '--revision', choices=['current', 'short-flags'], default=None,
        help='Big server info wire revision.'
    )
    return parser.parse_args(argv)


def apply_overrides(cfg: Config, arguments: argparse.Namespace) -> Config:
    """Command line values win over the config file."""
    network = cfg.network
    server = cfg.server
    if arguments.port is not None:
        network = dataclasses.replace(network, port=arguments.port)
    if arguments.name is not None:
        server = dataclasses.replace(server, name=arguments.name)
    if arguments.hostname is not None:
        server = dataclasses.replace(server, hostname=arguments.hostname)
    if arguments.revision is not None:
        server = dataclasses.replace(server, revision=arguments.revision)
    return dataclasses.replace(cfg, network=network, server=server)


def main(argv: Optional[list[str]] = None):
    arguments = handle_user_arguments(argv)
    cfg = apply_overrides(Config.load(arguments.config), arguments)
    ctx = LegacyServerContext(cfg)
    try:
        ctx.run()
    except OSError as e:
        print(f"[ERR] Error while listening: {e}")


if __name__ == "__main__":
    main()
