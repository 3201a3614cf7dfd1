# network/transport/udp_transport.py
from __future__ import annotations
import socket


class UdpTransport:
    def __init__(self, sock: socket.socket, buffer_size: int = 1024):
        self.sock = sock
        self.buffer_size = buffer_size

    def send(self, datagram: bytes, addr: tuple[str, int]) -> None:
        """
        Sends an already framed datagram to the specified address.
        """
        self.sock.sendto(datagram, addr)

    def recv(self) -> tuple[bytes, tuple[str, int]]:
        data, addr = self.sock.recvfrom(self.buffer_size)
        return data, addr
