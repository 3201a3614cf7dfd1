# network/packet_logger.py
from __future__ import annotations
import struct
from typing import Optional, Tuple

from tronserver.network.packets.descriptors import DESCRIPTOR_NAMES


class PacketLogger:
    def __init__(self, enabled: bool = True, show_ascii: bool = True):
        self.enabled = enabled
        self.show_ascii = show_ascii
        # Map IDs to Readable Names
        self.packet_names = dict(DESCRIPTOR_NAMES)

    def describe(self, datagram: bytes) -> str:
        """One line header: name, descriptor, length. Short datagrams are labelled as such."""
        if len(datagram) < 2:
            return f"{'RUNT':<22} (----) | Len={len(datagram):<3}"
        (descriptor,) = struct.unpack(">H", datagram[:2])
        name = self.packet_names.get(descriptor, "UNKNOWN")
        return f"{name:<22} ({descriptor:>4}) | Len={len(datagram):<3}"

    def log_packet(
        self,
        direction: str,
        datagram: bytes,
        *,
        addr: Optional[Tuple[str, int]] = None,
        show_ascii: Optional[bool] = None,
    ) -> None:
        """
        Pretty prints a whole legacy datagram (header included).
        direction: "RECV" or "SEND"
        """
        if not self.enabled:
            return
        if show_ascii is None:
            show_ascii = self.show_ascii

        addr_str = f" | Addr={addr[0]}:{addr[1]}" if addr else ""
        print(f"[{direction}] {self.describe(datagram)}{addr_str}")
        print(f"       Body={datagram.hex().upper()}")

        if show_ascii and datagram:
            ascii_str = "".join(chr(b) if 32 <= b <= 126 else "." for b in datagram)
            print(f"       Ascii='{ascii_str}'")

        print("-" * 50)
