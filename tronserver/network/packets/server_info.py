# network/packets/server_info.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple

from tronserver.core.config import Config
from tronserver.network.packets.base import Packet
from tronserver.network.packets.descriptors import Descriptor
from tronserver.network.streams import FieldKind, PacketReader, PacketWriter
from tronserver.network.transport.envelope import MAX_DATAGRAM_SIZE, LegacyEnvelope


class ProtocolRevision(Enum):
    """
    Wire revisions of the big server info body.
    Both revisions share every field except the settings flags width.
    """
    CURRENT = "current"          # flags as a word-swapped u32
    SHORT_FLAGS = "short-flags"  # flags as a single u16 (older servers)


@dataclass(frozen=True, slots=True)
class PhysicsConstants:
    cycle_delay: float = 0.1
    acceleration: float = 0.5
    rubber_wall_hump: float = 0.0
    rubber_hit_wall_ratio: float = 1.0
    walls_length: float = 10.0


@dataclass(frozen=True, slots=True)
class ServerDescriptor:
    """
    Everything a server tells the browser about itself.
    An empty hostname makes the client fall back to the sender IP.
    """
    name: str
    port: int
    hostname: str = ""
    protocol_min: int = 1
    protocol_max: int = 25
    release: str = "0.2.9.2.3"
    max_players: int = 16
    physics: PhysicsConstants = field(default_factory=PhysicsConstants)
    revision: ProtocolRevision = ProtocolRevision.CURRENT

    @classmethod
    def from_config(cls, cfg: Config) -> ServerDescriptor:
        srv = cfg.server
        phys = cfg.physics
        server = cls(
            name=srv.name,
            port=cfg.network.port,
            hostname=srv.hostname,
            protocol_min=srv.protocol_min,
            protocol_max=srv.protocol_max,
            release=srv.release,
            max_players=srv.max_players,
            physics=PhysicsConstants(
                cycle_delay=phys.cycle_delay,
                acceleration=phys.acceleration,
                rubber_wall_hump=phys.rubber_wall_hump,
                rubber_hit_wall_ratio=phys.rubber_hit_wall_ratio,
                walls_length=phys.walls_length,
            ),
            # Raises ValueError on an unknown revision string
            revision=ProtocolRevision(srv.revision),
        )
        server.check_reply_sizes()
        return server

    def check_reply_sizes(self) -> None:
        """Raises ValueError if either info reply would not fit in one UDP datagram."""
        for label, payload in (
            ("small server info", build_short_info(self.port, self.hostname)),
            ("big server info", build_long_info(self)),
        ):
            size = LegacyEnvelope.datagram_size(payload)
            if size > MAX_DATAGRAM_SIZE:
                raise ValueError(
                    f"{label} reply is {size} bytes, over the {MAX_DATAGRAM_SIZE} byte datagram limit"
                )

    def long_info_values(self) -> Dict[str, Any]:
        """Field name -> value for every big info field."""
        phys = self.physics
        return {
            "port": self.port,
            "connection_name": "",      # empty so client uses sender IP
            "name": self.name,
            "users": 0,
            "protocol_min": self.protocol_min,
            "protocol_max": self.protocol_max,
            "release": self.release,
            "max_players": self.max_players,
            "usernames": "",
            "options": "",
            "url": "",
            "global_ids": "",
            "settings_flags": 0,
            "min_play_time_total": 0,
            "min_play_time_online": 0,
            "min_play_time_team": 0,
            "cycle_delay": phys.cycle_delay,
            "acceleration": phys.acceleration,
            "rubber_wall_hump": phys.rubber_wall_hump,
            "rubber_hit_wall_ratio": phys.rubber_hit_wall_ratio,
            "walls_length": phys.walls_length,
        }


# ---------------------------------------------------------
#  FIELD TABLES
# ---------------------------------------------------------
# The client parses these positionally. Order and type are the format.

Layout = Tuple[Tuple[str, FieldKind], ...]

SHORT_INFO_LAYOUT: Layout = (
    ("port", FieldKind.U32),
    ("hostname", FieldKind.STRING),
    ("transaction", FieldKind.U32),   # always 0, we are not a master server
)

def _long_info_layout(flags_kind: FieldKind) -> Layout:
    return (
        ("port", FieldKind.U32),
        ("connection_name", FieldKind.STRING),
        ("name", FieldKind.STRING),
        ("users", FieldKind.U32),
        # VersionSync
        ("protocol_min", FieldKind.U32),
        ("protocol_max", FieldKind.U32),
        ("release", FieldKind.STRING),
        ("max_players", FieldKind.U32),
        ("usernames", FieldKind.STRING),
        ("options", FieldKind.STRING),
        ("url", FieldKind.STRING),
        ("global_ids", FieldKind.STRING),
        # SettingsDigest
        ("settings_flags", flags_kind),
        ("min_play_time_total", FieldKind.U32),
        ("min_play_time_online", FieldKind.U32),
        ("min_play_time_team", FieldKind.U32),
        ("cycle_delay", FieldKind.REAL),
        ("acceleration", FieldKind.REAL),
        ("rubber_wall_hump", FieldKind.REAL),
        ("rubber_hit_wall_ratio", FieldKind.REAL),
        ("walls_length", FieldKind.REAL),
    )

LONG_INFO_LAYOUTS: Dict[ProtocolRevision, Layout] = {
    ProtocolRevision.CURRENT: _long_info_layout(FieldKind.U32),
    ProtocolRevision.SHORT_FLAGS: _long_info_layout(FieldKind.U16),
}


def _write_layout(layout: Layout, values: Dict[str, Any]) -> bytes:
    pkt = PacketWriter()
    for name, kind in layout:
        pkt.write_field(kind, values[name])
    return pkt.get_bytes()


def _read_layout(layout: Layout, payload: bytes) -> Dict[str, Any]:
    reader = PacketReader(payload)
    return {name: reader.read_field(kind) for name, kind in layout}


# ---------------------------------------------------------
#  BUILDERS
# ---------------------------------------------------------

def build_short_info(port: int, hostname: str) -> bytes:
    """Body of SMALL_SERVER_INFO: port, hostname, transaction id."""
    return _write_layout(SHORT_INFO_LAYOUT, {"port": port, "hostname": hostname, "transaction": 0})


def build_long_info(descriptor: ServerDescriptor, revision: ProtocolRevision | None = None) -> bytes:
    """
    Body of BIG_SERVER_INFO.
    'revision' defaults to the one the descriptor was configured with.
    """
    if revision is None:
        revision = descriptor.revision
    return _write_layout(LONG_INFO_LAYOUTS[revision], descriptor.long_info_values())


def parse_short_info(payload: bytes) -> Dict[str, Any]:
    return _read_layout(SHORT_INFO_LAYOUT, payload)


def parse_long_info(payload: bytes, revision: ProtocolRevision = ProtocolRevision.CURRENT) -> Dict[str, Any]:
    return _read_layout(LONG_INFO_LAYOUTS[revision], payload)


# ---------------------------------------------------------
#  PACKETS
# ---------------------------------------------------------

@dataclass
class SmallServerInfoPacket(Packet):
    """
    Packet 50: SMALL_SERVER_INFO
    Reply to GET_SMALL_SERVER_INFO.
    """
    descriptor = Descriptor.SMALL_SERVER_INFO

    port: int
    hostname: str = ""

    def payload(self) -> bytes:
        return build_short_info(self.port, self.hostname)

    @classmethod
    def from_descriptor(cls, server: ServerDescriptor) -> SmallServerInfoPacket:
        return cls(port=server.port, hostname=server.hostname)


@dataclass
class BigServerInfoPacket(Packet):
    """
    Packet 51: BIG_SERVER_INFO
    Reply to GET_BIG_SERVER_INFO.
    """
    descriptor = Descriptor.BIG_SERVER_INFO

    server: ServerDescriptor
    revision: ProtocolRevision | None = None

    def payload(self) -> bytes:
        return build_long_info(self.server, self.revision)


@dataclass
class ServerInfoRequestPacket(Packet):
    """
    Packets 52/53: GET_SMALL_SERVER_INFO / GET_BIG_SERVER_INFO
    Empty body; used by the query tool.
    """
    big: bool = False

    @property
    def descriptor(self) -> int:  # type: ignore[override]
        return Descriptor.GET_BIG_SERVER_INFO if self.big else Descriptor.GET_SMALL_SERVER_INFO

    def payload(self) -> bytes:
        return b""
