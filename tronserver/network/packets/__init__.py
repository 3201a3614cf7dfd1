from .base import Packet
from .descriptors import Descriptor, DESCRIPTOR_NAMES
from .server_info import (
    BigServerInfoPacket,
    PhysicsConstants,
    ProtocolRevision,
    ServerDescriptor,
    ServerInfoRequestPacket,
    SmallServerInfoPacket,
    build_long_info,
    build_short_info,
    parse_long_info,
    parse_short_info,
)
