# core/config.py
from __future__ import annotations
from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Type, TypeVar, cast, get_type_hints
import os
import tomllib

T = TypeVar("T")

# ---------------------------------------------------------
#  HELPER: Recursive Unpacker
# ---------------------------------------------------------
def unpack(dataclass_type: Type[T], data: dict[str, Any]) -> T:
    """
    Recursively unpacks a dictionary into a dataclass.
    Keys that don't belong to the dataclass are dropped.
    """
    if not is_dataclass(dataclass_type):
        return cast(T, data)

    # Resolve string annotations (from __future__) into real classes
    resolved_types = get_type_hints(dataclass_type)
    valid_field_names = {f.name for f in fields(dataclass_type)}

    clean_data = {}
    for key, value in data.items():
        if key not in valid_field_names:
            continue

        target_type = resolved_types[key]
        if is_dataclass(target_type) and isinstance(value, dict):
            clean_data[key] = unpack(cast(Type[Any], target_type), value)
        elif target_type is float and isinstance(value, int):
            # TOML "10" is an int, physics fields are REALs
            clean_data[key] = float(value)
        else:
            clean_data[key] = value

    return dataclass_type(**clean_data)

# ---- Config Sections ----

@dataclass(frozen=True, slots=True)
class NetworkConfig:
    host: str = "0.0.0.0"
    port: int = 4534
    buffer_size: int = 1024

@dataclass(frozen=True, slots=True)
class ServerConfig:
    name: str = "Tron Legacy Test Server"
    hostname: str = ""          # Empty so the client uses the sender IP
    max_players: int = 16
    release: str = "0.2.9.2.3"
    protocol_min: int = 1
    protocol_max: int = 25
    revision: str = "current"   # see ProtocolRevision

@dataclass(frozen=True, slots=True)
class PhysicsConfig:
    cycle_delay: float = 0.1
    acceleration: float = 0.5
    rubber_wall_hump: float = 0.0
    rubber_hit_wall_ratio: float = 1.0
    walls_length: float = 10.0

@dataclass(frozen=True, slots=True)
class DebugConfig:
    debug_packets: bool = True
    show_ascii: bool = True

# ---- Main Config ----

@dataclass(frozen=True, slots=True)
class Config:
    network: NetworkConfig = field(default_factory=NetworkConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    physics: PhysicsConfig = field(default_factory=PhysicsConfig)
    debug: DebugConfig = field(default_factory=DebugConfig)

    @classmethod
    def load(cls, filename: str = "config.toml") -> Config:
        """
        Loads config from a TOML file.
        If the file doesn't exist, returns default config.
        """
        if not os.path.exists(filename):
            print(f"[WARN] {filename} not found. Using defaults.")
            return cls()

        with open(filename, "rb") as f:
            data = tomllib.load(f)

        return unpack(cls, data)
