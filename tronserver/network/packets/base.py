from abc import ABC, abstractmethod
from typing import ClassVar

from tronserver.network.transport.envelope import LegacyEnvelope


class Packet(ABC):
    descriptor: ClassVar[int]

    @abstractmethod
    def payload(self) -> bytes:
        pass

    def serialize(self) -> bytes:
        return LegacyEnvelope.encode(self.descriptor, self.payload())
