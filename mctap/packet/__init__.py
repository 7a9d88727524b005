from mctap.errors import DecodeError
from mctap.packet.parse import Parse
from mctap.state import State
from enum import Enum

class Bound(Enum):
    SERVERBOUND = "Serverbound"
    CLIENTBOUND = "Clientbound"

# (bound, state, packet_id) -> Packet subclass
registry = {}

def register(cls):
    key = (cls.bound, cls.state, cls.packet_id)
    if key in registry:
        raise ValueError(f"Duplicate packet registration: {key}")
    registry[key] = cls
    return cls

class Packet:
    packet_id: int = None
    state: State = None
    bound: Bound = None

    @classmethod
    def decode(cls, payload: bytes) -> "Packet":
        """Decodes the body of a frame (packet id already stripped)."""
        with Parse(payload) as parse:
            return cls.read(parse)

    @classmethod
    def read(cls, parse: Parse) -> "Packet":
        raise NotImplementedError

    @property
    def name(self) -> str:
        return type(self).__name__

    def fields(self) -> dict:
        return dict(vars(self))

    def __str__(self):
        body = " ".join(f"{key}={value}" for key, value in self.fields().items())
        return f"{self.name} {body}".rstrip()

    def __repr__(self):
        return f"<{self.name} 0x{self.packet_id:02x} {self.fields()}>"

class Unrecognized(Packet):
    """Any frame we have no decoder for. Carries only what the proxy saw."""
    def __init__(self, bound: Bound, state: State, packet_id: int, length: int):
        self.bound = bound
        self.state = state
        self.packet_id = packet_id
        self.length = length

    def fields(self):
        return {"length": self.length}

    def __str__(self):
        return f"Unrecognized {self.state.name.lower()} packet 0x{self.packet_id:02x} ({self.length} bytes)"

def decode(bound: Bound, state: State, payload: bytes) -> Packet:
    """
    Two-level dispatch: connection state first, then packet id.\n
    Returns an `Unrecognized` record for ids without a decoder and for every
    frame once the state is UNKNOWN. Raises `DecodeError` (with the packet
    name filled in) when a known packet fails to decode.
    """
    with Parse(payload) as parse:
        packet_id = parse.varint("packet_id")
        body = parse.rest()

    cls = None if state is State.UNKNOWN else registry.get((bound, state, packet_id))
    if cls is None:
        return Unrecognized(bound, state, packet_id, len(body))

    try:
        return cls.decode(body)
    except DecodeError as e:
        e.packet = cls.__name__
        raise

from mctap.packet import serverbound, clientbound  # noqa: E402,F401  (fills the registry)
