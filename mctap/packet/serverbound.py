from mctap.errors import InvalidState
from mctap.packet import Bound, Packet, register
from mctap.packet.parse import Parse
from mctap.state import State

class Serverbound(Packet):
    bound = Bound.SERVERBOUND

#------------------------------ status ------------------------------

@register
class Handshake(Serverbound):
    packet_id = 0x00
    state = State.STATUS

    def __init__(self, protocol_version: int, server_address: str, server_port: int, next_state: State):
        self.protocol_version = protocol_version
        self.server_address = server_address
        self.server_port = server_port
        self.next_state = next_state

    @classmethod
    def decode(cls, payload: bytes):
        # Status request reuses id 0x00 with an empty body
        if not payload:
            return StatusRequest()
        return super().decode(payload)

    @classmethod
    def read(cls, parse: Parse):
        protocol_version = parse.varint("protocol_version")
        server_address = parse.string("server_address")
        server_port = parse.ushort("server_port")
        raw_state = parse.varint("next_state")

        next_state = State.from_raw(raw_state)
        if next_state is State.UNKNOWN:
            raise InvalidState(raw_state)
        return cls(protocol_version, server_address, server_port, next_state)

    def __str__(self):
        return (f"Handshake protocol_version={self.protocol_version}, to server: "
                f"{self.server_address}:{self.server_port} with next state {self.next_state.name}")

class StatusRequest(Serverbound):
    packet_id = 0x00
    state = State.STATUS

    @classmethod
    def read(cls, parse: Parse):
        return cls()

@register
class PingRequest(Serverbound):
    packet_id = 0x01
    state = State.STATUS

    def __init__(self, payload: int):
        self.payload = payload

    @classmethod
    def read(cls, parse: Parse):
        return cls(parse.long("payload"))

#------------------------------ login ------------------------------

@register
class LoginStart(Serverbound):
    packet_id = 0x00
    state = State.LOGIN

    def __init__(self, player_name: str, sig_data: bool = False, timestamp: int = None,
                 public_key: bytes = None, signature: bytes = None, has_uuid: bool = False, uuid=None):
        self.player_name = player_name
        self.sig_data = sig_data
        # Present only if sig_data
        self.timestamp = timestamp
        self.public_key = public_key
        self.signature = signature
        # Present only if has_uuid
        self.has_uuid = has_uuid
        self.uuid = uuid

    @classmethod
    def read(cls, parse: Parse):
        player_name = parse.string("player_name")

        sig_data = parse.bool("sig_data")
        timestamp = public_key = signature = None
        if sig_data:
            timestamp = parse.long("timestamp")
            public_key = parse.byte_array("public_key")
            signature = parse.byte_array("signature")

        has_uuid = parse.bool("has_uuid")
        uuid = parse.uuid("uuid") if has_uuid else None

        return cls(player_name, sig_data, timestamp, public_key, signature, has_uuid, uuid)

    def __str__(self):
        text = f"LoginStart player_name:{self.player_name} with UUID:{self.uuid}"
        if self.sig_data:
            text += (f" signed at {self.timestamp} (public_key {len(self.public_key)} bytes,"
                     f" signature {len(self.signature)} bytes)")
        return text

#------------------------------ play ------------------------------

@register
class KeepAlive(Serverbound):
    packet_id = 0x12
    state = State.PLAY

    def __init__(self, id: int):
        self.id = id

    @classmethod
    def read(cls, parse: Parse):
        return cls(parse.long("id"))

@register
class SetPlayerPosition(Serverbound):
    packet_id = 0x14
    state = State.PLAY

    def __init__(self, x: float, y: float, z: float, on_ground: bool):
        self.x = x
        self.y = y
        self.z = z
        self.on_ground = on_ground

    @classmethod
    def read(cls, parse: Parse):
        return cls(parse.double("x"), parse.double("y"), parse.double("z"), parse.bool("on_ground"))

    def __str__(self):
        return f"SetPlayerPosition x:{self.x:.2f} y:{self.y:.2f} z:{self.z:.2f} on_ground:{self.on_ground}"

@register
class SetPlayerPosAndRot(Serverbound):
    packet_id = 0x15
    state = State.PLAY

    def __init__(self, x: float, y: float, z: float, yaw: float, pitch: float, on_ground: bool):
        self.x = x
        self.y = y
        self.z = z
        self.yaw = yaw
        self.pitch = pitch
        self.on_ground = on_ground

    @classmethod
    def read(cls, parse: Parse):
        return cls(
            parse.double("x"), parse.double("y"), parse.double("z"),
            parse.float("yaw"), parse.float("pitch"),
            parse.bool("on_ground")
        )

    def __str__(self):
        return (f"SetPlayerPosAndRot x:{self.x:.2f} y:{self.y:.2f} z:{self.z:.2f} "
                f"yaw:{self.yaw:.2f} pitch:{self.pitch:.2f} on_ground:{self.on_ground}")

@register
class SetPlayerRotation(Serverbound):
    packet_id = 0x16
    state = State.PLAY

    def __init__(self, yaw: float, pitch: float, on_ground: bool):
        self.yaw = yaw
        self.pitch = pitch
        self.on_ground = on_ground

    @classmethod
    def read(cls, parse: Parse):
        return cls(parse.float("yaw"), parse.float("pitch"), parse.bool("on_ground"))

    def __str__(self):
        return f"SetPlayerRotation yaw:{self.yaw:.2f} pitch:{self.pitch:.2f} on_ground:{self.on_ground}"

@register
class SetPlayerOnGround(Serverbound):
    packet_id = 0x17
    state = State.PLAY

    def __init__(self, on_ground: bool):
        self.on_ground = on_ground

    @classmethod
    def read(cls, parse: Parse):
        return cls(parse.bool("on_ground"))
