from mctap.packet import Bound, Packet, register
from mctap.packet.parse import Parse
from mctap.state import State

class Clientbound(Packet):
    bound = Bound.CLIENTBOUND

#------------------------------ status ------------------------------

@register
class StatusResponse(Clientbound):
    packet_id = 0x00
    state = State.STATUS

    def __init__(self, json: str):
        self.json = json

    @classmethod
    def read(cls, parse: Parse):
        return cls(parse.string("json", max_length=32767))

    def __str__(self):
        return f"StatusResponse {len(self.json)} chars: {self.json[:120]}"

@register
class PongResponse(Clientbound):
    packet_id = 0x01
    state = State.STATUS

    def __init__(self, payload: int):
        self.payload = payload

    @classmethod
    def read(cls, parse: Parse):
        return cls(parse.long("payload"))

#------------------------------ login ------------------------------

@register
class LoginDisconnect(Clientbound):
    packet_id = 0x00
    state = State.LOGIN

    def __init__(self, reason: str):
        self.reason = reason

    @classmethod
    def read(cls, parse: Parse):
        return cls(parse.string("reason", max_length=262144))

@register
class EncryptionRequest(Clientbound):
    packet_id = 0x01
    state = State.LOGIN

    def __init__(self, server_id: str, public_key: bytes, verify_token: bytes):
        self.server_id = server_id
        self.public_key = public_key
        self.verify_token = verify_token

    @classmethod
    def read(cls, parse: Parse):
        return cls(parse.string("server_id", max_length=20), parse.byte_array("public_key"), parse.byte_array("verify_token"))

    def __str__(self):
        return (f"EncryptionRequest server_id:{self.server_id!r} public_key {len(self.public_key)} bytes,"
                f" verify_token {len(self.verify_token)} bytes")

@register
class LoginSuccess(Clientbound):
    packet_id = 0x02
    state = State.LOGIN

    def __init__(self, uuid, username: str):
        self.uuid = uuid
        self.username = username

    @classmethod
    def read(cls, parse: Parse):
        # Property array that follows is not needed here
        return cls(parse.uuid("uuid"), parse.string("username"))

    def __str__(self):
        return f"LoginSuccess {self.username} - {self.uuid}"

@register
class SetCompression(Clientbound):
    packet_id = 0x03
    state = State.LOGIN

    def __init__(self, threshold: int):
        self.threshold = threshold

    @classmethod
    def read(cls, parse: Parse):
        return cls(parse.varint("threshold"))

#------------------------------ play ------------------------------

@register
class KeepAlive(Clientbound):
    packet_id = 0x20
    state = State.PLAY

    def __init__(self, id: int):
        self.id = id

    @classmethod
    def read(cls, parse: Parse):
        return cls(parse.long("id"))

@register
class ChunkData(Clientbound):
    """Chunk Data and Update Light. Body is not decoded."""
    packet_id = 0x21
    state = State.PLAY

    def __init__(self, length: int):
        self.length = length

    @classmethod
    def read(cls, parse: Parse):
        return cls(parse.remaining)

    def __str__(self):
        return f"ChunkData opaque ({self.length} bytes)"
