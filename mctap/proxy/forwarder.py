from mctap.errors import DecodeError, ForwardingError, InvalidState, Malformed
from mctap.frame import FrameBuffer, MAX_FRAME_SIZE, tokenize
from mctap.packet import Bound, Packet, Unrecognized, decode
from mctap.packet.clientbound import EncryptionRequest, LoginSuccess, SetCompression
from mctap.packet.serverbound import Handshake
from mctap.state import ConnectionState, State
from mctap.logger import Logger
from mctap.tools import Tool
from enum import Enum
import asyncio

class Direction(Enum):
    CLIENT_TO_SERVER = ("C2S", Bound.SERVERBOUND)
    SERVER_TO_CLIENT = ("S2C", Bound.CLIENTBOUND)

    def __init__(self, tag, bound):
        self.tag = tag
        self.bound = bound

    @property
    def peer(self) -> "Direction":
        if self is Direction.CLIENT_TO_SERVER:
            return Direction.SERVER_TO_CLIENT
        return Direction.CLIENT_TO_SERVER

# Movement spam is only interesting when DEBUG is on
QUIET = (State.PLAY,)

class Forwarder:
    def __init__(self, direction: Direction, reader: asyncio.StreamReader, writer: asyncio.StreamWriter,
                 state: ConnectionState, logger: Logger, buffer_size: int = 4096,
                 read_timeout: float = None, carry_over: bool = True, max_frame_size: int = MAX_FRAME_SIZE):
        self.direction = direction
        self.reader = reader
        self.writer = writer
        self.state = state
        self.logger = logger
        self.buffer_size = buffer_size
        self.read_timeout = read_timeout or None
        self.buffer = FrameBuffer(max_frame_size) if carry_over else None

        self.chunks = 0
        self.bytes = 0
        self.frames = 0
        self.decoded = 0
        self.errors = 0
        self._opaque_logged = False

    async def run(self) -> str:
        """
        Pumps bytes until end of stream. Returns the reason the loop ended;
        raises ForwardingError on any I/O failure.
        """
        while True:
            try:
                if self.read_timeout:
                    data = await asyncio.wait_for(self.reader.read(self.buffer_size), timeout=self.read_timeout)
                else:
                    data = await self.reader.read(self.buffer_size)
            except asyncio.TimeoutError as e:
                raise ForwardingError(self.direction, e)
            except (OSError, asyncio.IncompleteReadError) as e:
                raise ForwardingError(self.direction, e)

            if not data:
                self.logger.debug(f"🔌 {self.direction.tag} reached end of stream")
                return "end of stream"

            self.chunks += 1
            self.bytes += len(data)
            self.inspect(data)

            try:
                self.writer.write(data)
                await self.writer.drain()
            except OSError as e:
                raise ForwardingError(self.direction, e)

    def inspect(self, data: bytes):
        """Tap one chunk. Framing and decode problems are logged, never raised."""
        if self.state.encrypted:
            if not self._opaque_logged:
                self._opaque_logged = True
                self.logger.info("🔒 Stream is encrypted, relaying without decoding")
            return

        try:
            frames = self.buffer.feed(data) if self.buffer is not None else tokenize(data)
        except Malformed as e:
            self.errors += 1
            self.logger.warn(f"⚠️ Framing error, skipping {len(data)} bytes: {e}")
            return

        for frame in frames:
            self.frames += 1
            self.handle(frame)
            # Everything after Encryption Request is ciphertext
            if self.state.encrypted:
                if self.buffer is not None:
                    self.buffer.clear()
                break

    def handle(self, frame: bytes) -> Packet | None:
        state, compression, _ = self.state.snapshot()
        try:
            payload = Tool.decompress_packet(frame) if compression >= 0 else frame
            packet = decode(self.direction.bound, state, payload)
        except InvalidState as e:
            self.errors += 1
            self.logger.warn(f"⚠️ Failed to parse {e.packet or 'packet'}: {e}")
            if self.state.advance(State.UNKNOWN):
                self.logger.warn("⚠️ Connection state is now UNKNOWN, decoding stops")
            return None
        except DecodeError as e:
            self.errors += 1
            self.logger.warn(f"⚠️ Failed to parse {e.packet or 'packet'} in {state.name}: {e}")
            return None

        if isinstance(packet, Unrecognized):
            self.logger.debug(f"📦 {packet}")
            return packet

        self.decoded += 1
        if state in QUIET:
            self.logger.debug(f"📦 {packet}")
        else:
            self.logger.info(f"📦 {packet}")
        self.observe(packet)
        return packet

    def observe(self, packet: Packet):
        """State-machine hooks. Only the packets below move the session."""
        if isinstance(packet, Handshake):
            if self.state.advance(packet.next_state):
                self.logger.info(f"🔁 State -> {packet.next_state.name}")
        elif isinstance(packet, LoginSuccess):
            if self.state.advance(State.PLAY):
                self.logger.info(f"🔁 State -> PLAY ({packet.username} logged in)")
        elif isinstance(packet, SetCompression):
            if self.state.observe_compression(packet.threshold):
                self.logger.info(f"🗜️ Compression threshold set to {packet.threshold}")
        elif isinstance(packet, EncryptionRequest):
            if self.state.observe_encryption():
                self.logger.info("🔒 Server requested encryption")
