from mctap.errors import ForwardingError, ProtocolError
from mctap.proxy.forwarder import Direction, Forwarder
from mctap.packet.serverbound import Handshake
from mctap.packet.build import Build
from mctap.packet import decode, Bound
from mctap.state import ConnectionState, State
from mctap.frame import tokenize
from mctap.config import config as _config
from mctap.logger import Logger
from traceback import format_exception
from json import dumps
import asyncio

class Session:
    def __init__(self, session_id: int, reader: asyncio.StreamReader, writer: asyncio.StreamWriter,
                 upstream: tuple[str, int], logger: Logger, config=_config):
        self.id = session_id
        self.reader = reader
        self.writer = writer
        self.upstream = upstream
        self.config = config
        self.peer = writer.get_extra_info("peername")
        self.state = ConnectionState()
        self.logger = logger.create_sub_logger(f"session-{session_id}")
        self.forwarders = []
        self.reason = None

    def describe(self) -> str:
        host, port = self.upstream
        counters = "  ".join(f"{f.direction.tag} {f.bytes}B/{f.frames} frames/{f.decoded} pkts/{f.errors} err" for f in self.forwarders)
        return f"#{self.id} {self.peer} -> {host}:{port} [{self.state.state.name}] {counters}".rstrip()

    async def run(self):
        host, port = self.upstream
        self.logger.info(f"🔗 New connection from {self.peer}, connecting to {host}:{port}")

        try:
            remote_reader, remote_writer = await asyncio.wait_for(
                asyncio.open_connection(host, port),
                timeout=self.config.get_float("connect-timeout", 5.0) or None
            )
        except (OSError, asyncio.TimeoutError) as e:
            self.reason = f"upstream unreachable: {e or type(e).__name__}"
            self.logger.error(f"❌ Failed to connect to target server {host}:{port}: {e or type(e).__name__}")
            try:
                await self.refuse(str(e) or type(e).__name__)
            finally:
                await self._close(self.writer)
            return

        self.forwarders = [
            self._forwarder(Direction.CLIENT_TO_SERVER, self.reader, remote_writer),
            self._forwarder(Direction.SERVER_TO_CLIENT, remote_reader, self.writer)
        ]
        await self.supervise([self.writer, remote_writer])

    def _forwarder(self, direction: Direction, reader, writer) -> Forwarder:
        return Forwarder(
            direction, reader, writer, self.state,
            self.logger.create_sub_logger(f"session-{self.id}/{direction.tag}"),
            buffer_size=self.config.get_int("buffer-size", 4096),
            read_timeout=self.config.get_float("read-timeout", 0.0),
            carry_over=self.config.get_bool("frame-carry-over", True),
            max_frame_size=self.config.get_int("max-frame-size", 2097155)
        )

    async def supervise(self, writers: list):
        """
        Runs both directions. The first one to finish (end of stream or I/O
        failure) ends the session: every stream is closed and the other
        direction is cancelled, so neither can stay blocked on its peer.
        Every direction's outcome is logged; the first one sets the reason.
        """
        tasks = {asyncio.create_task(f.run(), name=f"session-{self.id}/{f.direction.tag}"): f for f in self.forwarders}
        done = set()
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for writer in writers:
                await self._close(writer)
            for task in tasks:
                if task not in done:
                    task.cancel()
            outcomes = await asyncio.gather(*tasks, return_exceptions=True)

            if done:
                # Both can finish in the same tick; C2S is reported first then
                ordered = sorted(zip(tasks, outcomes), key=lambda pair: pair[0] not in done)
                reported = [(task, outcome) for task, outcome in ordered if not isinstance(outcome, asyncio.CancelledError)]
                for index, (task, outcome) in enumerate(reported):
                    self._report(tasks[task].direction, outcome, first=index == 0)
            else:
                self.reason = "cancelled"
                self.logger.info("🛑 Session cancelled")

    def _report(self, direction: Direction, outcome, first: bool = True):
        if isinstance(outcome, ForwardingError):
            reason = str(outcome)
            if first:
                self.logger.error(f"❌ Session torn down: {reason}")
            else:
                self.logger.error(f"❌ {reason} (during teardown)")
        elif isinstance(outcome, BaseException):
            reason = f"{direction.tag} crashed: {outcome!r}"
            self.logger.error(f"❌ Forwarder crashed ({direction.tag}):\n" +
                              "".join(format_exception(outcome)))
        else:
            reason = f"{direction.tag} {outcome}"
            if first:
                self.logger.info(f"👋 Session closed: {reason}")
            else:
                self.logger.debug(f"{reason} (during teardown)")
        if first:
            self.reason = reason

    async def refuse(self, reason: str):
        """
        Tells the client why it got no server, in whatever phase it asked for:
        a login disconnect, or a status response with the error as the MOTD.
        """
        try:
            data = await asyncio.wait_for(self.reader.read(self.config.get_int("buffer-size", 4096)), timeout=2.0)
            frames = tokenize(data)
            handshake = decode(Bound.SERVERBOUND, State.STATUS, frames[0]) if frames else None
        except (OSError, asyncio.TimeoutError, ProtocolError) as e:
            self.logger.debug(f"No handshake to answer: {e!r}")
            return

        if not isinstance(handshake, Handshake):
            return

        try:
            if handshake.next_state is State.STATUS:
                async with Build(0x00, self.writer) as build:
                    build.string(dumps({
                        "version": {"name": "mctap", "protocol": handshake.protocol_version},
                        "players": {"max": 0, "online": 0},
                        "description": {"text": f"§cFailed to connect to the target server: §f{reason}"}
                    }))
            else:
                async with Build(0x00, self.writer) as build:
                    build.string(dumps([{"text": "❌ Failed to connect to the target server: ", "color": "red"}, {"text": f"{reason}", "color": "white"}], separators=(",", ":")))
        except OSError as e:
            self.logger.debug(f"Client left before the refusal was sent: {e}")
            return
        self.logger.debug(f"✅ Sent refusal for {handshake.next_state.name}")

    async def _close(self, writer: asyncio.StreamWriter):
        if writer.is_closing():
            return
        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            self.logger.debug(f"Error while closing {writer.get_extra_info('peername')}: {e}")
