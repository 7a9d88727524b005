from mctap.proxy.forwarder import Direction, Forwarder
from mctap.proxy.session import Session
from mctap.config import config as _config
from mctap.logger import Logger, logger as _logger
from mctap.tools import Tool
import asyncio

class Proxy:
    def __init__(self, config=_config, logger: Logger = _logger):
        self.config = config
        self.sessions = {}  # id: Session
        self.sessionIds = set()  # Track used session IDs
        self.tasks = {}  # id: asyncio.Task
        self.server = None
        self.logger = logger.create_sub_logger(thread_name="proxy")

    def sessionId(self):
        """Return the next available session ID (smallest unused integer)."""
        i = 0
        while i in self.sessionIds:
            i += 1
        self.sessionIds.add(i)
        return i

    async def upstream(self) -> tuple[str, int]:
        host = self.config.get("server-ip", "127.0.0.1")
        port = self.config.get("server-port", "")
        port = int(port) if port else None
        # SRV lookups block
        return await asyncio.to_thread(Tool.resolve_minecraft_srv, host, port)

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        session_id = self.sessionId()
        self.tasks[session_id] = asyncio.current_task()
        try:
            session = Session(session_id, reader, writer, await self.upstream(), self.logger, self.config)
            self.sessions[session_id] = session
            await session.run()
        except asyncio.CancelledError:
            self.logger.debug(f"Session {session_id} cancelled")
            writer.close()
            raise
        except Exception:
            from traceback import format_exc
            self.logger.error(f"❌ Error handling session {session_id}:\n{format_exc()}")
            writer.close()
        finally:
            self.sessions.pop(session_id, None)
            self.tasks.pop(session_id, None)
            self.sessionIds.discard(session_id)

    async def start(self) -> asyncio.AbstractServer:
        host = self.config.get("listen-ip", "0.0.0.0")
        port = self.config.get_int("listen-port", 25567)
        self.server = await asyncio.start_server(self.handle_client, host, port)
        addr = self.server.sockets[0].getsockname()
        self.logger.info(f"✅ Proxy started on {addr[0]}:{addr[1]}")
        return self.server

    @property
    def address(self) -> tuple[str, int]:
        return self.server.sockets[0].getsockname()[:2]

    async def close(self):
        if self.server is not None:
            self.server.close()
        tasks = list(self.tasks.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if self.server is not None:
            await self.server.wait_closed()
        self.logger.info("🛑 Proxy stopped")

__all__ = ["Proxy", "Session", "Forwarder", "Direction"]
