from mctap.vars import Var
from struct import pack
from io import BytesIO
import asyncio
import uuid

class Build:
    def __init__(self, packet_id: int, writer: asyncio.StreamWriter = None):
        self._writer = writer
        self._stream = BytesIO()

        self.varint(packet_id)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None and self._writer is not None:
            self._writer.write(self.frame())
            await self._writer.drain()
        self._stream.close()

    def get(self) -> bytes:
        """Raw payload (packet id included)."""
        return self._stream.getvalue()

    def frame(self) -> bytes:
        """Length-prefixed payload, as it travels on the wire."""
        payload = self.get()
        return Var.write_varint(len(payload)) + payload

    #-----------------------------------------------------------

    def varint(self, value: int):
        self._stream.write(Var.write_varint(value))
        return self

    def varlong(self, value: int):
        self._stream.write(Var.write_varlong(value))
        return self

    def string(self, text: str):
        self._stream.write(Var.write_string(text))
        return self

    def byte_array(self, value: bytes):
        self.varint(len(value))
        self._stream.write(value)
        return self

    def bool(self, value: bool):
        self._stream.write(b'\x01' if value else b'\x00')
        return self

    def ushort(self, value: int):
        self._stream.write(pack('>H', value))
        return self

    def long(self, value: int):
        self._stream.write(pack('>q', value))
        return self

    def float(self, value: float):
        self._stream.write(pack('>f', value))
        return self

    def double(self, value: float):
        self._stream.write(pack('>d', value))
        return self

    def uuid(self, value: uuid.UUID):
        self._stream.write(value.bytes)
        return self

    def raw(self, value: bytes):
        self._stream.write(value)
        return self
