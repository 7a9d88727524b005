from mctap.errors import DecodeError, EncodingError, Malformed, Truncated
from mctap.vars import Var
from struct import unpack
from io import BytesIO
import uuid

class Parse:
    def __init__(self, data: bytes):
        self.data = data
        self.stream = None

    def __enter__(self):
        self.stream = BytesIO(self.data)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stream.close()

    @property
    def position(self) -> int:
        return self.stream.tell()

    @property
    def remaining(self) -> int:
        return len(self.data) - self.stream.tell()

    def take(self, length: int, field: str = None) -> bytes:
        if length < 0:
            raise DecodeError(f"negative length {length}", field=field)
        if length > self.remaining:
            raise Truncated(f"needs {length} bytes, {self.remaining} left", field=field)
        return self.stream.read(length)

    def varint(self, field: str = None) -> int:
        return self._var(Var.read_varint_from_bytes, 5, field)

    def varlong(self, field: str = None) -> int:
        return self._var(Var.read_varlong_from_bytes, 10, field)

    def _var(self, read, max_bytes, field):
        start = self.stream.tell()
        try:
            value, size = read(self.data, start)
        except Malformed as e:
            rest = self.data[start:]
            if len(rest) < max_bytes and all(b & 0x80 for b in rest):
                raise Truncated("unexpected end of data while reading varint", field=field)
            raise DecodeError(str(e), field=field)
        self.stream.seek(start + size)
        return value

    def string(self, field: str = None, max_length: int = 255) -> str:
        length = self.varint(field)
        if length > max_length * 4:
            raise DecodeError(f"string length {length} exceeds {max_length}", field=field)
        raw = self.take(length, field)
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingError(f"invalid utf-8: {e.reason}", field=field)
        if len(text) > max_length:
            raise DecodeError(f"string length {len(text)} exceeds {max_length}", field=field)
        return text

    def byte_array(self, field: str = None) -> bytes:
        """VarInt length followed by exactly that many bytes."""
        return self.take(self.varint(field), field)

    def byte(self, field: str = None) -> int:
        return unpack('>b', self.take(1, field))[0]

    def ubyte(self, field: str = None) -> int:
        return self.take(1, field)[0]

    def bool(self, field: str = None) -> bool:
        return self.take(1, field) == b'\x01'

    def short(self, field: str = None) -> int:
        """Decodes a 2-byte signed short integer from big-endian bytes."""
        return unpack('>h', self.take(2, field))[0]

    def ushort(self, field: str = None) -> int:
        return unpack('>H', self.take(2, field))[0]

    def int(self, field: str = None) -> int:
        return unpack('>i', self.take(4, field))[0]

    def long(self, field: str = None) -> int:
        return unpack('>q', self.take(8, field))[0]

    def float(self, field: str = None) -> float:
        return unpack('>f', self.take(4, field))[0]

    def double(self, field: str = None) -> float:
        return unpack('>d', self.take(8, field))[0]

    def uuid(self, field: str = None) -> uuid.UUID:
        return uuid.UUID(bytes=self.take(16, field))

    def rest(self) -> bytes:
        return self.stream.read()
