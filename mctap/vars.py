from typing import Tuple
from mctap.errors import Malformed

class Var:
    @staticmethod
    def _read(data: bytes, offset: int, max_bytes: int, bits: int) -> Tuple[int, int]:
        num = 0
        for i in range(max_bytes):
            if offset + i >= len(data):
                raise Malformed(f"Not enough data for VarInt ({i} bytes read)")
            byte = data[offset + i]
            num |= (byte & 0x7F) << (7 * i)
            if not (byte & 0x80):
                num &= (1 << bits) - 1
                if num >= 1 << (bits - 1):
                    num -= 1 << bits
                return num, i + 1
        raise Malformed(f"VarInt too big (more than {max_bytes} bytes)")

    @staticmethod
    def read_varint_from_bytes(data: bytes, offset: int = 0) -> Tuple[int, int]:
        """Reads a VarInt from bytes and returns (value, bytes_consumed)"""
        return Var._read(data, offset, 5, 32)

    @staticmethod
    def read_varlong_from_bytes(data: bytes, offset: int = 0) -> Tuple[int, int]:
        """Reads a VarLong from bytes and returns (value, bytes_consumed)"""
        return Var._read(data, offset, 10, 64)

    @staticmethod
    def _write(value: int, bits: int) -> bytes:
        value &= (1 << bits) - 1
        out = bytearray()
        while True:
            byte = value & 0x7F
            value >>= 7
            if value != 0:
                byte |= 0x80
            out.append(byte)
            if value == 0:
                break
        return bytes(out)

    @staticmethod
    def write_varint(value: int) -> bytes:
        """Encodes an integer as a Minecraft VarInt."""
        if not -(1 << 31) <= value < 1 << 31:
            raise ValueError(f"{value} does not fit in a VarInt")
        return Var._write(value, 32)

    @staticmethod
    def write_varlong(value: int) -> bytes:
        if not -(1 << 63) <= value < 1 << 63:
            raise ValueError(f"{value} does not fit in a VarLong")
        return Var._write(value, 64)

    @staticmethod
    def varint_size(value: int) -> int:
        return len(Var.write_varint(value))

    @staticmethod
    def write_string(s: str) -> bytes:
        encoded = s.encode('utf-8')
        return Var.write_varint(len(encoded)) + encoded
