from mctap.errors import DecodeError, Malformed
from mctap.vars import Var
import dns.resolver
import dns.exception
import psutil
import zlib
import os

class Tool:
    @staticmethod
    def resolve_minecraft_srv(domain: str, port: int = None) -> tuple[str, int]:
        """
        Returns host with port, following the _minecraft._tcp SRV record when
        no explicit port is given.\n
        Example:
        ```python
        host, port = Tool.resolve_minecraft_srv("mc.hypixel.net")
        print(f"Hypixel resolved to: {host}:{port}")
        """
        if port is not None:
            return domain, port
        try:
            answers = dns.resolver.resolve(f"_minecraft._tcp.{domain}", "SRV")
            for rdata in answers:
                return str(rdata.target).rstrip('.'), rdata.port
        except dns.exception.DNSException:
            pass
        return domain, 25565

    @staticmethod
    def ping_minecraft_server(host: str, port: int) -> dict:
        from mcstatus import JavaServer
        try:
            status = JavaServer(host, port).status()
            return {
                "version": status.version.name,
                "protocol": status.version.protocol,
                "players_online": status.players.online,
                "players_max": status.players.max,
                "latency": status.latency
            }
        except Exception as e:
            return {"error": f"Failed to ping server: {e}"}

    @staticmethod
    def memory_usage() -> float:
        process = psutil.Process(os.getpid())
        return process.memory_info().rss / 1024 / 1024

    @staticmethod
    def decompress_packet(frame: bytes, max_size: int = 8388608) -> bytes:
        """
        Unwraps a frame sent after Set Compression: VarInt data length, then
        zlib data (or the plain payload when the data length is 0).
        """
        try:
            data_length, offset = Var.read_varint_from_bytes(frame)
        except Malformed as e:
            raise DecodeError(str(e), field="data_length")

        if data_length == 0:
            return frame[offset:]
        if data_length < 0 or data_length > max_size:
            raise DecodeError(f"bad uncompressed length {data_length}", field="data_length")

        try:
            data = zlib.decompress(frame[offset:])
        except zlib.error as e:
            raise DecodeError(f"zlib: {e}", field="data")
        if len(data) != data_length:
            raise DecodeError(f"inflated to {len(data)} bytes, expected {data_length}", field="data")
        return data

    @staticmethod
    def compress_packet(payload: bytes, threshold: int) -> bytes:
        """Inverse of decompress_packet, without the outer length prefix."""
        if threshold < 0:
            return payload
        if len(payload) < threshold:
            return Var.write_varint(0) + payload
        return Var.write_varint(len(payload)) + zlib.compress(payload)
