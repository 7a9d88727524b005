from mctap.errors import Malformed
from mctap.vars import Var

MAX_FRAME_SIZE = 2097155  # 2 MiB payload + 3 byte length prefix

def tokenize(buffer: bytes) -> list[bytes]:
    """
    Splits one read() worth of bytes into frame payloads.\n
    A trailing frame that is shorter than its declared length is returned
    as-is (partial). Zero-length frames are dropped.
    """
    frames = []
    offset = 0
    while offset < len(buffer):
        size, delta = Var.read_varint_from_bytes(buffer, offset)
        offset += delta
        if size < 0:
            raise Malformed(f"Negative frame length: {size}")

        frame = buffer[offset:offset + size]
        offset += size
        if frame:
            frames.append(frame)
    return frames

class FrameBuffer:
    """Tokenizer that keeps unconsumed bytes between reads of one direction."""
    def __init__(self, max_frame_size: int = MAX_FRAME_SIZE):
        self.max_frame_size = max_frame_size
        self._buffer = bytearray()

    def __len__(self):
        return len(self._buffer)

    def clear(self):
        self._buffer.clear()

    def feed(self, chunk: bytes) -> list[bytes]:
        self._buffer += chunk
        frames = []
        offset = 0
        try:
            while offset < len(self._buffer):
                try:
                    size, delta = Var.read_varint_from_bytes(self._buffer, offset)
                except Malformed:
                    # Length prefix split across reads
                    if len(self._buffer) - offset < 5 and all(b & 0x80 for b in self._buffer[offset:]):
                        break
                    raise

                if size < 0 or size > self.max_frame_size:
                    raise Malformed(f"Frame length out of bounds: {size}")
                if offset + delta + size > len(self._buffer):
                    break

                offset += delta
                if size:
                    frames.append(bytes(self._buffer[offset:offset + size]))
                offset += size
        except Malformed:
            self._buffer.clear()
            raise

        del self._buffer[:offset]
        return frames
