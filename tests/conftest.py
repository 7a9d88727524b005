import asyncio
import pytest
from mctap.logger import Logger
from mctap.vars import Var

def frame(payload: bytes) -> bytes:
    return Var.write_varint(len(payload)) + payload

class FakeWriter:
    """Stands in for asyncio.StreamWriter and records what was written."""
    def __init__(self, fail_with: BaseException = None):
        self.data = bytearray()
        self.closed = False
        self.fail_with = fail_with

    def write(self, data: bytes):
        if self.fail_with is not None:
            raise self.fail_with
        self.data += data

    async def drain(self):
        pass

    def close(self):
        self.closed = True

    def is_closing(self):
        return self.closed

    async def wait_closed(self):
        pass

    def get_extra_info(self, name, default=None):
        return ("127.0.0.1", 50000) if name == "peername" else default

def reader_with(*chunks: bytes) -> asyncio.StreamReader:
    reader = asyncio.StreamReader()
    for chunk in chunks:
        reader.feed_data(chunk)
    reader.feed_eof()
    return reader

@pytest.fixture
def lines():
    return []

@pytest.fixture
def logger(lines):
    log = Logger(thread_name="test", output_levels=("ALL",), log_to_file=False)
    log.set_printer(lines.append)
    return log
