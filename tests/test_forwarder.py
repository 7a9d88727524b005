import asyncio
import os
import uuid
import pytest
from conftest import FakeWriter, frame, reader_with
from mctap.errors import ForwardingError
from mctap.packet import Unrecognized
from mctap.packet.build import Build
from mctap.packet.clientbound import ChunkData
from mctap.proxy.forwarder import Direction, Forwarder
from mctap.state import ConnectionState, State
from mctap.tools import Tool

HANDSHAKE = Build(0x00).varint(760).string("localhost").ushort(25565).varint(2).frame()
LOGIN_START = Build(0x00).string("Steve").bool(False).bool(False).frame()
LOGIN_SUCCESS = Build(0x02).uuid(uuid.uuid4()).string("Steve").varint(0).frame()
POSITION = Build(0x14).double(1.0).double(2.0).double(3.0).bool(True).frame()

def make(direction, logger, state=None, reader=None, writer=None, **kwargs):
    return Forwarder(direction, reader, writer or FakeWriter(), state or ConnectionState(), logger, **kwargs)

#------------------------------ relaying ------------------------------

@pytest.mark.asyncio
async def test_relays_bytes_unmodified(logger):
    data = HANDSHAKE + b'\xff\xff\xff\xff\xff\xff' + os.urandom(512) + LOGIN_START
    writer = FakeWriter()
    forwarder = make(Direction.CLIENT_TO_SERVER, logger, reader=reader_with(data), writer=writer, buffer_size=64)

    assert await forwarder.run() == "end of stream"
    assert bytes(writer.data) == data
    assert forwarder.bytes == len(data)

@pytest.mark.asyncio
async def test_relays_even_when_every_frame_fails(logger):
    # Truncated handshakes, one per chunk
    data = b''.join(frame(b'\x00\x05') for _ in range(20))
    writer = FakeWriter()
    forwarder = make(Direction.CLIENT_TO_SERVER, logger, reader=reader_with(data), writer=writer, carry_over=False)

    await forwarder.run()
    assert bytes(writer.data) == data
    assert forwarder.errors > 0

@pytest.mark.asyncio
async def test_read_error_is_forwarding_error(logger):
    class BrokenReader:
        async def read(self, n):
            raise ConnectionResetError("reset by peer")

    forwarder = make(Direction.SERVER_TO_CLIENT, logger, reader=BrokenReader())
    with pytest.raises(ForwardingError) as error:
        await forwarder.run()
    assert error.value.direction is Direction.SERVER_TO_CLIENT
    assert isinstance(error.value.cause, ConnectionResetError)
    assert "S2C" in str(error.value)

@pytest.mark.asyncio
async def test_write_error_is_forwarding_error(logger):
    writer = FakeWriter(fail_with=BrokenPipeError("broken pipe"))
    forwarder = make(Direction.CLIENT_TO_SERVER, logger, reader=reader_with(HANDSHAKE), writer=writer)

    with pytest.raises(ForwardingError) as error:
        await forwarder.run()
    assert isinstance(error.value.cause, BrokenPipeError)

@pytest.mark.asyncio
async def test_read_timeout(logger):
    forwarder = make(Direction.CLIENT_TO_SERVER, logger, reader=asyncio.StreamReader(), read_timeout=0.05)

    with pytest.raises(ForwardingError) as error:
        await forwarder.run()
    assert isinstance(error.value.cause, asyncio.TimeoutError)

#------------------------------ tapping ------------------------------

def test_handshake_and_login_success_drive_shared_state(logger):
    state = ConnectionState()
    c2s = make(Direction.CLIENT_TO_SERVER, logger, state)
    s2c = make(Direction.SERVER_TO_CLIENT, logger, state)

    c2s.inspect(HANDSHAKE)
    assert c2s.state.state is State.LOGIN
    assert s2c.state.state is State.LOGIN

    # LoginStart alone does not finish the login
    c2s.inspect(LOGIN_START)
    assert state.state is State.LOGIN

    s2c.inspect(LOGIN_SUCCESS)
    assert c2s.state.state is State.PLAY
    assert s2c.state.state is State.PLAY

    # Replaying the whole sequence never goes backwards
    c2s.inspect(HANDSHAKE)
    s2c.inspect(LOGIN_SUCCESS)
    assert state.state is State.PLAY

def test_status_handshake_stays_in_status(logger):
    state = ConnectionState()
    c2s = make(Direction.CLIENT_TO_SERVER, logger, state)
    c2s.inspect(Build(0x00).varint(760).string("localhost").ushort(25565).varint(1).frame() + frame(b'\x00'))
    assert state.state is State.STATUS
    assert c2s.errors == 0
    assert c2s.frames == 2
    assert c2s.decoded == 2

def test_invalid_next_state_moves_to_unknown(logger, lines):
    state = ConnectionState()
    c2s = make(Direction.CLIENT_TO_SERVER, logger, state)

    c2s.inspect(Build(0x00).varint(760).string("localhost").ushort(25565).varint(5).frame())
    assert state.state is State.UNKNOWN
    assert any("invalid state value 5" in line for line in lines)

    # Later frames are only logged as unrecognized
    assert isinstance(c2s.handle(LOGIN_START[1:]), Unrecognized)

def test_decode_error_is_logged(logger, lines):
    c2s = make(Direction.CLIENT_TO_SERVER, logger)
    c2s.inspect(frame(b'\x00\x05'))

    assert c2s.errors == 1
    assert any("Failed to parse Handshake" in line and "WARN" in line for line in lines)

def test_framing_error_is_logged(logger, lines):
    c2s = make(Direction.CLIENT_TO_SERVER, logger)
    c2s.inspect(b'\xff' * 6)

    assert c2s.errors == 1
    assert any("Framing error" in line for line in lines)

def test_unrecognized_packets_are_not_errors(logger):
    s2c = make(Direction.SERVER_TO_CLIENT, logger)
    s2c.inspect(frame(b'\x7e\x01\x02\x03'))
    assert s2c.errors == 0
    assert s2c.decoded == 0

def test_frames_split_across_reads(logger):
    state = ConnectionState()
    c2s = make(Direction.CLIENT_TO_SERVER, logger, state)

    c2s.inspect(HANDSHAKE[:5])
    assert state.state is State.STATUS
    c2s.inspect(HANDSHAKE[5:])
    assert state.state is State.LOGIN
    assert c2s.errors == 0

def test_without_carry_over_split_frames_fail_to_decode(logger):
    state = ConnectionState()
    c2s = make(Direction.CLIENT_TO_SERVER, logger, state, carry_over=False)

    c2s.inspect(HANDSHAKE[:5])
    assert state.state is State.STATUS
    assert c2s.errors == 1

def test_compressed_frames(logger):
    state = ConnectionState(State.LOGIN)
    s2c = make(Direction.SERVER_TO_CLIENT, logger, state)

    s2c.inspect(Build(0x03).varint(256).frame())
    assert state.compression == 256

    # Below threshold: sent with a zero data length
    s2c.inspect(frame(Tool.compress_packet(LOGIN_SUCCESS[1:], 256)))
    assert state.state is State.PLAY

    # Above threshold: zlib
    chunk = Build(0x21).raw(b'\x00' * 300).get()
    packet = s2c.handle(Tool.compress_packet(chunk, 256))
    assert isinstance(packet, ChunkData)
    assert packet.length == 300

def test_bad_compressed_frame_is_a_decode_error(logger):
    state = ConnectionState(State.PLAY)
    state.observe_compression(256)
    s2c = make(Direction.SERVER_TO_CLIENT, logger, state)

    s2c.inspect(frame(b'\x90\x03' + b'not zlib'))
    assert s2c.errors == 1

def test_encryption_stops_decoding(logger, lines):
    state = ConnectionState(State.LOGIN)
    s2c = make(Direction.SERVER_TO_CLIENT, logger, state)
    c2s = make(Direction.CLIENT_TO_SERVER, logger, state)

    s2c.inspect(Build(0x01).string("").byte_array(b"k" * 162).byte_array(b"tokn").frame())
    assert state.encrypted is True

    c2s.inspect(os.urandom(256))
    s2c.inspect(b'\xff' * 32)
    assert c2s.errors == 0
    assert s2c.errors == 0
    assert any("encrypted" in line for line in lines)

def test_play_packets_are_logged_at_debug(logger, lines):
    state = ConnectionState(State.PLAY)
    c2s = make(Direction.CLIENT_TO_SERVER, logger, state)

    c2s.inspect(POSITION)
    assert c2s.decoded == 1
    assert any("DEBUG" in line and "SetPlayerPosition x:1.00" in line for line in lines)

def test_direction_descriptor():
    assert Direction.CLIENT_TO_SERVER.tag == "C2S"
    assert Direction.SERVER_TO_CLIENT.peer is Direction.CLIENT_TO_SERVER
    assert Direction.CLIENT_TO_SERVER.bound is not Direction.SERVER_TO_CLIENT.bound
