class ProtocolError(Exception):
    def __init__(self, message=""):
        super().__init__(message)

class Malformed(ProtocolError):
    """Framing is broken: bad VarInt, truncated length prefix, impossible length."""

class DecodeError(ProtocolError):
    """A single frame could not be decoded. Never fatal to the connection."""
    def __init__(self, message="", packet=None, field=None):
        super().__init__(message)
        self.packet = packet
        self.field = field

    def __str__(self):
        where = ".".join(part for part in (self.packet, self.field) if part)
        message = super().__str__()
        return f"{where}: {message}" if where else message

class Truncated(DecodeError):
    pass

class EncodingError(DecodeError):
    pass

class InvalidState(DecodeError):
    def __init__(self, value, packet=None, field="next_state"):
        super().__init__(f"invalid state value {value}", packet, field)
        self.value = value

class ForwardingError(Exception):
    """I/O failure on one direction of a session."""
    def __init__(self, direction, cause: BaseException):
        super().__init__(f"{direction.tag}: {type(cause).__name__}: {cause}")
        self.direction = direction
        self.cause = cause
