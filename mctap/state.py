from enum import IntEnum
import threading

class State(IntEnum):
    STATUS = 1
    LOGIN = 2
    PLAY = 3
    UNKNOWN = 100

    @classmethod
    def from_raw(cls, value: int) -> "State":
        if value in (1, 2, 3):
            return cls(value)
        return cls.UNKNOWN

class ConnectionState:
    """
    Session phase shared by both directions of one proxied connection.\n
    Only moves forward: STATUS -> LOGIN -> PLAY, with UNKNOWN as a terminal
    sink. Also holds the compression threshold and the encryption flag, which
    the server announces once for both directions.
    """
    def __init__(self, state: State = State.STATUS):
        self._lock = threading.Lock()
        self._state = state
        self._compression = -1
        self._encrypted = False

    @property
    def state(self) -> State:
        with self._lock:
            return self._state

    @property
    def compression(self) -> int:
        with self._lock:
            return self._compression

    @property
    def encrypted(self) -> bool:
        with self._lock:
            return self._encrypted

    def snapshot(self) -> tuple[State, int, bool]:
        with self._lock:
            return self._state, self._compression, self._encrypted

    def advance(self, target: State) -> bool:
        """Returns True only if this call changed the state."""
        with self._lock:
            if target <= self._state:
                return False
            self._state = target
            return True

    def observe_compression(self, threshold: int) -> bool:
        with self._lock:
            if self._compression == threshold:
                return False
            self._compression = threshold
            return True

    def observe_encryption(self) -> bool:
        with self._lock:
            if self._encrypted:
                return False
            self._encrypted = True
            return True

    def __repr__(self):
        state, compression, encrypted = self.snapshot()
        return f"ConnectionState({state.name}, compression={compression}, encrypted={encrypted})"
