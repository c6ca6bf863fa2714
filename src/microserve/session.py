"""
=============================================================================
SESSIONS
=============================================================================

Server-side, per-client key/value state.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        SESSION LIFECYCLE                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1st request (no cookie)                                            │
    │       store.create() → 0                                             │
    │       handler mutates session 0                                      │
    │       response: Set-Cookie: session_id=0; HttpOnly                   │
    │                                                                      │
    │   2nd request (Cookie: session_id=0)                                 │
    │       store.contains(0) → True, reuse                                │
    │       handler sees what it stored last time                          │
    │                                                                      │
    │   request with an id never issued (Cookie: session_id=99)            │
    │       store.contains(99) → False                                     │
    │       store.create() → 1   (fresh session, new cookie)               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Ids start at 0 and only ever go up. An id is never handed out twice and
sessions are never expired or evicted: they live as long as the process.

Values are stored as-is and read back by type:

    session.set("age", 30)
    session.get("age", int)   → 30
    session.get("age", str)   → None   (wrong type reads as "not there")

No locking: the server dispatches one connection at a time, so only one
handler can touch the store at any moment.
=============================================================================
"""

from typing import Any, Dict, Iterator, Optional, Type, TypeVar


T = TypeVar("T")


class SessionLookupError(KeyError):
    """
    Raised by SessionStore.get() for an id that was never issued.

    This is a programming error, not a client error: the dispatcher always
    checks contains() before fetching, so it never escapes to a client.
    """


class Session:
    """
    A single client's key/value store.

    Keys are strings; values can be anything. A read names the type it
    expects and gets None back on a mismatch, so a handler never receives
    a value of a type it did not ask for.
    """

    def __init__(self):
        self._data: Dict[str, Any] = {}

    def set(self, key: str, value: Any) -> None:
        """Store a value, replacing whatever was under `key` before."""
        self._data[key] = value

    def get(self, key: str, expected_type: Type[T]) -> Optional[T]:
        """
        Read a value of a given type.

        The stored value's type must be exactly `expected_type`; subclasses
        do not count, so a stored True is not returned for int.

        Returns:
            The value, or None when the key is missing or holds another type.
        """
        value = self._data.get(key)
        if value is None or type(value) is not expected_type:
            return None
        return value

    def remove(self, key: str) -> None:
        """Delete a key if present."""
        self._data.pop(key, None)

    def keys(self) -> Iterator[str]:
        return iter(list(self._data))

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Session(keys={sorted(self._data)!r})"


class SessionStore:
    """
    All sessions of the process, keyed by integer id.

    Usage:
        store = SessionStore()
        sid = store.create()          # 0
        store.get(sid).set("user", "alice")

        store.contains(sid)           # True
        store.contains(42)            # False
        store.get(42)                 # raises SessionLookupError
    """

    def __init__(self):
        self._sessions: Dict[int, Session] = {}
        self._counter = 0

    @property
    def next_id(self) -> int:
        """The id the next create() call will return."""
        return self._counter

    def create(self) -> int:
        """Create an empty session under the next id and return the id."""
        session_id = self._counter
        self._sessions[session_id] = Session()
        self._counter += 1
        return session_id

    def contains(self, session_id: int) -> bool:
        return session_id in self._sessions

    def get(self, session_id: int) -> Session:
        """
        Fetch a session for mutation.

        Raises:
            SessionLookupError: If `session_id` was never issued.
        """
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionLookupError(session_id) from None

    def resolve(self, session_id: Optional[int]) -> int:
        """
        Return `session_id` if it was issued, otherwise a fresh id.

        This is the dispatcher's session step: a client presenting a known
        id keeps it; a client with no id or an unknown one gets a new one.
        """
        if session_id is not None and self.contains(session_id):
            return session_id
        return self.create()

    def __len__(self) -> int:
        return len(self._sessions)
