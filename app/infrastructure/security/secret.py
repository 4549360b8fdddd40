"""Redacted secret container.

Wraps a raw credential so it never shows up in logs, tracebacks, debug
output or serialized snapshots. The value is held in a mutable buffer that
is overwritten with zeros when the secret goes out of scope.

Usage:
    from infrastructure.security import Secret

    with Secret(os.environ["OPENAI_API_KEY"]) as key:
        logger.info("key_loaded", length=len(key))  # safe
        client.put(..., json={"key": key.reveal()})  # transmission boundary only
    # buffer is zeroed here, on every exit path
"""

import hmac
from typing import Any, Optional

REDACTION_MARKER = "[REDACTED]"


class SecretSerializationError(TypeError):
    """Raised when something tries to serialize a Secret.

    Secrets must be revealed explicitly at the transmission boundary,
    never through pickling or generic serialization.
    """

    pass


class Secret:
    """A credential value that is only reachable through ``reveal()``.

    Attributes exposed without revealing the value:
        len(secret): length in characters
        bool(secret): whether the secret is non-empty and not wiped
        wiped: whether the buffer has been zeroed
    """

    __slots__ = ("_buffer", "_length", "_wiped", "__weakref__")

    def __init__(self, value: str):
        if not isinstance(value, str):
            raise TypeError("Secret value must be a str")
        self._buffer = bytearray(value.encode("utf-8"))
        self._length = len(value)
        self._wiped = False

    def reveal(self) -> str:
        """Return the raw value.

        Only call this where the credential is actually transmitted.

        Raises:
            ValueError: If the secret has already been wiped.
        """
        if self._wiped:
            raise ValueError("Secret has been wiped")
        return self._buffer.decode("utf-8")

    def clone(self) -> "Secret":
        """Explicitly copy the secret into a new, independent container."""
        return Secret(self.reveal())

    def wipe(self) -> None:
        """Overwrite the underlying buffer with zeros. Idempotent."""
        buffer = getattr(self, "_buffer", None)
        if buffer is None:
            return
        for index in range(len(buffer)):
            buffer[index] = 0
        self._wiped = True

    @property
    def wiped(self) -> bool:
        return self._wiped

    def __len__(self) -> int:
        return self._length

    def __bool__(self) -> bool:
        return self._length > 0 and not self._wiped

    def __repr__(self) -> str:
        return f"Secret({REDACTION_MARKER})"

    def __str__(self) -> str:
        return REDACTION_MARKER

    def __format__(self, format_spec: str) -> str:
        return format(str(self), format_spec)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Secret):
            return NotImplemented
        return hmac.compare_digest(bytes(self._buffer), bytes(other._buffer))

    __hash__ = None  # type: ignore[assignment]

    def __enter__(self) -> "Secret":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.wipe()

    def __del__(self) -> None:
        self.wipe()

    # Serialization guards

    def __reduce_ex__(self, protocol: Any) -> Any:
        raise SecretSerializationError(
            "Secret cannot be serialized - call reveal() explicitly at the transmission boundary"
        )

    def __getstate__(self) -> Any:
        raise SecretSerializationError(
            "Secret cannot be serialized - call reveal() explicitly at the transmission boundary"
        )

    def __copy__(self) -> "Secret":
        raise TypeError("Secret cannot be copied implicitly - use clone()")

    def __deepcopy__(self, memo: Optional[dict] = None) -> "Secret":
        raise TypeError("Secret cannot be copied implicitly - use clone()")
