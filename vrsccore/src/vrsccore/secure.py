"""
Scoped holders for secret material.

Seeds, private scalars and derived encryption keys live in a SecretBuffer,
a mutable bytearray that is overwritten with zeros when the owning ``with``
block exits. Python may still hold transient ``bytes`` copies made while
calling into C libraries; the buffer bounds the lifetime of the copy we own.
"""

from __future__ import annotations

from types import TracebackType

from vrsccore.errors import InvariantError


class SecretBuffer:
    """Mutable secret bytes, zeroed on wipe() or scope exit."""

    __slots__ = ("_buf", "_wiped")

    def __init__(self, data: bytes | bytearray):
        self._buf = bytearray(data)
        self._wiped = False

    def __enter__(self) -> SecretBuffer:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.wipe()

    def __len__(self) -> int:
        return len(self._buf)

    def __repr__(self) -> str:
        state = "wiped" if self._wiped else f"{len(self._buf)} bytes"
        return f"SecretBuffer(<{state}>)"

    def __del__(self) -> None:
        if hasattr(self, "_buf"):
            self.wipe()

    @property
    def wiped(self) -> bool:
        return self._wiped

    def reveal(self) -> bytes:
        """Return an immutable copy of the secret for a library call."""
        if self._wiped:
            raise InvariantError("Secret buffer used after it was wiped")
        return bytes(self._buf)

    def wipe(self) -> None:
        for i in range(len(self._buf)):
            self._buf[i] = 0
        self._wiped = True
