"""
Tests for vrsccore.secure
"""

import pytest

from vrsccore.errors import InvariantError
from vrsccore.secure import SecretBuffer


def test_reveal_returns_copy():
    buf = SecretBuffer(b"\x01\x02\x03")
    assert buf.reveal() == b"\x01\x02\x03"
    assert len(buf) == 3
    assert not buf.wiped


def test_context_manager_wipes():
    with SecretBuffer(b"secret") as buf:
        assert buf.reveal() == b"secret"

    assert buf.wiped
    assert bytes(buf._buf) == bytes(6)
    with pytest.raises(InvariantError):
        buf.reveal()


def test_wipes_on_exception():
    with pytest.raises(RuntimeError):
        with SecretBuffer(b"secret") as buf:
            raise RuntimeError("boom")
    assert buf.wiped


def test_repr_hides_contents():
    buf = SecretBuffer(b"topsecret")
    assert "topsecret" not in repr(buf)
    assert "9 bytes" in repr(buf)
    buf.wipe()
    assert "wiped" in repr(buf)
