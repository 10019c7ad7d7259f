import pytest

from app.domain.common.errors import InvalidInput
from app.domain.common.validation import (
    alive_ids,
    clean_description,
    clean_name,
    clean_session,
    find_by_session,
    is_host,
)
from app.store.models import PlayerStore, RoomStore


def _room():
    return RoomStore(id="r1", code="ABCDEF", host_session_id="host-sess", created_at=0, last_activity=0)


def _player(pid, alive=True):
    return PlayerStore(id=pid, room_id="r1", name=pid.upper(), session_id=f"s-{pid}", is_alive=alive, joined_at=0)


def test_is_host():
    room = _room()
    assert is_host("host-sess", room) is True
    assert is_host("other", room) is False
    assert is_host("", room) is False
    assert is_host(None, room) is False


def test_alive_helpers():
    players = [_player("a"), _player("b", alive=False), _player("c")]
    assert alive_ids(players) == ["a", "c"]


def test_find_by_session():
    players = [_player("a"), _player("b")]
    assert find_by_session(players, "s-b").id == "b"
    assert find_by_session(players, "nope") is None


def test_clean_inputs():
    assert clean_name("  Alice ") == "Alice"
    assert clean_session(" abc ") == "abc"
    assert clean_description(" warm drink ") == "warm drink"

    with pytest.raises(InvalidInput):
        clean_name("   ")
    with pytest.raises(InvalidInput):
        clean_name("x" * 25)
    with pytest.raises(InvalidInput):
        clean_session("")
    with pytest.raises(InvalidInput):
        clean_description("")
