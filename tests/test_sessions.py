import pytest

from stranger_talk.sessions import SessionConflictError, SessionTable


def test_open_installs_both_directions() -> None:
    table = SessionTable()
    session_id = table.open(1, 2)
    assert table.peer_of(1) == 2
    assert table.peer_of(2) == 1
    assert table.session_id_of(1) == table.session_id_of(2) == session_id
    assert len(table) == 1
    assert list(table.pairs()) == [(1, 2)]


def test_close_removes_both_directions() -> None:
    table = SessionTable()
    table.open(1, 2)
    assert table.close(1) == 2
    assert table.peer_of(1) is None
    assert table.peer_of(2) is None
    assert len(table) == 0


def test_second_close_is_a_noop() -> None:
    table = SessionTable()
    table.open(1, 2)
    assert table.close(2) == 1
    assert table.close(1) is None
    assert table.participants() == set()


def test_close_without_session_returns_none() -> None:
    assert SessionTable().close(42) is None


def test_open_rejects_existing_participant() -> None:
    table = SessionTable()
    table.open(1, 2)
    with pytest.raises(SessionConflictError):
        table.open(2, 3)
    assert table.peer_of(2) == 1
    assert 3 not in table


def test_open_rejects_self_pairing() -> None:
    with pytest.raises(SessionConflictError):
        SessionTable().open(1, 1)


def test_session_ids_are_unique() -> None:
    table = SessionTable()
    first = table.open(1, 2)
    table.close(1)
    second = table.open(1, 2)
    assert second != first
