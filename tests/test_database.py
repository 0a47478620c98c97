"""
Tests for the Store lifecycle and backend error mapping.
"""
import pytest

from help_system.core.database import Store, commit
from help_system.core.exceptions import BackendUnavailableError, DuplicateKeyError
from help_system.models.group_member import GroupMemberModel


def test_uninitialized_store_is_unavailable():
    store = Store('sqlite://')

    assert store.is_initialized is False
    with pytest.raises(BackendUnavailableError):
        store.new_session()


def test_teardown_makes_store_unavailable():
    store = Store('sqlite://').init()
    store.teardown()

    with pytest.raises(BackendUnavailableError):
        with store.session():
            pass


def test_init_is_idempotent(store):
    assert store.init() is store


def test_file_database_is_created(tmp_path):
    path = tmp_path / 'nested' / 'help.db'
    store = Store(f'sqlite:///{path}').init()
    try:
        assert path.exists()
    finally:
        store.teardown()


def test_unique_violation_maps_to_duplicate_key(db):
    for _ in range(2):
        db.add(GroupMemberModel(username='u', group_name='G', role='student'))
    with pytest.raises(DuplicateKeyError) as exc_info:
        commit(db)
    assert exc_info.value.kind == 'duplicate_key'
