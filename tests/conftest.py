"""
Help system test configuration and fixtures.
"""
import os
from datetime import date

# Set testing environment before help_system.config is imported
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ.pop('GROUP_CODEC_KEY', None)

import pytest

from help_system.core.database import Store
from help_system.schemas.common import Role
from help_system.utils.codec import AesCodec
from help_system.utils.help_service import HelpService

TODAY = date(2026, 3, 2)
PASSWORD = 'pw'


@pytest.fixture
def store():
    """Fresh in-memory store for each test."""
    store = Store('sqlite://').init()
    yield store
    store.teardown()


@pytest.fixture
def db(store):
    with store.session() as session:
        yield session


@pytest.fixture
def codec():
    return AesCodec(bytes(range(32)))


@pytest.fixture
def service(db):
    """HelpService without a codec; group bodies are stored as given."""
    return HelpService(db)


@pytest.fixture
def secure_service(db, codec):
    return HelpService(db, codec=codec)


def make_user(service: HelpService, admin, username: str, role: Role):
    """Register a user through an invitation issued by admin."""
    invitation = service.create_invitation(admin, role)
    return service.redeem_invitation(invitation.code, username, PASSWORD)


@pytest.fixture
def admin(service):
    return service.register_first_admin('root', PASSWORD)


@pytest.fixture
def instructor(service, admin):
    return make_user(service, admin, 'ira', Role.INSTRUCTOR)


@pytest.fixture
def student(service, admin):
    return make_user(service, admin, 'stu', Role.STUDENT)
