"""
Shared fixtures for the unit tests
"""

from unittest.mock import MagicMock

import pytest

from config import Configuration
from errors import ResolutionError


BASE_ENV = {
    'LDAP_SERVER': 'ldap://ldap.example.com',
    'LDAP_BIND_DN': 'cn=admin,dc=example,dc=com',
    'LDAP_BIND_PASSWORD': 'secret',
    'LDAP_USER_BASE_DN': 'ou=users,dc=example,dc=com',
    'LDAP_GROUP_BASE_DN': 'ou=groups,dc=example,dc=com',
    'OPENFGA_API_URL': 'http://openfga.example.com:8080',
    'OPENFGA_STORE_ID': '01HSTORE',
}


class StubIdentity:
    """DN layout uid=<uid>,ou=users / cn=<gid>,ou=groups, no directory needed."""

    def __init__(self):
        self.unknown_users = set()
        self.unknown_groups = set()

    def user_dn(self, uid):
        if uid in self.unknown_users:
            raise ResolutionError(f"No LDAP entry found for user {uid}")
        return f"uid={uid},ou=users,dc=example,dc=com"

    def group_dn(self, gid):
        if gid in self.unknown_groups:
            raise ResolutionError(f"No LDAP entry found for group {gid}")
        return f"cn={gid},ou=groups,dc=example,dc=com"

    def user_id(self, dn):
        rdn = dn.split(',', 1)[0]
        if not rdn.startswith('uid='):
            raise ResolutionError(f"Entry {dn} has no uid attribute")
        return rdn[len('uid='):]


@pytest.fixture
def env():
    return dict(BASE_ENV)


@pytest.fixture
def config(env):
    return Configuration(env)


@pytest.fixture
def identity():
    return StubIdentity()


@pytest.fixture
def conn():
    """Stand-in for a bound python-ldap connection."""
    return MagicMock(name="LDAPObject")


@pytest.fixture
def ldap_connect(config, conn):
    connect = MagicMock(name="LDAPConnect")
    connect.config = config
    connect.ldap_conn = conn
    connect.groups_enabled.return_value = True
    connect.has_password_policy.return_value = False
    connect.has_passwd_exop_support.return_value = False
    return connect
