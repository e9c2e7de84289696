"""
Tests for backend registration helpers
"""

from unittest.mock import MagicMock

from backends import prioritize_backends, register_write_support


class Backend:
    def __init__(self, name, ldap=False):
        self.name = name
        self.ldap = ldap


def test_ldap_backends_come_first():
    database = Backend('database')
    ldap_a = Backend('ldap-a', ldap=True)
    dummy = Backend('dummy')
    ldap_b = Backend('ldap-b', ldap=True)
    backends = [database, ldap_a, dummy, ldap_b]

    ordered = prioritize_backends(backends, lambda b: b.ldap)

    assert ordered == [ldap_a, ldap_b, database, dummy]
    assert backends == [database, ldap_a, dummy, ldap_b]


def test_register_when_ready():
    plugin_manager = MagicMock()
    plugin = object()

    assert register_write_support(plugin_manager, True, plugin)
    plugin_manager.register.assert_called_once_with(plugin)


def test_not_registered_before_backend_is_ready():
    plugin_manager = MagicMock()

    assert not register_write_support(plugin_manager, False, object())
    plugin_manager.register.assert_not_called()
