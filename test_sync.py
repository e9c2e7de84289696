"""
Tests for the group admin sync command
"""

import io
from unittest.mock import MagicMock, patch

import ldap
import pytest

from config import Configuration
import sync


def directory_groups():
    return [
        ('cn=engineering,ou=groups,dc=example,dc=com', {
            'cn': [b'engineering'],
            'owner': [b'uid=bob,ou=users,dc=example,dc=com', b'uid=carol,ou=users,dc=example,dc=com'],
        }),
        ('cn=sales,ou=groups,dc=example,dc=com', {'cn': [b'sales']}),
    ]


@pytest.fixture
def roster():
    with patch('sync.RosterAdapter') as roster_class:
        adapter = roster_class.return_value
        adapter.membership_map.return_value = {
            'engineering': {'alice', 'bob'},
            'sales': {'dave'},
        }
        yield roster_class


@pytest.fixture
def directory(conn, identity):
    conn.search_s.return_value = directory_groups()

    def connect(self):
        self.ldap_conn = conn
        return conn

    with patch.object(sync.LDAPConnect, 'connect', connect), \
            patch('sync.IdentityMapper', return_value=identity):
        yield conn


def test_sync_applies_changes(config, conn, roster, directory):
    output = io.StringIO()
    assert sync.sync_group_admins(output=output, config=config) == 0

    calls = [c.args for c in conn.modify_s.call_args_list]
    assert calls == [
        ('cn=engineering,ou=groups,dc=example,dc=com',
         [(ldap.MOD_ADD, 'owner', [b'uid=alice,ou=users,dc=example,dc=com'])]),
        ('cn=sales,ou=groups,dc=example,dc=com',
         [(ldap.MOD_ADD, 'owner', [b'uid=dave,ou=users,dc=example,dc=com'])]),
        ('cn=engineering,ou=groups,dc=example,dc=com',
         [(ldap.MOD_DELETE, 'owner', [b'uid=carol,ou=users,dc=example,dc=com'])]),
    ]
    assert output.getvalue().strip() == "Done: 2 added, 1 removed, 0 failed"
    roster.return_value.close.assert_called_once_with()
    conn.unbind_s.assert_called_once_with()


def test_simulate_changes_nothing(config, conn, roster, directory):
    output = io.StringIO()
    assert sync.sync_group_admins(simulate=True, verbose=True, output=output, config=config) == 0

    conn.modify_s.assert_not_called()
    lines = output.getvalue().splitlines()
    assert lines[0] == "SIMULATE MODE ON"
    assert [line.split(':', 1)[0] for line in lines[1:4]] == ["ADD", "ADD", "DEL"]


def test_dry_run_from_environment(env, conn, roster, directory):
    env['SYNC_DRY_RUN'] = 'true'
    assert sync.sync_group_admins(output=io.StringIO(), config=Configuration(env)) == 0
    conn.modify_s.assert_not_called()


def test_nothing_to_do(config, conn, roster, directory):
    roster.return_value.membership_map.return_value = {'engineering': {'bob', 'carol'}}
    output = io.StringIO()

    assert sync.sync_group_admins(output=output, config=config) == 0
    conn.modify_s.assert_not_called()
    assert "0 added, 0 removed" in output.getvalue()


def test_several_ldap_sources_abort_before_fetching(env, roster, directory, conn):
    env['LDAP_SERVER'] = 'ldap://one.example.com ldap://two.example.com'
    output = io.StringIO()

    assert sync.sync_group_admins(output=output, config=Configuration(env)) == 1

    roster.assert_not_called()
    conn.search_s.assert_not_called()
    conn.modify_s.assert_not_called()
    lines = output.getvalue().splitlines()
    assert len(lines) == 1
    assert "more than 1 LDAP source" in lines[0]

def test_owner_without_user_entry_is_removed(config, conn, identity, roster, directory):
    identity.unknown_users.add('carol')
    output = io.StringIO()

    assert sync.sync_group_admins(output=output, config=config) == 0
    assert conn.modify_s.call_args_list[-1].args == (
        'cn=engineering,ou=groups,dc=example,dc=com',
        [(ldap.MOD_DELETE, 'owner', [b'uid=carol,ou=users,dc=example,dc=com'])]
    )
    assert output.getvalue().strip() == "Done: 2 added, 1 removed, 0 failed"


def test_simulate_config_error_prints_one_line(env, roster, directory):
    env['LDAP_SERVER'] = 'ldap://one.example.com ldap://two.example.com'
    output = io.StringIO()

    assert sync.sync_group_admins(simulate=True, output=output, config=Configuration(env)) == 1

    lines = output.getvalue().splitlines()
    assert len(lines) == 1
    assert lines[0].startswith("Error:")



def test_unreachable_directory_aborts(config, roster):
    with patch('sync.LDAPConnect.connect', side_effect=ldap.SERVER_DOWN({'desc': "Can't contact LDAP server"})):
        assert sync.sync_group_admins(output=io.StringIO(), config=config) == 1


def test_main_parses_flags():
    with patch('sync.sync_group_admins', return_value=0) as run, patch('sync.load_dotenv'):
        assert sync.main(['--sim', '--verb']) == 0
    run.assert_called_once_with(simulate=True, verbose=True)

    with patch('sync.sync_group_admins', return_value=1) as run, patch('sync.load_dotenv'):
        assert sync.main([]) == 1
    run.assert_called_once_with(simulate=False, verbose=False)
