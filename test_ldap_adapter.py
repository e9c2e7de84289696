"""
Tests for loading group owners from LDAP
"""

import ldap
import pytest

from ldap_adapter import DirectoryAdapter


def group(name, owners=None, members=None):
    attrs = {'cn': [name.encode('utf-8')]}
    if owners is not None:
        attrs['owner'] = [f"uid={o},ou=users,dc=example,dc=com".encode('utf-8') for o in owners]
    if members is not None:
        attrs['member'] = [f"uid={m},ou=users,dc=example,dc=com".encode('utf-8') for m in members]
    return (f"cn={name},ou=groups,dc=example,dc=com", attrs)


def test_load_owners(conn, config, identity):
    conn.search_s.return_value = [
        group('engineering', owners=['alice', 'bob'], members=['alice', 'bob', 'carol']),
        group('ops', members=['carol']),
    ]
    adapter = DirectoryAdapter(conn, identity, config=config)
    adapter.load()

    assert adapter.membership_map() == {'engineering': {'alice', 'bob'}}
    conn.search_s.assert_called_once_with(
        'ou=groups,dc=example,dc=com',
        ldap.SCOPE_SUBTREE,
        '(objectClass=groupOfNames)',
        ['cn', 'member', 'owner']
    )


def test_skips_referrals_and_nameless_groups(conn, config, identity):
    conn.search_s.return_value = [
        (None, ['ldap://elsewhere/']),
        ('cn=x,ou=groups,dc=example,dc=com', {'owner': [b'uid=alice,ou=users,dc=example,dc=com']}),
        group('sales', owners=['dave']),
    ]
    adapter = DirectoryAdapter(conn, identity, config=config)
    adapter.load()

    assert adapter.membership_map() == {'sales': {'dave'}}


def test_unresolvable_owner_is_skipped(conn, config, identity):
    conn.search_s.return_value = [
        ('cn=sales,ou=groups,dc=example,dc=com', {
            'cn': [b'sales'],
            'owner': [b'cn=robot,ou=services,dc=example,dc=com', b'uid=dave,ou=users,dc=example,dc=com'],
        }),
    ]
    adapter = DirectoryAdapter(conn, identity, config=config)
    adapter.load()

    assert adapter.membership_map() == {'sales': {'dave'}}


def test_search_failure_propagates(conn, config, identity):
    conn.search_s.side_effect = ldap.SERVER_DOWN({'desc': "Can't contact LDAP server"})
    adapter = DirectoryAdapter(conn, identity, config=config)

    with pytest.raises(ldap.SERVER_DOWN):
        adapter.load()


def test_records_stored_owner_values(conn, config, identity):
    conn.search_s.return_value = [
        ('cn=sales,ou=groups,dc=example,dc=com', {
            'cn': [b'sales'],
            'owner': [b'uid=dave,ou=users,dc=example,dc=com', b'uid=dave,ou=former,dc=example,dc=com'],
        }),
    ]
    adapter = DirectoryAdapter(conn, identity, config=config)
    adapter.load()

    assert adapter.membership_map() == {'sales': {'dave'}}
    assert adapter.owner_dns == {
        ('sales', 'dave'): ['uid=dave,ou=users,dc=example,dc=com', 'uid=dave,ou=former,dc=example,dc=com'],
    }
    assert adapter.group_dns == {'sales': 'cn=sales,ou=groups,dc=example,dc=com'}
