#!/usr/bin/env python3
"""
Manual probe of the LDAP and OpenFGA connections used by sync.py
"""

import sys
import logging
from dotenv import load_dotenv
import ldap

from config import Configuration
from connection import LDAPConnect
from identity import attr_values
from openfga_adapter import RosterAdapter

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def check_ldap_connection(config: Configuration) -> bool:
    """Bind to LDAP and list a few groups with their owners"""
    print("\n🔍 Testing LDAP Connection...")

    ldap_connect = LDAPConnect(config)
    try:
        conn = ldap_connect.connect()
        print(f"✅ Connected to LDAP server: {ldap_connect.endpoint()}")

        name_attribute = config.group_display_name_attribute
        results = conn.search_s(
            config.group_base_dn,
            ldap.SCOPE_SUBTREE,
            config.group_filter,
            [name_attribute, config.owner_attribute]
        )
        groups = [(dn, attrs) for dn, attrs in results if dn]
        print(f"✅ Found {len(groups)} groups in LDAP")

        if groups:
            print("\n   Sample groups:")
            for dn, attrs in groups[:5]:
                names = attr_values(attrs, name_attribute)
                owners = attr_values(attrs, config.owner_attribute)
                print(f"   - {names[0] if names else dn} ({len(owners)} owners)")

        exop = ldap_connect.has_passwd_exop_support(conn)
        print(f"   Password modify extended operation: {'yes' if exop else 'no'}")
        return True

    except Exception as e:
        print(f"❌ LDAP connection failed: {e}")
        return False
    finally:
        ldap_connect.close()


def check_openfga_connection(config: Configuration) -> bool:
    """Read the administrator assignments from OpenFGA"""
    print("\n🔍 Testing OpenFGA Connection...")

    adapter = RosterAdapter(config=config)
    try:
        adapter.load()
        admins = adapter.membership_map()
        print(f"✅ Found administrators for {len(admins)} groups in OpenFGA")
        for group_name in sorted(admins)[:5]:
            print(f"   - {group_name}: {', '.join(sorted(admins[group_name]))}")
        return True

    except Exception as e:
        print(f"❌ OpenFGA connection failed: {e}")
        return False
    finally:
        adapter.close()


def main():
    """Run both checks"""
    load_dotenv()
    config = Configuration()

    print("🧪 Connection Check")
    print("=" * 60)

    ldap_ok = check_ldap_connection(config)
    openfga_ok = check_openfga_connection(config)

    print("\n" + "=" * 60)
    print("📊 Summary:")
    print(f"   LDAP: {'✅ PASS' if ldap_ok else '❌ FAIL'}")
    print(f"   OpenFGA: {'✅ PASS' if openfga_ok else '❌ FAIL'}")

    if ldap_ok and openfga_ok:
        print("\n✅ All checks passed! Ready to run sync.py")
        return 0
    print("\n❌ Some checks failed. Please check your configuration.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
