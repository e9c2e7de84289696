#!/usr/bin/env python3
"""
Checks that the configuration needed by sync.py is present
"""

import sys
from dotenv import load_dotenv

from config import Configuration
from connection import LDAPConnect
from errors import ConfigurationError


def validate_config(config: Configuration) -> bool:
    """Validate that all required configuration is set"""
    ok = True

    missing = config.missing()
    if missing:
        print("❌ Missing required configuration variables:")
        for var in missing:
            print(f"   - {var}")
        ok = False

    try:
        LDAPConnect(config).endpoint()
    except ConfigurationError as e:
        print(f"❌ {e}")
        ok = False

    if ok:
        print("✅ All required configuration variables are set")
    return ok


def display_config(config: Configuration):
    """Display current configuration (masking sensitive values)"""
    print("\n📋 Current Configuration:")
    print(f"   LDAP Server: {', '.join(config.server_uris)}")
    print(f"   LDAP Bind DN: {config.bind_dn}")
    print(f"   LDAP User Base DN: {config.user_base_dn}")
    print(f"   LDAP Group Base DN: {config.group_base_dn}")
    print(f"   LDAP Group Filter: {config.group_filter}")
    print(f"   LDAP Owner Attribute: {config.owner_attribute}")
    print(f"   LDAP Member Association: {config.group_member_association}")
    print(f"   OpenFGA API URL: {config.openfga_api_url}")
    print(f"   OpenFGA Store ID: {config.openfga_store_id}")
    print(f"   OpenFGA Admin Relation: {config.admin_relation}")
    for name, enabled in config.switches().items():
        print(f"   {name}: {enabled}")
    print(f"   Dry Run Mode: {config.dry_run}")
    print()


if __name__ == "__main__":
    load_dotenv()
    config = Configuration()

    print("🔍 LDAP Write Support - Configuration Validator\n")

    if validate_config(config):
        display_config(config)
        print("✅ Configuration is valid. You can now run:")
        print("   python sync.py --sim --verb")
    else:
        print("\n❌ Please update your .env file with the missing configuration")
        print("   See .env.example for reference")
        sys.exit(1)
