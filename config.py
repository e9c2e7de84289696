"""
Configuration for LDAP write support

All settings come from environment variables. Entry points call
load_dotenv() first, so a .env file next to the scripts works too.
"""

import os
import re
from typing import Dict, List, Mapping, Optional

from errors import ConfigurationError


APP_ID = "ldap_user_write_support"

REQUIRED_VARIABLES = [
    'LDAP_SERVER',
    'LDAP_BIND_DN',
    'LDAP_BIND_PASSWORD',
    'LDAP_USER_BASE_DN',
    'LDAP_GROUP_BASE_DN',
    'OPENFGA_API_URL',
    'OPENFGA_STORE_ID',
]

_TRUE_VALUES = {"1", "true", "yes", "on"}


class Configuration:
    """
    Typed access to the environment.

    The feature switches mirror the admin settings of the write support
    plugin: avatar and password changes are allowed by default, unicodePwd
    is opt-in.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self.environ = os.environ if environ is None else environ

    def get(self, name: str, default: str = "") -> str:
        value = self.environ.get(name)
        if value is None:
            return default
        return value.strip()

    def flag(self, name: str, default: bool = False) -> bool:
        value = self.environ.get(name)
        if value is None or not value.strip():
            return default
        return value.strip().lower() in _TRUE_VALUES

    # LDAP connection

    @property
    def server_uris(self) -> List[str]:
        """Every configured LDAP endpoint, in the order given."""
        return [uri for uri in re.split(r"[\s,]+", self.get("LDAP_SERVER")) if uri]

    @property
    def bind_dn(self) -> str:
        return self.get("LDAP_BIND_DN")

    @property
    def bind_password(self) -> str:
        # passwords may legitimately carry surrounding whitespace
        return self.environ.get("LDAP_BIND_PASSWORD", "")

    @property
    def use_tls(self) -> bool:
        return self.flag("LDAP_USE_TLS")

    @property
    def ca_cert_file(self) -> str:
        return self.get("LDAP_CA_CERT_FILE")

    @property
    def default_ppolicy_dn(self) -> str:
        return self.get("LDAP_DEFAULT_PPOLICY_DN")

    # LDAP users

    @property
    def user_base_dn(self) -> str:
        return self.get("LDAP_USER_BASE_DN")

    @property
    def user_filter(self) -> str:
        return self.get("LDAP_USER_FILTER", "(objectClass=inetOrgPerson)")

    @property
    def user_id_attribute(self) -> str:
        return self.get("LDAP_USER_ID_ATTRIBUTE", "uid")

    @property
    def user_display_name_attribute(self) -> str:
        return self.get("LDAP_USER_DISPLAY_NAME_ATTRIBUTE", "displayName")

    @property
    def email_attribute(self) -> str:
        return self.get("LDAP_EMAIL_ATTRIBUTE", "mail")

    # LDAP groups

    @property
    def group_base_dn(self) -> str:
        return self.get("LDAP_GROUP_BASE_DN")

    @property
    def group_filter(self) -> str:
        return self.get("LDAP_GROUP_FILTER", "(objectClass=groupOfNames)")

    @property
    def group_display_name_attribute(self) -> str:
        return self.get("LDAP_GROUP_DISPLAY_NAME_ATTRIBUTE", "cn")

    @property
    def member_attribute(self) -> str:
        return self.get("LDAP_MEMBER_ATTRIBUTE", "member")

    @property
    def group_member_association(self) -> str:
        return self.get("LDAP_GROUP_MEMBER_ASSOC", "member")

    @property
    def owner_attribute(self) -> str:
        return self.get("LDAP_OWNER_ATTRIBUTE", "owner")

    # OpenFGA

    @property
    def openfga_api_url(self) -> str:
        return self.get("OPENFGA_API_URL")

    @property
    def openfga_store_id(self) -> str:
        return self.get("OPENFGA_STORE_ID")

    @property
    def openfga_api_token(self) -> str:
        return self.get("OPENFGA_API_TOKEN")

    @property
    def admin_relation(self) -> str:
        return self.get("OPENFGA_ADMIN_RELATION", "admin")

    # Switches

    def has_avatar_permission(self) -> bool:
        """Whether LDAP avatars may be updated."""
        return self.flag("HAS_AVATAR_PERMISSION", True)

    def has_password_permission(self) -> bool:
        """Whether LDAP passwords may be updated."""
        return self.flag("HAS_PASSWORD_PERMISSION", True)

    def use_unicode_password(self) -> bool:
        """Whether to write passwords to unicodePwd (Active Directory)."""
        return self.flag("USE_UNICODE_PASSWORD", False)

    def switches(self) -> Dict[str, bool]:
        return {
            'hasAvatarPermission': self.has_avatar_permission(),
            'hasPasswordPermission': self.has_password_permission(),
            'useUnicodePassword': self.use_unicode_password(),
        }

    @property
    def dry_run(self) -> bool:
        return self.flag("SYNC_DRY_RUN")

    def missing(self) -> List[str]:
        """Return the required variables that are not set."""
        return [name for name in REQUIRED_VARIABLES if not self.get(name)]

    def require(self):
        missing = self.missing()
        if missing:
            raise ConfigurationError(
                f"Missing required configuration variables: {', '.join(missing)}"
            )
