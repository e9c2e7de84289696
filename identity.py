"""
Mapping between user/group ids and LDAP distinguished names
"""

import logging
from typing import Dict, List, Optional

import ldap
import ldap.dn
from ldap.filter import escape_filter_chars

from config import Configuration
from errors import ResolutionError


logger = logging.getLogger(__name__)


def decode(value) -> str:
    if isinstance(value, bytes):
        return value.decode('utf-8')
    return value


def attr_values(attrs: Dict[str, list], name: str) -> List[str]:
    """Return the decoded values of an attribute, matching its name case-insensitively."""
    wanted = name.lower()
    for key, values in (attrs or {}).items():
        if key.lower() == wanted:
            if not isinstance(values, list):
                values = [values]
            return [decode(v) for v in values]
    return []


class IdentityMapper:
    """
    Resolves user ids, group ids and DNs against the directory.

    Nothing is cached; every call is a fresh lookup.
    """

    def __init__(self, conn, config: Optional[Configuration] = None):
        self.conn = conn
        self.config = config or Configuration()

    def _search_one(self, base_dn: str, search_filter: str, attrlist: List[str], what: str):
        try:
            results = self.conn.search_s(base_dn, ldap.SCOPE_SUBTREE, search_filter, attrlist)
        except ldap.NO_SUCH_OBJECT:
            raise ResolutionError(f"Search base {base_dn} does not exist while resolving {what}")

        # referrals come back with a None DN
        entries = [(dn, attrs) for dn, attrs in results if dn]
        if not entries:
            raise ResolutionError(f"No LDAP entry found for {what}")
        if len(entries) > 1:
            raise ResolutionError(f"{len(entries)} LDAP entries found for {what}")
        return entries[0]

    def user_dn(self, uid: str) -> str:
        id_attribute = self.config.user_id_attribute
        search_filter = f"(&{self.config.user_filter}({id_attribute}={escape_filter_chars(uid)}))"
        dn, _ = self._search_one(self.config.user_base_dn, search_filter, [id_attribute], f"user {uid}")
        return dn

    def group_dn(self, gid: str) -> str:
        name_attribute = self.config.group_display_name_attribute
        search_filter = f"(&{self.config.group_filter}({name_attribute}={escape_filter_chars(gid)}))"
        dn, _ = self._search_one(self.config.group_base_dn, search_filter, [name_attribute], f"group {gid}")
        return dn

    def user_id(self, dn: str) -> str:
        """Resolve a user DN to its user id."""
        id_attribute = self.config.user_id_attribute

        try:
            rdn = ldap.dn.str2dn(dn)[0]
        except (ldap.DECODING_ERROR, IndexError):
            raise ResolutionError(f"Malformed DN: {dn!r}")

        for attr, value, _ in rdn:
            if attr.lower() == id_attribute.lower():
                return value

        try:
            results = self.conn.search_s(dn, ldap.SCOPE_BASE, '(objectClass=*)', [id_attribute])
        except ldap.NO_SUCH_OBJECT:
            raise ResolutionError(f"No LDAP entry found for DN {dn}")

        for _, attrs in results:
            values = attr_values(attrs, id_attribute)
            if values:
                return values[0]
        raise ResolutionError(f"Entry {dn} has no {id_attribute} attribute")
