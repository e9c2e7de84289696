"""
LDAP adapter for diffsync

Reads the recorded owners of every LDAP group.
"""

import logging
from typing import Dict, List, Optional, Tuple

import ldap

from config import Configuration
from errors import ResolutionError
from identity import IdentityMapper, attr_values
from reconcile import OwnershipAdapter


logger = logging.getLogger(__name__)


class DirectoryAdapter(OwnershipAdapter):
    """
    DiffSync adapter for LDAP.
    Loads group ownerships from the owner attribute of group entries.
    """

    def __init__(self, conn, identity: IdentityMapper, *args, config: Optional[Configuration] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.ldap_conn = conn
        self.identity = identity
        self.config = config or Configuration()
        # owner values as stored, per (group, user), and the DN of each group
        self.owner_dns: Dict[Tuple[str, str], List[str]] = {}
        self.group_dns: Dict[str, str] = {}

    def load(self):
        """Load group owners from LDAP."""
        logger.info("Loading group owners from LDAP")

        base_dn = self.config.group_base_dn
        group_filter = self.config.group_filter
        name_attribute = self.config.group_display_name_attribute
        owner_attribute = self.config.owner_attribute
        attrlist = [name_attribute, self.config.member_attribute, owner_attribute]

        try:
            results = self.ldap_conn.search_s(base_dn, ldap.SCOPE_SUBTREE, group_filter, attrlist)
        except ldap.LDAPError as e:
            logger.error(f"LDAP search failed: {e}")
            raise

        owner_count = 0
        for dn, attrs in results:
            if not dn:
                continue

            names = attr_values(attrs, name_attribute)
            if not names:
                logger.warning(f"Group {dn} has no {name_attribute} attribute, skipping")
                continue
            group_name = names[0]
            self.group_dns[group_name] = dn

            for owner_dn in attr_values(attrs, owner_attribute):
                try:
                    user_id = self.identity.user_id(owner_dn)
                except (ResolutionError, ldap.LDAPError) as e:
                    logger.warning(f"Could not resolve owner {owner_dn} of group {group_name}: {e}")
                    continue

                self.owner_dns.setdefault((group_name, user_id), []).append(owner_dn)
                if self.add_ownership(group_name, user_id):
                    owner_count += 1
                    logger.debug(f"Loaded owner: {user_id} -> {group_name}")

        logger.info(f"Loaded {owner_count} group owners from LDAP")
