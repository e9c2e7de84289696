"""
Applies owner additions and removals to LDAP group entries
"""

import sys
import logging
from typing import Dict, List, Optional, TextIO, Tuple

import ldap

from errors import ResolutionError
from identity import IdentityMapper
from reconcile import MembershipMap, iter_pairs


logger = logging.getLogger(__name__)

OwnerValues = Dict[Tuple[str, str], List[str]]


class DirectoryMutator:
    """
    Writes the owner attribute of group entries.

    Every (group, user) pair is a separate modify request. A failing pair is
    logged and counted, and the remaining pairs are still processed.

    Removals delete the owner values that were read from the directory when
    they are known, so owners whose user entry is gone or has moved are still
    removed.
    """

    def __init__(self, conn, identity: IdentityMapper, owner_attribute: str = "owner",
                 dry_run: bool = False, verbose: bool = False, output: Optional[TextIO] = None):
        self.ldap_conn = conn
        self.identity = identity
        self.owner_attribute = owner_attribute
        self.dry_run = dry_run
        self.verbose = verbose
        self.output = output or sys.stdout

    def apply(self, to_add: MembershipMap, to_remove: MembershipMap,
              owner_dns: Optional[OwnerValues] = None,
              group_dns: Optional[Dict[str, str]] = None) -> Dict[str, int]:
        owner_dns = owner_dns or {}
        group_dns = group_dns or {}
        stats = {'added': 0, 'removed': 0, 'failed': 0}

        for group_name, user_id in iter_pairs(to_add):
            if self._modify(ldap.MOD_ADD, "ADD", group_name, user_id, group_dns.get(group_name)):
                stats['added'] += 1
            else:
                stats['failed'] += 1

        for group_name, user_id in iter_pairs(to_remove):
            if self._modify(ldap.MOD_DELETE, "DEL", group_name, user_id, group_dns.get(group_name),
                            owner_dns.get((group_name, user_id))):
                stats['removed'] += 1
            else:
                stats['failed'] += 1

        return stats

    def _modify(self, operation: int, action: str, group_name: str, user_id: str,
                group_dn: Optional[str] = None, user_dns: Optional[List[str]] = None) -> bool:
        try:
            group_dn = group_dn or self.identity.group_dn(group_name)
            user_dns = user_dns or [self.identity.user_dn(user_id)]
        except (ResolutionError, ldap.LDAPError) as e:
            logger.error(f"Skipping {action} of {user_id} for group {group_name}: {e}")
            return False

        user_dn = ", ".join(user_dns)
        if self.verbose:
            print(f"{action}: UID={user_id} ({user_dn}) into GID={group_name} ({group_dn})", file=self.output)

        if self.dry_run:
            logger.info(f"[DRY RUN] Would {action} owner {user_dn} on {group_dn}")
            return True

        values = [dn.encode('utf-8') for dn in user_dns]
        try:
            self.ldap_conn.modify_s(group_dn, [(operation, self.owner_attribute, values)])
        except ldap.LDAPError as e:
            logger.error(f"Failed to {action} owner {user_dn} on {group_dn}: {e}")
            return False

        logger.info(f"{action} owner {user_dn} on {group_dn}")
        return True
