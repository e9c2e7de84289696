"""
Write support for LDAP groups
"""

import logging
from typing import Optional

import ldap

from association import association_for
from backends import ADD_TO_GROUP, DELETE_GROUP, REMOVE_FROM_GROUP
from config import Configuration
from connection import LDAPConnect
from errors import ResolutionError
from identity import IdentityMapper


logger = logging.getLogger(__name__)


class LDAPGroupManager:
    """
    Group plugin: deletes groups and changes their members.
    Creating groups is not supported.
    """

    def __init__(self, ldap_connect: LDAPConnect, identity: IdentityMapper,
                 config: Optional[Configuration] = None):
        self.ldap_connect = ldap_connect
        self.identity = identity
        self.config = config or ldap_connect.config

    @property
    def ldap_conn(self):
        return self.ldap_connect.ldap_conn

    def respond_to_actions(self) -> int:
        if not self.ldap_connect.groups_enabled():
            return 0
        return DELETE_GROUP | ADD_TO_GROUP | REMOVE_FROM_GROUP

    def create_group(self, gid: str):
        logger.info(f"LDAP group creation is disabled for {gid}")
        return None

    def delete_group(self, gid: str) -> bool:
        group_dn = self.identity.group_dn(gid)
        try:
            self.ldap_conn.delete_s(group_dn)
        except ldap.LDAPError as e:
            logger.error(f"Unable to delete LDAP group {gid}: {e}")
            return False
        logger.info(f"Deleted LDAP group {gid}")
        return True

    def add_to_group(self, uid: str, gid: str) -> bool:
        return self._change_member(ldap.MOD_ADD, uid, gid)

    def remove_from_group(self, uid: str, gid: str) -> bool:
        return self._change_member(ldap.MOD_DELETE, uid, gid)

    def _change_member(self, operation: int, uid: str, gid: str) -> bool:
        group_dn = self.identity.group_dn(gid)
        # raises UnsupportedAssociationError for gidNumber
        attribute, value = association_for(self.config.group_member_association).entry(uid, self.identity)
        if operation == ldap.MOD_ADD:
            failed, done = f"Unable to add user {uid} to group {gid}", f"Added user {uid} to group {gid}"
        else:
            failed, done = f"Unable to remove user {uid} from group {gid}", f"Removed user {uid} from group {gid}"

        try:
            self.ldap_conn.modify_s(group_dn, [(operation, attribute, [value])])
        except ldap.LDAPError as e:
            logger.error(f"{failed}: {e}")
            return False
        logger.info(done)
        return True

    def count_users_in_group(self, gid: str, search: str = ""):
        return False

    def get_group_details(self, gid: str):
        return False

    def is_ldap_group(self, gid: str) -> bool:
        try:
            return bool(self.identity.group_dn(gid))
        except (ResolutionError, ldap.LDAPError):
            return False
