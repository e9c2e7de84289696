"""
Write support for LDAP users

Display name, avatar, email and password changes, plus deletion. Creating
users is not supported.
"""

import logging
from typing import Callable, Optional

import ldap

from backends import PROVIDE_AVATAR, SET_DISPLAYNAME, SET_PASSWORD
from config import Configuration
from connection import LDAPConnect
from errors import HintError, ResolutionError, ServerNotAvailableError
from identity import IdentityMapper


logger = logging.getLogger(__name__)


class ExopPasswordStrategy:
    """Password modify extended operation (RFC 3062)."""
    name = "exop"

    def set_password(self, conn, user_dn: str, password: str):
        conn.passwd_s(user_dn, None, password)


class ReplacePasswordStrategy:
    """Replace the password attribute directly."""
    name = "replace"

    def __init__(self, unicode_pwd: bool = False):
        self.unicode_pwd = unicode_pwd

    def set_password(self, conn, user_dn: str, password: str):
        if self.unicode_pwd:
            # Active Directory wants the quoted password in UTF-16LE
            entry = ('unicodePwd', [f'"{password}"'.encode('utf-16-le')])
        else:
            entry = ('userPassword', [password.encode('utf-8')])
        conn.modify_s(user_dn, [(ldap.MOD_REPLACE,) + entry])


class LDAPUserManager:
    """
    User plugin for the LDAP backend.
    """

    def __init__(self, ldap_connect: LDAPConnect, identity: IdentityMapper,
                 config: Optional[Configuration] = None,
                 flag_deleted: Optional[Callable[[str], None]] = None):
        self.ldap_connect = ldap_connect
        self.identity = identity
        self.config = config or ldap_connect.config
        self.flag_deleted = flag_deleted

    @property
    def ldap_conn(self):
        return self.ldap_connect.ldap_conn

    def respond_to_actions(self) -> int:
        actions = SET_DISPLAYNAME | PROVIDE_AVATAR
        if self.can_set_password() and not self.ldap_connect.has_password_policy():
            actions |= SET_PASSWORD
        return actions

    def set_display_name(self, uid: str, display_name: str) -> str:
        """
        Replace the display name of a user.

        The surname is set to the same value. Raises HintError when the entry
        is missing or the server rejects the change.
        """
        try:
            user_dn = self.identity.user_dn(uid)
        except ResolutionError:
            raise HintError("Corresponding LDAP User not found", "Could not find related LDAP entry")

        conn = self.ldap_conn
        if conn is None:
            logger.debug("LDAP resource not available")
            raise ServerNotAvailableError("LDAP server is not available")

        value = [display_name.encode('utf-8')]
        modlist = [
            (ldap.MOD_REPLACE, self.config.user_display_name_attribute, value),
            (ldap.MOD_REPLACE, 'sn', value),
        ]
        try:
            conn.modify_s(user_dn, modlist)
        except ldap.CONSTRAINT_VIOLATION as e:
            raise HintError(str(e), "DisplayName change rejected")
        except ldap.LDAPError as e:
            logger.error(f"Failed to set display name of {uid}: {e}")
            raise HintError("Failed to set display name")
        return display_name

    def can_change_avatar(self, uid: str) -> bool:
        return self.config.has_avatar_permission()

    def change_avatar(self, uid: str, image: Optional[bytes]):
        """Store the avatar as jpegPhoto, or drop jpegPhoto when image is empty."""
        try:
            user_dn = self.identity.user_dn(uid)
        except ResolutionError:
            return

        if image:
            self.ldap_conn.modify_s(user_dn, [(ldap.MOD_REPLACE, 'jpegPhoto', [image])])
            return

        try:
            self.ldap_conn.modify_s(user_dn, [(ldap.MOD_DELETE, 'jpegPhoto', None)])
        except ldap.NO_SUCH_ATTRIBUTE:
            logger.debug(f"{uid} has no jpegPhoto to remove")

    def change_email(self, uid: str, new_email: str):
        try:
            user_dn = self.identity.user_dn(uid)
        except ResolutionError:
            return

        self.ldap_conn.modify_s(
            user_dn, [(ldap.MOD_REPLACE, self.config.email_attribute, [new_email.encode('utf-8')])]
        )

    def create_user(self, uid: str, password: str) -> bool:
        logger.info(f"LDAP user creation is disabled for {uid}")
        return False

    def delete_user(self, uid: str) -> bool:
        user_dn = self.identity.user_dn(uid)
        try:
            self.ldap_conn.delete_s(user_dn)
        except ldap.NO_SUCH_OBJECT:
            logger.info(f"Delete LDAP user {uid}: object not found. Is already deleted? Assuming YES")
            return True
        except ldap.LDAPError as e:
            logger.info(f"Unable to delete LDAP user {uid}: {e}")
            return False

        logger.info(f"Deleted LDAP user {uid}")
        if self.flag_deleted is not None:
            self.flag_deleted(uid)
        else:
            logger.warning(f"Could not run delete process on {uid}")
        return True

    def can_set_password(self) -> bool:
        return self.config.has_password_permission()

    def password_strategy(self, conn):
        if self.ldap_connect.has_passwd_exop_support(conn):
            return ExopPasswordStrategy()
        return ReplacePasswordStrategy(self.config.use_unicode_password())

    def set_password(self, uid: str, password: str) -> bool:
        user_dn = self.identity.user_dn(uid)
        conn = self.ldap_conn
        strategy = self.password_strategy(conn)

        try:
            strategy.set_password(conn, user_dn, password)
        except ldap.LDAPError as e:
            logger.error(f"Failed to set password for user {user_dn} using {strategy.name}: {e}")
            return False
        return True

    def get_display_name(self, uid: str) -> str:
        return uid

    def change_user_hook(self, uid: str, feature: str, value=None, old_value=None):
        """React to a change of a user made elsewhere."""
        if feature == 'avatar':
            self.change_avatar(uid, value)
        elif feature == 'eMailAddress':
            self.change_email(uid, value)
