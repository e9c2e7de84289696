"""
Member association modes

LDAP servers record group membership in different ways. Each mode knows the
attribute it writes and the value a user contributes to it.
"""

from typing import Tuple

from errors import UnsupportedAssociationError
from identity import IdentityMapper


class Association:
    name = ""
    attribute = ""

    def entry(self, uid: str, identity: IdentityMapper) -> Tuple[str, bytes]:
        """Return the (attribute, value) pair representing uid in a group."""
        raise NotImplementedError


class MemberUidAssociation(Association):
    name = "memberUid"
    attribute = "memberUid"

    def entry(self, uid, identity):
        return self.attribute, uid.encode('utf-8')


class MemberAssociation(Association):
    name = "member"
    attribute = "member"

    def entry(self, uid, identity):
        return self.attribute, identity.user_dn(uid).encode('utf-8')


class UniqueMemberAssociation(MemberAssociation):
    name = "uniqueMember"
    attribute = "uniqueMember"


class GidNumberAssociation(Association):
    """Membership through the user's primary gidNumber; never written."""
    name = "gidNumber"
    attribute = "gidNumber"

    def entry(self, uid, identity):
        raise UnsupportedAssociationError(
            "Cannot change group membership when gidNumber is used as relation"
        )


ASSOCIATIONS = {
    cls.name.lower(): cls
    for cls in (MemberUidAssociation, MemberAssociation, UniqueMemberAssociation, GidNumberAssociation)
}


def association_for(name: str) -> Association:
    try:
        return ASSOCIATIONS[name.lower()]()
    except KeyError:
        raise UnsupportedAssociationError(f"Unknown group member association: {name!r}")
