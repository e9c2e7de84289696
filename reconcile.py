"""
Reconciliation of group ownership maps

A membership map is a plain ``Dict[group id, Set[user id]]``. Both the
local administrators and the directory owners are loaded into diffsync
adapters and diffed; the diff says what the directory is missing and what
it has in excess.
"""

import logging
from typing import Dict, Iterable, Optional, Set, Tuple

from diffsync import Adapter
from diffsync.exceptions import ObjectAlreadyExists

from models import GroupOwnership


logger = logging.getLogger(__name__)

MembershipMap = Dict[str, Set[str]]


class OwnershipAdapter(Adapter):
    """
    DiffSync adapter holding group ownerships in memory.
    The roster and directory adapters load into this structure.
    """

    ownership = GroupOwnership
    top_level = ["ownership"]

    def add_ownership(self, group_name: str, user_id: str) -> bool:
        """Add one (group, user) pair. Returns False if it was already present."""
        try:
            self.add(GroupOwnership.for_pair(group_name, user_id))
        except ObjectAlreadyExists:
            logger.debug(f"Duplicate ownership ignored: {user_id} -> {group_name}")
            return False
        return True

    def membership_map(self) -> MembershipMap:
        result: MembershipMap = {}
        for ownership in self.get_all("ownership"):
            result.setdefault(ownership.group_name, set()).add(ownership.user_id)
        return result

    @classmethod
    def from_membership_map(cls, mapping: MembershipMap, name: Optional[str] = None):
        adapter = cls(name=name)
        for group_name, users in mapping.items():
            for user_id in users:
                adapter.add_ownership(group_name, user_id)
        return adapter


def count_pairs(mapping: MembershipMap) -> int:
    return sum(len(users) for users in mapping.values())


def iter_pairs(mapping: MembershipMap) -> Iterable[Tuple[str, str]]:
    """Yield (group, user) pairs in a stable order."""
    for group_name in sorted(mapping):
        for user_id in sorted(mapping[group_name]):
            yield group_name, user_id


def reconcile(local: MembershipMap, directory: MembershipMap) -> Tuple[MembershipMap, MembershipMap]:
    """
    Compare desired owners (local) with recorded owners (directory).

    Returns ``(to_add, to_remove)``: for every group, ``local[g] - directory[g]``
    and ``directory[g] - local[g]``. Groups whose difference is empty are left
    out of the result.
    """
    source = OwnershipAdapter.from_membership_map(local, name="local")
    target = OwnershipAdapter.from_membership_map(directory, name="directory")

    to_add: MembershipMap = {}
    to_remove: MembershipMap = {}

    diff = target.diff_from(source)
    for element in diff.get_children():
        if element.type != "ownership":
            continue
        group_name, user_id = GroupOwnership.decode_pair(element.keys["pair"])
        if element.action == "create":
            to_add.setdefault(group_name, set()).add(user_id)
        elif element.action == "delete":
            to_remove.setdefault(group_name, set()).add(user_id)

    logger.debug(f"Reconciled: {count_pairs(to_add)} to add, {count_pairs(to_remove)} to remove")
    return to_add, to_remove
