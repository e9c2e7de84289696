"""
DiffSync models for group ownership reconciliation
"""

import json
from typing import Tuple

from diffsync import DiffSyncModel


class GroupOwnership(DiffSyncModel):
    """
    DiffSync model representing a group ownership.
    An ownership says that a user (identified by user id) administers a group.

    Group and user ids are opaque, so the pair is identified by its JSON
    encoding; joining the two ids would let different pairs collide.
    """
    _modelname = "ownership"
    _identifiers = ("pair",)
    _attributes = ("group_name", "user_id")

    pair: str
    group_name: str
    user_id: str

    @staticmethod
    def encode_pair(group_name: str, user_id: str) -> str:
        return json.dumps([group_name, user_id])

    @staticmethod
    def decode_pair(pair: str) -> Tuple[str, str]:
        group_name, user_id = json.loads(pair)
        return group_name, user_id

    @classmethod
    def for_pair(cls, group_name: str, user_id: str) -> "GroupOwnership":
        return cls(pair=cls.encode_pair(group_name, user_id), group_name=group_name, user_id=user_id)
