"""
OpenFGA adapter for diffsync

Reads the local group administrators from an OpenFGA store. An administrator
assignment is a tuple ``user:<uid> <relation> group:<gid>``.
"""

import logging
from typing import Iterable, Iterator, Optional, Tuple

from openfga_sdk import ReadRequestTupleKey
from openfga_sdk.client import ClientConfiguration
from openfga_sdk.credentials import Credentials, CredentialConfiguration
from openfga_sdk.sync import OpenFgaClient

from config import Configuration
from reconcile import MembershipMap, OwnershipAdapter


logger = logging.getLogger(__name__)

# (group id, user id, role)
Assignment = Tuple[str, str, str]


def membership_from_assignments(assignments: Iterable[Assignment], relation: str = "admin") -> MembershipMap:
    """Build the group -> administrators map from a roster of assignments."""
    result: MembershipMap = {}
    for group_name, user_id, role in assignments:
        if role != relation:
            continue
        result.setdefault(group_name, set()).add(user_id)
    return result


class RosterAdapter(OwnershipAdapter):
    """
    DiffSync adapter for OpenFGA.
    Reads group administrator assignments; it never writes to OpenFGA.
    """

    def __init__(self, *args, config: Optional[Configuration] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.config = config or Configuration()
        self.client: Optional[OpenFgaClient] = None
        self.page_size = 100

    def connect_openfga(self):
        """Create the OpenFGA client."""
        api_url = self.config.openfga_api_url
        api_token = self.config.openfga_api_token

        logger.info(f"Connecting to OpenFGA: {api_url}")

        credentials = None
        if api_token:
            credentials = Credentials(
                method="api_token",
                configuration=CredentialConfiguration(api_token=api_token)
            )

        configuration = ClientConfiguration(
            api_url=api_url,
            store_id=self.config.openfga_store_id,
            credentials=credentials
        )

        self.client = OpenFgaClient(configuration)
        logger.info("Successfully connected to OpenFGA")

    def read_assignments(self) -> Iterator[Assignment]:
        """Page through every tuple of the store, yielding user-on-group assignments."""
        if not self.client:
            self.connect_openfga()

        continuation_token = None
        while True:
            options = {"page_size": self.page_size}
            if continuation_token:
                options["continuation_token"] = continuation_token

            response = self.client.read(body=ReadRequestTupleKey(), options=options)

            for tuple_data in getattr(response, 'tuples', None) or []:
                key = getattr(tuple_data, 'key', None)
                if key is None:
                    continue

                if key.user.startswith('user:') and key.object.startswith('group:'):
                    yield key.object.split(':', 1)[1], key.user.split(':', 1)[1], key.relation

            continuation_token = getattr(response, 'continuation_token', None)
            if not continuation_token:
                break
            logger.debug("Fetching next page of tuples")

    def load(self):
        """Load group administrators from OpenFGA."""
        relation = self.config.admin_relation
        logger.info(f"Loading '{relation}' assignments from OpenFGA")

        try:
            admins = membership_from_assignments(self.read_assignments(), relation)
        except Exception as e:
            logger.error(f"Failed to load data from OpenFGA: {e}")
            raise

        count = 0
        for group_name, users in admins.items():
            for user_id in users:
                self.add_ownership(group_name, user_id)
                count += 1
        logger.info(f"Loaded {count} group administrators from OpenFGA")

    def close(self):
        """Close the OpenFGA client."""
        if self.client:
            try:
                self.client.close()
                logger.debug("OpenFGA client closed")
            except Exception as e:
                logger.warning(f"Error closing OpenFGA client: {e}")
            self.client = None
