#!/usr/bin/env python3
"""
Group admin to LDAP owner sync

Makes the owner attribute of every LDAP group match the group administrators
recorded in OpenFGA: missing owners are added, surplus owners are removed.
"""

import sys
import logging
import argparse
from typing import Optional, TextIO

from dotenv import load_dotenv

from config import APP_ID, Configuration
from connection import LDAPConnect
from identity import IdentityMapper
from ldap_adapter import DirectoryAdapter
from mutator import DirectoryMutator
from openfga_adapter import RosterAdapter
from reconcile import count_pairs, reconcile


logger = logging.getLogger(__name__)

LOG_FORMAT = f'%(asctime)s - {APP_ID} - %(name)s - %(levelname)s - %(message)s'


def sync_group_admins(simulate: bool = False, verbose: bool = False,
                      output: Optional[TextIO] = None, config: Optional[Configuration] = None) -> int:
    """
    Run one synchronisation pass.

    Returns the exit code: 0 when the pass completed, 1 when it was aborted.
    """
    output = output or sys.stdout
    config = config or Configuration()
    simulate = simulate or config.dry_run

    logger.info("Starting group admin to LDAP owner sync")

    ldap_connect = LDAPConnect(config)
    roster_adapter = None

    try:
        # fails on zero or several endpoints, before anything is fetched
        ldap_connect.endpoint()

        if simulate:
            logger.info("Running in DRY RUN mode - no changes will be made")
            print("SIMULATE MODE ON", file=output)

        roster_adapter = RosterAdapter(name="openfga", config=config)
        roster_adapter.load()
        local = roster_adapter.membership_map()

        conn = ldap_connect.connect()
        identity = IdentityMapper(conn, config)
        directory_adapter = DirectoryAdapter(conn, identity, name="ldap", config=config)
        directory_adapter.load()
        directory = directory_adapter.membership_map()

        to_add, to_remove = reconcile(local, directory)
        logger.info(f"{count_pairs(to_add)} owners to add, {count_pairs(to_remove)} owners to remove")

        mutator = DirectoryMutator(
            conn, identity,
            owner_attribute=config.owner_attribute,
            dry_run=simulate,
            verbose=verbose,
            output=output
        )
        stats = mutator.apply(to_add, to_remove, directory_adapter.owner_dns, directory_adapter.group_dns)

        logger.info("Sync completed successfully")
        print(
            f"Done: {stats['added']} added, {stats['removed']} removed, {stats['failed']} failed",
            file=output
        )

    except Exception as e:
        logger.error(f"Sync failed: {e}", exc_info=True)
        print(f"Error: {e}", file=output)
        return 1

    finally:
        ldap_connect.close()
        if roster_adapter is not None:
            roster_adapter.close()

    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Sync group admin information to LDAP group owners')
    parser.add_argument('--sim', '--simulate', dest='simulate', action='store_true',
                        help='does not change the directory; just simulate')
    parser.add_argument('--verb', '--verbose', dest='verbose', action='store_true',
                        help='print every change')
    args = parser.parse_args(argv)

    load_dotenv()
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    return sync_group_admins(simulate=args.simulate, verbose=args.verbose)


if __name__ == "__main__":
    sys.exit(main())
