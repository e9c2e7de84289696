"""
Backend registration helpers

The write plugins only make sense once the core LDAP backend is ready, and
LDAP backends must be consulted before any other backend.
"""

import logging
from typing import Callable, Iterable, List


logger = logging.getLogger(__name__)

# user backend actions
CREATE_USER = 0x00000001
SET_PASSWORD = 0x00000010
SET_DISPLAYNAME = 0x00100000
PROVIDE_AVATAR = 0x01000000

# group backend actions
CREATE_GROUP = 0x00000001
DELETE_GROUP = 0x00000010
ADD_TO_GROUP = 0x00000100
REMOVE_FROM_GROUP = 0x00001000


def prioritize_backends(backends: Iterable, is_ldap: Callable[[object], bool]) -> List:
    """Return the backends with LDAP ones first, otherwise keeping their order."""
    backends = list(backends)
    return [b for b in backends if is_ldap(b)] + [b for b in backends if not is_ldap(b)]


def register_write_support(plugin_manager, ldap_backend_ready: bool, plugin) -> bool:
    """Register a write plugin, provided the core LDAP backend is ready."""
    if not ldap_backend_ready:
        logger.debug(f"LDAP backend not ready, not registering {type(plugin).__name__}")
        return False
    plugin_manager.register(plugin)
    logger.info(f"Registered {type(plugin).__name__}")
    return True
