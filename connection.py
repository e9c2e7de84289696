"""
LDAP connection handling
"""

import os
import logging
from typing import Optional

import ldap

from config import Configuration
from errors import ConfigurationError


logger = logging.getLogger(__name__)

# RFC 3062 password modify extended operation
PASSWD_EXOP_OID = "1.3.6.1.4.1.4203.1.11.1"


class LDAPConnect:
    """
    Opens and holds the single connection used for reads and writes.
    """

    def __init__(self, config: Optional[Configuration] = None):
        self.config = config or Configuration()
        self.ldap_conn = None

    def endpoint(self) -> str:
        """Return the one configured LDAP endpoint."""
        uris = self.config.server_uris
        if not uris:
            raise ConfigurationError("No LDAP server configured (LDAP_SERVER is empty)")
        if len(uris) > 1:
            raise ConfigurationError(
                f"Not prepared to deal with more than 1 LDAP source ({len(uris)} configured), exiting"
            )
        return uris[0]

    def connect(self):
        """Establish and bind a connection to the LDAP server."""
        server = self.endpoint()
        ca_cert_file = self.config.ca_cert_file

        logger.info(f"Connecting to LDAP server: {server}")

        try:
            if ca_cert_file and os.path.exists(ca_cert_file):
                logger.info(f"Using custom CA certificate: {ca_cert_file}")
                ldap.set_option(ldap.OPT_X_TLS_CACERTFILE, ca_cert_file)
                ldap.set_option(ldap.OPT_X_TLS_REQUIRE_CERT, ldap.OPT_X_TLS_DEMAND)
            elif ca_cert_file:
                logger.warning(f"CA certificate file not found: {ca_cert_file}")

            conn = ldap.initialize(server)
            conn.protocol_version = ldap.VERSION3

            if self.config.use_tls and server.startswith("ldap://"):
                conn.start_tls_s()

            conn.simple_bind_s(self.config.bind_dn, self.config.bind_password)
            logger.info("Successfully connected to LDAP")
        except ldap.LDAPError as e:
            logger.error(f"Failed to connect to LDAP: {e}")
            raise

        self.ldap_conn = conn
        return conn

    def close(self):
        """Unbind the connection if one is open."""
        if self.ldap_conn is not None:
            try:
                self.ldap_conn.unbind_s()
                logger.info("Disconnected from LDAP")
            except ldap.LDAPError as e:
                logger.warning(f"Error while unbinding from LDAP: {e}")
            self.ldap_conn = None

    def groups_enabled(self) -> bool:
        return bool(self.config.group_base_dn and self.config.group_filter)

    def has_password_policy(self) -> bool:
        return bool(self.config.default_ppolicy_dn)

    def has_passwd_exop_support(self, conn) -> bool:
        """Check the root DSE for the password modify extended operation."""
        try:
            results = conn.search_s('', ldap.SCOPE_BASE, '(objectClass=*)', ['supportedExtension'])
        except ldap.LDAPError as e:
            logger.warning(f"Could not read root DSE: {e}")
            return False

        for _, attrs in results:
            for oid in (attrs or {}).get('supportedExtension', []):
                if isinstance(oid, bytes):
                    oid = oid.decode('utf-8')
                if oid == PASSWD_EXOP_OID:
                    return True
        return False
