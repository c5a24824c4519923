#
#
#

"""Protocol definitions for registrar client interfaces.

This module defines structural typing (PEP 544) for the glue record calls
the lifecycle controller relies on, so it can be driven by PorkbunClient or
by a test double without explicit inheritance.
"""

from typing import List, Protocol, Sequence

from .glue import GlueRecord


class GlueClient(Protocol):
    """Protocol defining the glue record calls of a registrar client."""

    def glue_create(
        self, domain: str, subdomain: str, ips: Sequence[str]
    ) -> None:
        """Register the subdomain's addresses, replacing any existing ones.

        Args:
            domain: Registered domain name
            subdomain: Bare host label, e.g. 'ns1'
            ips: Mixed IPv4 and IPv6 literals
        """
        ...

    def glue_update(
        self, domain: str, subdomain: str, ips: Sequence[str]
    ) -> None:
        """Replace the subdomain's addresses (upsert)."""
        ...

    def glue_delete(self, domain: str, subdomain: str) -> None:
        """Remove the glue host; removing a missing host succeeds."""
        ...

    def glue_records(self, domain: str) -> List[GlueRecord]:
        """Get all glue hosts of a domain.

        Returns:
            GlueRecords in the order the registrar sent them
        """
        ...
