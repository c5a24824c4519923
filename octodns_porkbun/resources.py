#
#
#

"""Create/read/update/delete/import cycle for glue record resources.

A glue record resource is keyed by ``(domain, subdomain)`` and identified as
``domain:subdomain``. The registrar is the source of truth: ``read`` replaces
the tracked addresses with whatever the registrar reports and returns None
once the host is gone, which tells the orchestrator to stop tracking it.
Changing domain or subdomain means replacing the resource, never updating it.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from .clients import GlueClient
from .exceptions import PorkbunImportIdError
from .glue import hostname_for


def glue_record_id(domain: str, subdomain: str) -> str:
    return f'{domain}:{subdomain}'


def parse_import_id(import_id: str):
    """Split ``domain:subdomain``; anything but two non-empty parts fails."""
    parts = import_id.split(':')
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise PorkbunImportIdError(import_id)
    return parts[0], parts[1]


def _unique(ips: Iterable[str]) -> List[str]:
    # ips is a set in the resource schema, order of first appearance is kept
    # so requests are deterministic
    return list(dict.fromkeys(ips))


@dataclass
class GlueRecordState:
    domain: str
    subdomain: str
    # None until the first read after an import
    ips: Optional[List[str]] = field(default=None)
    id: Optional[str] = None

    def __post_init__(self):
        if self.id is None:
            self.id = glue_record_id(self.domain, self.subdomain)

    @property
    def hostname(self) -> str:
        return hostname_for(self.domain, self.subdomain)


class GlueRecordResource:
    def __init__(self, client: GlueClient):
        self.log = logging.getLogger('GlueRecordResource')
        self._client = client

    def create(
        self, domain: str, subdomain: str, ips: Iterable[str]
    ) -> GlueRecordState:
        ips = _unique(ips)
        self.log.debug(
            'create: domain=%s, subdomain=%s, ips=%s', domain, subdomain, ips
        )
        self._client.glue_create(domain, subdomain, ips)
        return GlueRecordState(domain=domain, subdomain=subdomain, ips=ips)

    def read(self, state: GlueRecordState) -> Optional[GlueRecordState]:
        self.log.debug('read: id=%s', state.id)
        expected = state.hostname
        for record in self._client.glue_records(state.domain):
            if record.hostname == expected:
                return GlueRecordState(
                    domain=state.domain,
                    subdomain=state.subdomain,
                    ips=list(record.ips),
                )
        self.log.info('read:   %s no longer exists', expected)
        return None

    def update(
        self, domain: str, subdomain: str, ips: Iterable[str]
    ) -> GlueRecordState:
        ips = _unique(ips)
        self.log.debug(
            'update: domain=%s, subdomain=%s, ips=%s', domain, subdomain, ips
        )
        self._client.glue_update(domain, subdomain, ips)
        return GlueRecordState(domain=domain, subdomain=subdomain, ips=ips)

    def delete(self, state: GlueRecordState) -> None:
        self.log.debug('delete: id=%s', state.id)
        self._client.glue_delete(state.domain, state.subdomain)

    def import_state(self, import_id: str) -> GlueRecordState:
        """Seed domain and subdomain from the id; ``read`` fills in ips."""
        domain, subdomain = parse_import_id(import_id)
        self.log.debug('import_state: id=%s', import_id)
        return GlueRecordState(domain=domain, subdomain=subdomain, id=import_id)
