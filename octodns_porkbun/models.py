#
#
#

from dataclasses import dataclass
from typing import Dict, Optional


def _str_or_none(value):
    if value is None or value == '':
        return None
    return str(value)


def relative_name(name: str, domain: str) -> str:
    """Strip the domain from a registrar FQDN, '' for the apex."""
    if name == domain:
        return ''
    suffix = f'.{domain}'
    if name.endswith(suffix):
        return name[: -len(suffix)]
    return name


@dataclass
class DNSRecord:
    """A single registrar DNS record.

    ``name`` is whatever the caller supplied on the way in (relative to the
    domain) and the registrar's FQDN on the way out. Ids, ttls and prios are
    kept as strings because the registrar is not consistent about sending
    them as numbers or strings.
    """

    name: str
    type: str
    content: str
    id: Optional[str] = None
    ttl: Optional[str] = None
    prio: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_wire(cls, data: Dict) -> 'DNSRecord':
        return cls(
            id=_str_or_none(data.get('id')),
            name=data.get('name') or '',
            type=data.get('type') or '',
            content=data.get('content') or '',
            ttl=_str_or_none(data.get('ttl')),
            prio=_str_or_none(data.get('prio')),
            notes=data.get('notes') or None,
        )

    def to_wire(self, domain: str) -> Dict:
        payload = {
            'name': relative_name(self.name, domain),
            'type': self.type,
            'content': self.content,
        }
        if self.id is not None:
            payload['id'] = str(self.id)
        if self.ttl is not None:
            payload['ttl'] = str(self.ttl)
        if self.prio is not None:
            payload['prio'] = str(self.prio)
        if self.notes is not None:
            payload['notes'] = self.notes
        return payload
