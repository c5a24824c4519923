"""
Translation between the registrar's glue host list and GlueRecord values.

The registrar answers ``getGlue`` with an untyped array of pairs::

    "hosts": [
        ["ns1.example.com", {"v4": ["192.0.2.1"], "v6": ["2001:db8::1"]}],
        ...
    ]

Notes
- The first element of each pair is the full hostname, not the subdomain the
  record was created with. GlueRecord keeps it as ``hostname`` and derives
  ``subdomain`` from it, so callers never have to guess which one they hold.
- Nothing about the payload is schema validated upstream. Pairs that do not
  have the expected shape are skipped with a warning and the rest of the list
  is still returned.
- Requests send a single mixed list of addresses; the v4/v6 split only exists
  in responses.
"""

import logging
from dataclasses import dataclass, field
from ipaddress import IPv4Address
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .exceptions import PorkbunDecodeError

log = logging.getLogger('GlueTranslator')


def is_ipv4(ip: str) -> bool:
    try:
        IPv4Address(ip)
    except ValueError:
        return False
    return True


@dataclass(frozen=True)
class GlueIPs:
    v4: Tuple[str, ...] = ()
    v6: Tuple[str, ...] = ()

    @classmethod
    def split_ips(cls, ips: Iterable[str]) -> 'GlueIPs':
        """Group a mixed address list by family, keeping the given order.

        Anything that is not a dotted-decimal IPv4 literal, malformed input
        included, lands in the v6 bucket.
        """
        v4 = []
        v6 = []
        for ip in ips:
            (v4 if is_ipv4(ip) else v6).append(ip)
        return cls(v4=tuple(v4), v6=tuple(v6))

    @property
    def ips(self) -> List[str]:
        return list(self.v4) + list(self.v6)

    def to_wire(self) -> Dict[str, List[str]]:
        return {'v4': list(self.v4), 'v6': list(self.v6)}


@dataclass(frozen=True)
class GlueRecord:
    domain: str
    hostname: str
    ips: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def subdomain(self) -> Optional[str]:
        """The hostname with ``.domain`` removed, None if not under domain."""
        suffix = f'.{self.domain}'
        if self.hostname.endswith(suffix) and len(self.hostname) > len(
            suffix
        ):
            return self.hostname[: -len(suffix)]
        return None


def hostname_for(domain: str, subdomain: str) -> str:
    return f'{subdomain}.{domain}'


def _strings(values: Any) -> List[str]:
    if not isinstance(values, list):
        return []
    return [v for v in values if isinstance(v, str)]


def glue_records_from_hosts(domain: str, hosts: Any) -> List[GlueRecord]:
    """Decode a ``hosts`` payload into GlueRecords, in payload order."""
    if hosts is None:
        return []
    if not isinstance(hosts, list):
        raise PorkbunDecodeError(
            f'Expected glue hosts to be a list, got {type(hosts).__name__}'
        )

    records = []
    for host in hosts:
        if not isinstance(host, list) or len(host) != 2:
            log.warning('glue_records_from_hosts: skipping %r', host)
            continue
        hostname, addresses = host
        if not isinstance(hostname, str) or not isinstance(addresses, dict):
            log.warning('glue_records_from_hosts: skipping %r', host)
            continue
        ips = _strings(addresses.get('v4')) + _strings(addresses.get('v6'))
        records.append(
            GlueRecord(domain=domain, hostname=hostname, ips=tuple(ips))
        )
    return records


def hosts_from_glue(
    domain: str, glue: Dict[str, Sequence[str]]
) -> List[List[Any]]:
    """Encode ``{subdomain: ips}`` the way ``getGlue`` answers."""
    return [
        [hostname_for(domain, subdomain), GlueIPs.split_ips(ips).to_wire()]
        for subdomain, ips in glue.items()
    ]
