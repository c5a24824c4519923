#
#
#

import logging
import shlex
from collections import defaultdict

from octodns.provider.base import BaseProvider
from octodns.record import Record

from .exceptions import (
    PorkbunApiFailure,
    PorkbunClientException,
    PorkbunConfigError,
    PorkbunDecodeError,
    PorkbunImportIdError,
    PorkbunTimeout,
    PorkbunTransportError,
)

__version__ = '0.1.0'

from .client import PorkbunClient  # noqa: E402
from .config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, PorkbunConfig  # noqa: E402
from .glue import GlueIPs, GlueRecord  # noqa: E402
from .models import DNSRecord, relative_name  # noqa: E402
from .resources import GlueRecordResource, GlueRecordState  # noqa: E402

__all__ = [
    'DNSRecord',
    'GlueIPs',
    'GlueRecord',
    'GlueRecordResource',
    'GlueRecordState',
    'PorkbunApiFailure',
    'PorkbunClient',
    'PorkbunClientException',
    'PorkbunConfig',
    'PorkbunConfigError',
    'PorkbunDecodeError',
    'PorkbunImportIdError',
    'PorkbunProvider',
    'PorkbunTimeout',
    'PorkbunTransportError',
]

DEFAULT_TTL = 600


class PorkbunProvider(BaseProvider):
    SUPPORTS_GEO = False
    SUPPORTS_DYNAMIC = False
    # apex NS is managed through the registrar's nameserver setting
    SUPPORTS_ROOT_NS = False
    SUPPORTS = set(
        ('A', 'AAAA', 'CAA', 'CNAME', 'MX', 'NS', 'SRV', 'TXT')
    )

    def __init__(self, id, api_key, secret_api_key, *args, **kwargs):
        self.log = logging.getLogger(f'PorkbunProvider[{id}]')
        base_url = kwargs.pop('base_url', DEFAULT_BASE_URL)
        timeout = kwargs.pop('timeout', DEFAULT_TIMEOUT)
        self.log.debug(
            '__init__: id=%s, api_key=***, secret_api_key=***, base_url=%s',
            id,
            base_url,
        )
        super().__init__(id, *args, **kwargs)

        config = PorkbunConfig(
            api_key=api_key,
            secret_api_key=secret_api_key,
            base_url=base_url,
            timeout=timeout,
        )
        self._client = PorkbunClient(config)

        self._zone_records = {}

    def _append_dot(self, value):
        if value == '@' or value[-1] == '.':
            return value
        return f'{value}.'

    def _strip_dot(self, value):
        return value[:-1] if value.endswith('.') else value

    def _record_ttl(self, record):
        return int(record.ttl) if record.ttl else DEFAULT_TTL

    def _data_for_multiple(self, _type, records):
        values = [record.content.replace(';', '\\;') for record in records]
        return {
            'ttl': self._record_ttl(records[0]),
            'type': _type,
            'values': values,
        }

    _data_for_A = _data_for_multiple
    _data_for_AAAA = _data_for_multiple
    _data_for_TXT = _data_for_multiple

    def _data_for_CAA(self, _type, records):
        values = []
        for record in records:
            raw = record.content
            try:
                parts = shlex.split(raw)
                if len(parts) < 3:
                    raise ValueError('CAA rdata must have at least 3 tokens')
                values.append(
                    {'flags': int(parts[0]), 'tag': parts[1], 'value': parts[2]}
                )
            except ValueError as e:
                self.log.warning(
                    '_data_for_CAA: failed to parse CAA record %r: %s, '
                    'using fallback values (flags=0, tag=issue)',
                    raw,
                    e,
                )
                values.append({'flags': 0, 'tag': 'issue', 'value': raw})
        return {
            'ttl': self._record_ttl(records[0]),
            'type': _type,
            'values': values,
        }

    def _data_for_CNAME(self, _type, records):
        record = records[0]
        return {
            'ttl': self._record_ttl(record),
            'type': _type,
            'value': self._append_dot(record.content),
        }

    def _data_for_MX(self, _type, records):
        values = []
        for record in records:
            values.append(
                {
                    'preference': int(record.prio or 0),
                    'exchange': self._append_dot(record.content.strip()),
                }
            )
        return {
            'ttl': self._record_ttl(records[0]),
            'type': _type,
            'values': values,
        }

    def _data_for_NS(self, _type, records):
        return {
            'ttl': self._record_ttl(records[0]),
            'type': _type,
            'values': [self._append_dot(r.content) for r in records],
        }

    def _data_for_SRV(self, _type, records):
        values = []
        for record in records:
            # priority travels in prio, content is 'weight port target'
            weight, port, target = record.content.split()
            values.append(
                {
                    'port': int(port),
                    'priority': int(record.prio or 0),
                    'target': self._append_dot(target),
                    'weight': int(weight),
                }
            )
        return {
            'ttl': self._record_ttl(records[0]),
            'type': _type,
            'values': values,
        }

    def list_zones(self):
        self.log.debug('list_zones:')
        domains = []
        for d in self._client.domains():
            name = d.get('domain') if isinstance(d, dict) else None
            if name:
                domains.append(f'{name}.')
        return sorted(domains)

    def zone_records(self, zone):
        if zone.name not in self._zone_records:
            domain = zone.name[:-1]
            try:
                records = self._client.dns_records(domain)
            except PorkbunApiFailure as e:
                self.log.debug(
                    'zone_records: no records for %s: %s', domain, e
                )
                return []
            for record in records:
                record.name = relative_name(record.name, domain)
            self._zone_records[zone.name] = records

        return self._zone_records[zone.name]

    def populate(self, zone, target=False, lenient=False):
        self.log.debug(
            'populate: name=%s, target=%s, lenient=%s',
            zone.name,
            target,
            lenient,
        )

        values = defaultdict(lambda: defaultdict(list))
        for record in self.zone_records(zone):
            _type = record.type
            if _type not in self.SUPPORTS:
                self.log.warning(
                    'populate: skipping unsupported %s record', _type
                )
                continue
            if _type == 'NS' and record.name == '':
                continue
            values[record.name][_type].append(record)

        before = len(zone.records)
        for name, types in values.items():
            for _type, records in types.items():
                data_for = getattr(self, f'_data_for_{_type}')
                record = Record.new(
                    zone,
                    name,
                    data_for(_type, records),
                    source=self,
                    lenient=lenient,
                )
                zone.add_record(record, lenient=lenient)

        exists = zone.name in self._zone_records
        self.log.info(
            'populate:   found %s records, exists=%s',
            len(zone.records) - before,
            exists,
        )
        return exists

    def _params_for_multiple(self, record):
        for value in record.values:
            yield DNSRecord(
                name=record.name,
                type=record._type,
                content=value.replace('\\;', ';'),
                ttl=str(record.ttl),
            )

    _params_for_A = _params_for_multiple
    _params_for_AAAA = _params_for_multiple
    _params_for_TXT = _params_for_multiple

    def _params_for_NS(self, record):
        for value in record.values:
            yield DNSRecord(
                name=record.name,
                type=record._type,
                content=self._strip_dot(value),
                ttl=str(record.ttl),
            )

    def _params_for_CAA(self, record):
        for value in record.values:
            yield DNSRecord(
                name=record.name,
                type=record._type,
                content=f'{value.flags} {value.tag} "{value.value}"',
                ttl=str(record.ttl),
            )

    def _params_for_CNAME(self, record):
        yield DNSRecord(
            name=record.name,
            type=record._type,
            content=self._strip_dot(record.value),
            ttl=str(record.ttl),
        )

    def _params_for_MX(self, record):
        for value in record.values:
            yield DNSRecord(
                name=record.name,
                type=record._type,
                content=self._strip_dot(value.exchange),
                ttl=str(record.ttl),
                prio=str(value.preference),
            )

    def _params_for_SRV(self, record):
        for value in record.values:
            yield DNSRecord(
                name=record.name,
                type=record._type,
                content=f'{value.weight} {value.port} {self._strip_dot(value.target)}',
                ttl=str(record.ttl),
                prio=str(value.priority),
            )

    def _apply_Create(self, domain, change):
        new = change.new
        params_for = getattr(self, f'_params_for_{new._type}')
        for params in params_for(new):
            self._client.dns_record_create(domain, params)

    def _apply_Update(self, domain, change):
        # It's simpler to delete-then-recreate than to match up record ids
        self._apply_Delete(domain, change)
        self._apply_Create(domain, change)

    def _apply_Delete(self, domain, change):
        existing = change.existing
        for record in self.zone_records(existing.zone):
            if (
                existing.name == record.name
                and existing._type == record.type
            ):
                self._client.dns_record_delete(domain, record.id)

    def _apply(self, plan):
        desired = plan.desired
        changes = plan.changes
        self.log.debug(
            '_apply: zone=%s, len(changes)=%d', desired.name, len(changes)
        )

        domain = desired.name[:-1]
        for change in changes:
            class_name = change.__class__.__name__
            getattr(self, f'_apply_{class_name}')(domain, change)

        # Clear out the cache if any
        self._zone_records.pop(desired.name, None)
