"""
In-memory stand-in for the registrar API.

FakeRegistrar is a requests transport adapter, so a real PorkbunClient can
be pointed at it by mounting it on a Session; no sockets are opened.

Notes
- Only domains passed to the constructor exist; anything else answers the
  way the registrar does for a domain that is not in the account.
- Glue updates upsert unconditionally and deletes of unknown hosts succeed.
- getGlue groups each host's addresses by family, so IP order across
  families is not preserved.
"""

import json
from itertools import count
from typing import Dict, Iterable, List
from urllib.parse import unquote, urlparse

from requests import Response, Session
from requests.adapters import BaseAdapter

from .config import PorkbunConfig
from .glue import hosts_from_glue

FAKE_BASE_URL = 'https://porkbun.fake/api/json/v3'


class FakeRegistrar(BaseAdapter):
    def __init__(
        self,
        domains: Iterable[str] = (),
        api_key: str = 'pk1_fake',
        secret_api_key: str = 'sk1_fake',
        base_url: str = FAKE_BASE_URL,
    ):
        super().__init__()
        self.api_key = api_key
        self.secret_api_key = secret_api_key
        self.base_url = base_url
        self.base_path = urlparse(base_url).path.rstrip('/')
        self.glue: Dict[str, Dict[str, List[str]]] = {d: {} for d in domains}
        self.dns: Dict[str, List[Dict]] = {d: [] for d in domains}
        self.nameservers: Dict[str, List[str]] = {d: [] for d in domains}
        self.requests: List[str] = []
        self._ids = count(1000)
        # domains per listAll page
        self.page_size = 1000

        self._routes = {
            'ping': self._ping,
            'domain/listAll': self._list_all,
            'domain/getNs': self._get_ns,
            'domain/updateNs': self._update_ns,
            'domain/createGlue': self._upsert_glue,
            'domain/updateGlue': self._upsert_glue,
            'domain/deleteGlue': self._delete_glue,
            'domain/getGlue': self._get_glue,
            'dns/create': self._dns_create,
            'dns/retrieve': self._dns_retrieve,
            'dns/edit': self._dns_edit,
            'dns/delete': self._dns_delete,
        }

    # --- Wiring -------------------------------------------------------------

    def config(self) -> PorkbunConfig:
        return PorkbunConfig(
            api_key=self.api_key,
            secret_api_key=self.secret_api_key,
            base_url=self.base_url,
        )

    def session(self) -> Session:
        session = Session()
        session.mount(self.base_url, self)
        return session

    def send(self, request, **kwargs):
        path = urlparse(request.url).path[len(self.base_path) :].strip('/')
        self.requests.append(path)
        body = json.loads(request.body) if request.body else {}

        if (
            body.get('apikey') != self.api_key
            or body.get('secretapikey') != self.secret_api_key
        ):
            return self._respond(
                request, self._failure('Invalid API key.'), status_code=400
            )

        segments = [unquote(s) for s in path.split('/')]
        for depth in (2, 1):
            handler = self._routes.get('/'.join(segments[:depth]))
            if handler is not None:
                payload = handler(segments[depth:], body)
                return self._respond(request, payload)
        return self._respond(
            request, self._failure('Not found.'), status_code=404
        )

    def close(self):
        pass

    def _respond(self, request, payload, status_code=200):
        response = Response()
        response.status_code = status_code
        response.headers['Content-Type'] = 'application/json'
        response._content = json.dumps(payload).encode('utf-8')
        response.encoding = 'utf-8'
        response.url = request.url
        response.request = request
        return response

    def _failure(self, message):
        return {'status': 'FAILURE', 'message': message}

    def _success(self, **kwargs):
        return dict(status='SUCCESS', **kwargs)

    def _unknown_domain(self, domain):
        return domain not in self.glue

    # --- Handlers -----------------------------------------------------------

    def _ping(self, args, body):
        return self._success(yourIp='127.0.0.1')

    def _list_all(self, args, body):
        start = int(body.get('start') or 0)
        names = sorted(self.glue)[start : start + self.page_size]
        return self._success(domains=[{'domain': d} for d in names])

    def _get_ns(self, args, body):
        domain = args[0]
        if self._unknown_domain(domain):
            return self._failure('Invalid domain.')
        return self._success(ns=self.nameservers[domain])

    def _update_ns(self, args, body):
        domain = args[0]
        if self._unknown_domain(domain):
            return self._failure('Invalid domain.')
        self.nameservers[domain] = list(body.get('ns') or [])
        return self._success()

    def _upsert_glue(self, args, body):
        domain, subdomain = args
        if self._unknown_domain(domain):
            return self._failure('Invalid domain.')
        self.glue[domain][subdomain] = list(body.get('ips') or [])
        return self._success()

    def _delete_glue(self, args, body):
        domain, subdomain = args
        if self._unknown_domain(domain):
            return self._failure('Invalid domain.')
        self.glue[domain].pop(subdomain, None)
        return self._success()

    def _get_glue(self, args, body):
        domain = args[0]
        if self._unknown_domain(domain):
            return self._failure('Invalid domain.')
        return self._success(hosts=hosts_from_glue(domain, self.glue[domain]))

    def _find(self, domain, record_id):
        for record in self.dns[domain]:
            if record['id'] == record_id:
                return record
        return None

    def _fqdn(self, name, domain):
        return f'{name}.{domain}' if name else domain

    def _dns_create(self, args, body):
        domain = args[0]
        if self._unknown_domain(domain):
            return self._failure('Invalid domain.')
        # a supplied id is kept, otherwise one is assigned; the registrar
        # answers with a numeric id while records carry strings
        record_id = body.get('id') or next(self._ids)
        self.dns[domain].append(
            {
                'id': str(record_id),
                'name': self._fqdn(body.get('name'), domain),
                'type': body.get('type'),
                'content': body.get('content'),
                'ttl': body.get('ttl') or '600',
                'prio': body.get('prio') or '0',
                'notes': body.get('notes') or '',
            }
        )
        return self._success(id=record_id)

    def _dns_retrieve(self, args, body):
        domain = args[0]
        if self._unknown_domain(domain):
            return self._failure('Invalid domain.')
        if len(args) > 1:
            record = self._find(domain, args[1])
            if record is None:
                return self._failure('Record not found')
            return self._success(records=[record])
        return self._success(records=list(self.dns[domain]))

    def _dns_edit(self, args, body):
        domain, record_id = args
        if self._unknown_domain(domain):
            return self._failure('Invalid domain.')
        record = self._find(domain, record_id)
        if record is None:
            return self._failure('Edit error: We were unable to edit the DNS record.')
        record.update(
            name=self._fqdn(body.get('name'), domain),
            type=body.get('type'),
            content=body.get('content'),
        )
        if body.get('ttl'):
            record['ttl'] = body['ttl']
        if body.get('prio'):
            record['prio'] = body['prio']
        return self._success()

    def _dns_delete(self, args, body):
        domain, record_id = args
        if self._unknown_domain(domain):
            return self._failure('Invalid domain.')
        record = self._find(domain, record_id)
        if record is None:
            return self._failure('Invalid record id.')
        self.dns[domain].remove(record)
        return self._success()
