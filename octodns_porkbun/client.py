#
#
#

import logging

from requests import RequestException, Session, Timeout
from requests.utils import quote

from octodns import __VERSION__ as octodns_version

from . import __version__ as package_version
from .exceptions import (
    PorkbunApiFailure,
    PorkbunDecodeError,
    PorkbunTimeout,
    PorkbunTransportError,
)
from .glue import glue_records_from_hosts
from .models import DNSRecord

SUCCESS = 'SUCCESS'


class PorkbunClient(object):
    # listAll returns at most this many domains per call
    DOMAINS_PAGE_SIZE = 1000

    def __init__(self, config, session=None):
        self.log = logging.getLogger('PorkbunClient')
        self._config = config
        if session is None:
            session = Session()
        session.headers.update(
            {
                'User-Agent': f'octodns/{octodns_version} octodns-porkbun/{package_version}',
            }
        )
        self._session = session

    def _do(self, *segments, data=None):
        """POST to the joined path and return the SUCCESS envelope.

        Every call is authenticated in the body. Anything other than a
        SUCCESS status is raised as PorkbunApiFailure, whatever the HTTP
        status code was.
        """
        # escaped one by one so a '?', '#' or '/' inside a name stays part
        # of that segment
        path = '/'.join(quote(str(s), safe='') for s in segments)
        url = f'{self._config.base_url}/{path}'
        body = dict(data or {})
        body.update(self._config.auth())
        self.log.debug('_do: path=%s', path)

        try:
            response = self._session.post(
                url, json=body, timeout=self._config.timeout
            )
        except Timeout as e:
            raise PorkbunTimeout(f'{path}: {e}') from e
        except RequestException as e:
            raise PorkbunTransportError(f'{path}: {e}') from e

        try:
            envelope = response.json()
        except ValueError as e:
            if response.status_code >= 400:
                raise PorkbunTransportError(
                    f'{path}: HTTP {response.status_code}'
                ) from e
            raise PorkbunDecodeError(f'{path}: response is not JSON') from e

        if not isinstance(envelope, dict):
            raise PorkbunDecodeError(
                f'{path}: expected a JSON object, got '
                f'{type(envelope).__name__}'
            )

        status = envelope.get('status')
        if status != SUCCESS:
            self.log.debug(
                '_do:   path=%s, status=%s, http=%d',
                path,
                status,
                response.status_code,
            )
            raise PorkbunApiFailure(
                envelope.get('message'),
                status=status,
                status_code=response.status_code,
            )
        return envelope

    def ping(self):
        return self._do('ping').get('yourIp')

    def domains(self):
        ret = []

        start = 0
        while True:
            data = self._do('domain', 'listAll', data={'start': str(start)})
            page = data.get('domains') or []
            ret += page

            # a short page is the last one
            if len(page) < self.DOMAINS_PAGE_SIZE:
                break

            start += len(page)

        return ret

    def nameservers(self, domain):
        return self._do('domain', 'getNs', domain).get('ns') or []

    def nameservers_update(self, domain, nameservers):
        self._do('domain', 'updateNs', domain, data={'ns': list(nameservers)})

    # --- Glue records -----------------------------------------------------

    def glue_create(self, domain, subdomain, ips):
        self._do(
            'domain', 'createGlue', domain, subdomain, data={'ips': list(ips)}
        )

    def glue_update(self, domain, subdomain, ips):
        # Replaces the whole address list; the registrar does not require the
        # host to exist first.
        self._do(
            'domain', 'updateGlue', domain, subdomain, data={'ips': list(ips)}
        )

    def glue_delete(self, domain, subdomain):
        self._do('domain', 'deleteGlue', domain, subdomain)

    def glue_records(self, domain):
        envelope = self._do('domain', 'getGlue', domain)
        return glue_records_from_hosts(domain, envelope.get('hosts'))

    # --- DNS records ------------------------------------------------------

    def _records(self, envelope):
        records = envelope.get('records')
        if records is None:
            return []
        if not isinstance(records, list):
            raise PorkbunDecodeError(
                f'Expected records to be a list, got {type(records).__name__}'
            )
        return [DNSRecord.from_wire(r) for r in records if isinstance(r, dict)]

    def dns_records(self, domain):
        return self._records(self._do('dns', 'retrieve', domain))

    def dns_record_get(self, domain, record_id):
        """Fetch one record by id.

        The registrar answers an unknown id with a FAILURE envelope, which is
        raised as PorkbunApiFailure like any other failure; it carries the
        same status as bad credentials or an unknown domain, so it is not
        turned into None here. None is only returned for a SUCCESS envelope
        with no records in it.
        """
        records = self._records(
            self._do('dns', 'retrieve', domain, str(record_id))
        )
        return records[0] if records else None

    def dns_record_create(self, domain, record):
        """Create a record and return its id.

        A ``record.id`` set by the caller is sent along and used; without one
        the registrar assigns the id.
        """
        envelope = self._do('dns', 'create', domain, data=record.to_wire(domain))
        record_id = envelope.get('id')
        if record_id is None:
            raise PorkbunDecodeError('dns/create: response is missing an id')
        return str(record_id)

    def dns_record_update(self, domain, record_id, record):
        self._do(
            'dns', 'edit', domain, str(record_id), data=record.to_wire(domain)
        )

    def dns_record_delete(self, domain, record_id):
        self._do('dns', 'delete', domain, str(record_id))
