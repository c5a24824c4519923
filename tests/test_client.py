#
# Tests for the registrar wire client, against the in-memory registrar and
# against a mocked session for transport level failures
#

from unittest import TestCase
from unittest.mock import Mock

from requests import ConnectionError, Timeout

from octodns_porkbun.client import PorkbunClient
from octodns_porkbun.config import PorkbunConfig
from octodns_porkbun.exceptions import (
    PorkbunApiFailure,
    PorkbunClientException,
    PorkbunDecodeError,
    PorkbunTimeout,
    PorkbunTransportError,
)
from octodns_porkbun.fake import FakeRegistrar
from octodns_porkbun.glue import GlueRecord
from octodns_porkbun.models import DNSRecord


class TestClientAgainstFakeRegistrar(TestCase):
    def setUp(self):
        self.registrar = FakeRegistrar(domains=['example.com'])
        self.client = PorkbunClient(
            self.registrar.config(), session=self.registrar.session()
        )

    def test_glue_create_and_list(self):
        self.client.glue_create(
            'example.com', 'ns1', ['192.168.1.1', '2001:db8::1']
        )
        self.assertEqual(
            {'ns1': ['192.168.1.1', '2001:db8::1']},
            self.registrar.glue['example.com'],
        )
        self.assertEqual(
            [
                GlueRecord(
                    'example.com',
                    'ns1.example.com',
                    ('192.168.1.1', '2001:db8::1'),
                )
            ],
            self.client.glue_records('example.com'),
        )
        self.assertEqual(
            ['domain/createGlue/example.com/ns1', 'domain/getGlue/example.com'],
            self.registrar.requests,
        )

    def test_glue_update_upserts(self):
        # no prior create
        self.client.glue_update('example.com', 'ns2', ['192.0.2.2'])
        self.client.glue_update('example.com', 'ns2', ['192.0.2.2'])
        self.assertEqual(
            {'ns2': ['192.0.2.2']}, self.registrar.glue['example.com']
        )

    def test_glue_delete_missing_host_succeeds(self):
        self.client.glue_delete('example.com', 'nope')
        self.assertEqual({}, self.registrar.glue['example.com'])

    def test_unknown_domain_is_an_api_failure(self):
        with self.assertRaises(PorkbunApiFailure) as ctx:
            self.client.glue_records('unknown.com')
        self.assertEqual('Invalid domain.', ctx.exception.message)
        self.assertEqual('FAILURE', ctx.exception.status)
        # transport succeeded, the envelope carried the failure
        self.assertEqual(200, ctx.exception.status_code)

    def test_bad_credentials(self):
        client = PorkbunClient(
            PorkbunConfig(
                api_key='pk1_wrong',
                secret_api_key='sk1_wrong',
                base_url=self.registrar.base_url,
            ),
            session=self.registrar.session(),
        )
        with self.assertRaises(PorkbunApiFailure) as ctx:
            client.ping()
        self.assertEqual('Invalid API key.', str(ctx.exception))
        self.assertEqual(400, ctx.exception.status_code)

    def test_ping_and_domains(self):
        self.assertEqual('127.0.0.1', self.client.ping())
        self.assertEqual([{'domain': 'example.com'}], self.client.domains())

    def test_nameservers(self):
        self.assertEqual([], self.client.nameservers('example.com'))
        self.client.nameservers_update(
            'example.com', ['ns1.example.com', 'ns2.example.com']
        )
        self.assertEqual(
            ['ns1.example.com', 'ns2.example.com'],
            self.client.nameservers('example.com'),
        )

    def test_dns_record_crud(self):
        record_id = self.client.dns_record_create(
            'example.com',
            DNSRecord(name='www', type='A', content='192.0.2.10', ttl='600'),
        )
        # numeric on the wire, always a string here
        self.assertIsInstance(record_id, str)

        fetched = self.client.dns_record_get('example.com', record_id)
        self.assertEqual(
            DNSRecord(
                id=record_id,
                name='www.example.com',
                type='A',
                content='192.0.2.10',
                ttl='600',
                prio='0',
            ),
            fetched,
        )

        self.client.dns_record_update(
            'example.com',
            record_id,
            DNSRecord(name='www', type='A', content='192.0.2.11'),
        )
        self.assertEqual(
            '192.0.2.11',
            self.client.dns_record_get('example.com', record_id).content,
        )
        self.assertEqual(1, len(self.client.dns_records('example.com')))

        self.client.dns_record_delete('example.com', record_id)
        with self.assertRaises(PorkbunApiFailure) as ctx:
            self.client.dns_record_get('example.com', record_id)
        self.assertEqual('Record not found', ctx.exception.message)
        self.assertEqual([], self.client.dns_records('example.com'))

    def test_dns_record_delete_missing(self):
        with self.assertRaises(PorkbunApiFailure):
            self.client.dns_record_delete('example.com', '1')

    def test_dns_record_create_keeps_supplied_id(self):
        record_id = self.client.dns_record_create(
            'example.com',
            DNSRecord(id='42', name='www', type='A', content='192.0.2.1'),
        )
        self.assertEqual('42', record_id)
        self.assertEqual(
            '192.0.2.1',
            self.client.dns_record_get('example.com', '42').content,
        )

        assigned = self.client.dns_record_create(
            'example.com', DNSRecord(name='mail', type='A', content='192.0.2.2')
        )
        self.assertNotEqual('42', assigned)
        self.assertEqual(
            ['42', assigned],
            [r.id for r in self.client.dns_records('example.com')],
        )

    def test_names_with_url_delimiters_stay_in_their_segment(self):
        self.client.glue_create('example.com', 'ns1', ['192.0.2.1'])
        self.client.glue_delete('example.com', 'ns1?x=1#y')
        self.assertEqual(
            {'ns1': ['192.0.2.1']}, self.registrar.glue['example.com']
        )

        self.client.glue_create('example.com', 'ns2/x', ['192.0.2.2'])
        self.assertEqual(
            ['192.0.2.2'], self.registrar.glue['example.com']['ns2/x']
        )

    def test_domains_follows_pages(self):
        names = ['a.tests', 'b.tests', 'c.tests', 'd.tests', 'e.tests']
        registrar = FakeRegistrar(domains=names)
        registrar.page_size = 2
        client = PorkbunClient(registrar.config(), session=registrar.session())
        client.DOMAINS_PAGE_SIZE = 2

        self.assertEqual(
            [{'domain': n} for n in names], client.domains()
        )
        self.assertEqual(['domain/listAll'] * 3, registrar.requests)

    def test_domains_exact_multiple_of_page_size(self):
        registrar = FakeRegistrar(domains=['a.tests', 'b.tests'])
        registrar.page_size = 2
        client = PorkbunClient(registrar.config(), session=registrar.session())
        client.DOMAINS_PAGE_SIZE = 2

        self.assertEqual(2, len(client.domains()))
        # the trailing empty page ends the loop
        self.assertEqual(['domain/listAll'] * 2, registrar.requests)


class TestClientEnvelopes(TestCase):
    def _client(self, response=None, side_effect=None):
        session = Mock()
        session.headers = {}
        session.post.return_value = response
        session.post.side_effect = side_effect
        config = PorkbunConfig(
            api_key='pk1', secret_api_key='sk1', base_url='https://api.test/'
        )
        return PorkbunClient(config, session=session), session

    def _response(self, status_code=200, body=None, json_error=None):
        response = Mock(status_code=status_code)
        if json_error is not None:
            response.json.side_effect = json_error
        else:
            response.json.return_value = body
        return response

    def test_request_shape(self):
        client, session = self._client(self._response(body={'status': 'SUCCESS'}))
        client.glue_create('example.com', 'ns1', ('192.0.2.1',))
        session.post.assert_called_once_with(
            'https://api.test/domain/createGlue/example.com/ns1',
            json={
                'ips': ['192.0.2.1'],
                'apikey': 'pk1',
                'secretapikey': 'sk1',
            },
            timeout=30,
        )
        self.assertIn('octodns-porkbun/', session.headers['User-Agent'])

    def test_delete_sends_only_credentials(self):
        client, session = self._client(self._response(body={'status': 'SUCCESS'}))
        client.glue_delete('example.com', 'ns1')
        session.post.assert_called_once_with(
            'https://api.test/domain/deleteGlue/example.com/ns1',
            json={'apikey': 'pk1', 'secretapikey': 'sk1'},
            timeout=30,
        )

    def test_path_segments_are_escaped(self):
        client, session = self._client(self._response(body={'status': 'SUCCESS'}))
        client.glue_delete('example.com', 'ns1?x=1#y')
        session.post.assert_called_once_with(
            'https://api.test/domain/deleteGlue/example.com/ns1%3Fx%3D1%23y',
            json={'apikey': 'pk1', 'secretapikey': 'sk1'},
            timeout=30,
        )

    def test_dns_create_sends_supplied_id(self):
        client, session = self._client(
            self._response(body={'status': 'SUCCESS', 'id': 42})
        )
        record_id = client.dns_record_create(
            'example.com',
            DNSRecord(id='42', name='www', type='A', content='192.0.2.1'),
        )
        self.assertEqual('42', record_id)
        session.post.assert_called_once_with(
            'https://api.test/dns/create/example.com',
            json={
                'name': 'www',
                'type': 'A',
                'content': '192.0.2.1',
                'id': '42',
                'apikey': 'pk1',
                'secretapikey': 'sk1',
            },
            timeout=30,
        )

    def test_dns_create_without_id_lets_the_registrar_assign(self):
        client, session = self._client(
            self._response(body={'status': 'SUCCESS', 'id': 106926659})
        )
        record_id = client.dns_record_create(
            'example.com', DNSRecord(name='www', type='A', content='192.0.2.1')
        )
        self.assertEqual('106926659', record_id)
        self.assertNotIn('id', session.post.call_args[1]['json'])

    def test_dns_record_get_with_no_records_is_none(self):
        client, _ = self._client(
            self._response(body={'status': 'SUCCESS', 'records': []})
        )
        self.assertIsNone(client.dns_record_get('example.com', '7'))

    def test_domains_request_shape(self):
        client, session = self._client(
            self._response(
                body={'status': 'SUCCESS', 'domains': [{'domain': 'a.tests'}]}
            )
        )
        self.assertEqual([{'domain': 'a.tests'}], client.domains())
        session.post.assert_called_once_with(
            'https://api.test/domain/listAll',
            json={'start': '0', 'apikey': 'pk1', 'secretapikey': 'sk1'},
            timeout=30,
        )

    def test_missing_status_is_a_failure(self):
        client, _ = self._client(self._response(body={'hosts': []}))
        with self.assertRaises(PorkbunApiFailure) as ctx:
            client.glue_records('example.com')
        self.assertIsNone(ctx.exception.status)

    def test_error_status_with_message(self):
        client, _ = self._client(
            self._response(
                status_code=400,
                body={'status': 'ERROR', 'message': 'Invalid domain.'},
            )
        )
        with self.assertRaises(PorkbunApiFailure) as ctx:
            client.glue_records('example.com')
        self.assertEqual('Invalid domain.', str(ctx.exception))

    def test_unparseable_body_is_a_decode_error(self):
        client, _ = self._client(
            self._response(json_error=ValueError('Expecting value'))
        )
        with self.assertRaises(PorkbunDecodeError):
            client.glue_records('example.com')

    def test_non_object_envelope_is_a_decode_error(self):
        client, _ = self._client(self._response(body=['SUCCESS']))
        with self.assertRaises(PorkbunDecodeError):
            client.glue_records('example.com')

    def test_bad_hosts_shape_is_a_decode_error(self):
        client, _ = self._client(
            self._response(body={'status': 'SUCCESS', 'hosts': 'ns1'})
        )
        with self.assertRaises(PorkbunDecodeError):
            client.glue_records('example.com')

    def test_unparseable_error_page_is_a_transport_error(self):
        client, _ = self._client(
            self._response(
                status_code=502, json_error=ValueError('Expecting value')
            )
        )
        with self.assertRaises(PorkbunTransportError) as ctx:
            client.glue_records('example.com')
        self.assertNotIsInstance(ctx.exception, PorkbunDecodeError)

    def test_connection_error(self):
        client, _ = self._client(side_effect=ConnectionError('refused'))
        with self.assertRaises(PorkbunTransportError) as ctx:
            client.glue_delete('example.com', 'ns1')
        self.assertNotIsInstance(ctx.exception, PorkbunTimeout)
        self.assertIn('refused', str(ctx.exception))

    def test_timeout(self):
        client, session = self._client(side_effect=Timeout('read timed out'))
        with self.assertRaises(PorkbunTimeout):
            client.glue_update('example.com', 'ns1', ['192.0.2.1'])
        # a single attempt, never retried
        self.assertEqual(1, session.post.call_count)

    def test_all_errors_share_a_base(self):
        for cls in (
            PorkbunApiFailure,
            PorkbunDecodeError,
            PorkbunTimeout,
            PorkbunTransportError,
        ):
            self.assertTrue(issubclass(cls, PorkbunClientException))

    def test_dns_create_without_id(self):
        client, _ = self._client(self._response(body={'status': 'SUCCESS'}))
        with self.assertRaises(PorkbunDecodeError):
            client.dns_record_create(
                'example.com', DNSRecord(name='', type='A', content='192.0.2.1')
            )

    def test_dns_records_skips_non_objects(self):
        client, _ = self._client(
            self._response(
                body={
                    'status': 'SUCCESS',
                    'records': [
                        'junk',
                        {
                            'id': 12,
                            'name': 'example.com',
                            'type': 'A',
                            'content': '192.0.2.1',
                            'ttl': 600,
                        },
                    ],
                }
            )
        )
        records = client.dns_records('example.com')
        self.assertEqual(1, len(records))
        self.assertEqual('12', records[0].id)
        self.assertEqual('600', records[0].ttl)
