#
# Tests for the service wrappers, against a mocked client
#

from unittest import TestCase
from unittest.mock import Mock

from octodns_cloudns.account import (
    AccountService,
    MonitoringService,
    UtilityService,
)
from octodns_cloudns.api import ClouDNS
from octodns_cloudns.client import ClouDNSClient
from octodns_cloudns.exceptions import (
    ClouDNSClientException,
    ClouDNSClientUnauthorized,
    ClouDNSClientValidationError,
)
from octodns_cloudns.models import (
    TTL,
    CreateRecordRequest,
    Record,
    RecordType,
    RowsPerPage,
    Zone,
    ZoneType,
)
from octodns_cloudns.records import (
    DynamicDNSService,
    FailoverService,
    GeoDNSService,
    MailForwardingService,
    RecordService,
)
from octodns_cloudns.zones import (
    AXFRService,
    DNSSECService,
    SlaveZoneService,
    SOAService,
    ZoneService,
)

RECORD_A = {
    'id': '1',
    'type': 'A',
    'host': 'www',
    'record': '1.2.3.4',
    'ttl': '3600',
}
RECORD_MX = {
    'id': '2',
    'type': 'MX',
    'host': '',
    'record': 'mx.unit.tests',
    'ttl': '300',
    'priority': '10',
}


class ServiceTestCase(TestCase):
    def setUp(self):
        self.client = Mock()


class TestZoneService(ServiceTestCase):
    def test_list(self):
        self.client.get.return_value = {
            '0': {'name': 'a.tests', 'type': 'master', 'records': '3'},
            '1': {'name': 'b.tests', 'type': 'slave', 'master_ip': '1.1.1.1'},
            'page': '1',
            'pages': '2',
        }
        result = ZoneService(self.client).list(search='tests')
        self.client.get.assert_called_once_with(
            'dns/list-zones',
            {'page': 1, 'rows-per-page': 30, 'search': 'tests'},
        )
        self.assertEqual((1, 2), (result['page'], result['pages']))
        self.assertEqual(
            ['a.tests', 'b.tests'], [z.name for z in result['zones']]
        )
        self.assertIsInstance(result['zones'][0], Zone)
        self.assertIs(ZoneType.SLAVE, result['zones'][1].type)

    def test_get_all_pages(self):
        self.client.get.side_effect = [
            {'0': {'name': 'a.tests', 'type': 'master'}, 'pages': 2},
            {'0': {'name': 'b.tests', 'type': 'master'}, 'pages': 2},
        ]
        zones = ZoneService(self.client).get_all()
        self.assertEqual(['a.tests', 'b.tests'], [z.name for z in zones])
        self.assertEqual(2, self.client.get.call_args_list[1][0][1]['page'])
        self.assertEqual(
            100, self.client.get.call_args_list[0][0][1]['rows-per-page']
        )

    def test_create(self):
        self.client.post.return_value = {'status': 'Success'}
        ZoneService(self.client).create(
            {'domain_name': 'unit.tests', 'nameservers': ['ns1.unit.tests']}
        )
        self.client.post.assert_called_once_with(
            'dns/register',
            {
                'domain-name': 'unit.tests',
                'zone-type': 'master',
                'ns': ['ns1.unit.tests'],
            },
        )

    def test_create_invalid_never_sent(self):
        with self.assertRaises(ClouDNSClientValidationError):
            ZoneService(self.client).create(
                {'domain_name': 'unit.tests', 'zone_type': 'slave'}
            )
        self.client.post.assert_not_called()

    def test_simple_calls(self):
        zones = ZoneService(self.client)
        zones.delete('unit.tests')
        self.client.post.assert_called_with(
            'dns/delete', {'domain-name': 'unit.tests'}
        )
        zones.get_info('unit.tests')
        self.client.get.assert_called_with(
            'dns/get-zone-info', {'domain-name': 'unit.tests'}
        )
        zones.get_statistics()
        self.client.get.assert_called_with('dns/get-zones-stats')
        zones.update_status('unit.tests', 0)
        self.client.post.assert_called_with(
            'dns/change-status', {'domain-name': 'unit.tests', 'status': 0}
        )

    def test_page_count(self):
        self.client.get.return_value = 7
        self.assertEqual(7, ZoneService(self.client).get_page_count())
        self.client.get.return_value = {'pages': '3'}
        self.assertEqual(
            3, ZoneService(self.client).get_page_count(group_id=4)
        )
        self.client.get.assert_called_with(
            'dns/get-pages-count', {'group-id': 4}
        )

    def test_exists(self):
        self.client.get.return_value = {'name': 'unit.tests'}
        self.assertTrue(ZoneService(self.client).exists('unit.tests'))
        body = {'status': 'Failed', 'statusDescription': 'Missing domain'}
        self.client.get.side_effect = ClouDNSClientValidationError(
            body['statusDescription'], body
        )
        self.assertFalse(ZoneService(self.client).exists('unit.tests'))

    def test_exists_propagates_auth_and_outages(self):
        zones = ZoneService(self.client)
        for error in (
            ClouDNSClientUnauthorized(
                'Invalid authentication',
                {'status': 'Failed', 'statusDescription': 'x'},
            ),
            ClouDNSClientException(
                'API request failed with status 503: busy',
                {'status_code': 503},
            ),
            ClouDNSClientException('HTTP request failed: Connection refused'),
        ):
            self.client.get.side_effect = error
            with self.assertRaises(type(error)):
                zones.exists('unit.tests')

    def test_exists_propagates_other_errors(self):
        self.client.get.side_effect = KeyError('bug')
        with self.assertRaises(KeyError):
            ZoneService(self.client).exists('unit.tests')


class TestSOAService(ServiceTestCase):
    def test_modify_only_given_fields(self):
        SOAService(self.client).modify(
            'unit.tests',
            {
                'primary_ns': 'ns1.unit.tests',
                'default_ttl': TTL.HOUR_1,
                'refresh': None,
            },
        )
        self.client.post.assert_called_once_with(
            'dns/modify-soa-details',
            {
                'domain-name': 'unit.tests',
                'primary-ns': 'ns1.unit.tests',
                'default-ttl': 3600,
            },
        )

    def test_details_and_reset(self):
        soa = SOAService(self.client)
        soa.get_details('unit.tests')
        self.client.get.assert_called_once_with(
            'dns/get-soa-details', {'domain-name': 'unit.tests'}
        )
        soa.reset('unit.tests')
        self.client.post.assert_called_once_with(
            'dns/reset-soa-details', {'domain-name': 'unit.tests'}
        )


class TestDNSSECService(ServiceTestCase):
    def test_status_unavailable(self):
        self.client.get.return_value = {'available': '0'}
        self.assertEqual(
            {'available': False, 'active': False, 'ds_records': []},
            DNSSECService(self.client).get_status('unit.tests'),
        )

    def test_status_active(self):
        self.client.get.side_effect = [
            {'available': 1},
            {'status': 'Success', 'ds': ['12345 13 2 abcd']},
        ]
        self.assertEqual(
            {
                'available': True,
                'active': True,
                'ds_records': ['12345 13 2 abcd'],
            },
            DNSSECService(self.client).get_status('unit.tests'),
        )

    def test_status_not_activated(self):
        self.client.get.side_effect = [
            {'available': '1'},
            ClouDNSClientException('DNSSEC is not active'),
        ]
        status = DNSSECService(self.client).get_status('unit.tests')
        self.assertTrue(status['available'])
        self.assertFalse(status['active'])

    def test_is_active(self):
        self.client.get.return_value = {'status': 'Success'}
        self.assertTrue(DNSSECService(self.client).is_active('unit.tests'))
        self.client.get.side_effect = ClouDNSClientException('nope')
        self.assertFalse(DNSSECService(self.client).is_active('unit.tests'))

    def test_ds_records(self):
        dnssec = DNSSECService(self.client)
        dnssec.add_ds_record('unit.tests', 12345, 13, 2, 'abcd')
        self.client.post.assert_called_with(
            'dns/add-dnssec-ds-record',
            {
                'domain-name': 'unit.tests',
                'key-tag': 12345,
                'algorithm': 13,
                'digest-type': 2,
                'digest': 'abcd',
            },
        )
        dnssec.remove_ds_record('unit.tests')
        self.client.post.assert_called_with(
            'dns/remove-dnssec-ds-record', {'domain-name': 'unit.tests'}
        )
        dnssec.set_opt_out('unit.tests', True)
        self.client.post.assert_called_with(
            'dns/set-dnssec-optout',
            {'domain-name': 'unit.tests', 'status': '1'},
        )
        self.assertEqual('RSA/SHA-256', dnssec.available_algorithms()[8])


class TestSlaveAndAXFR(ServiceTestCase):
    def test_slave(self):
        slave = SlaveZoneService(self.client)
        slave.add_master_server('unit.tests', '1.1.1.1')
        self.client.post.assert_called_with(
            'dns/add-master-server',
            {'domain-name': 'unit.tests', 'master-ip': '1.1.1.1'},
        )
        slave.delete_master_server('unit.tests', 9)
        self.client.post.assert_called_with(
            'dns/delete-master-server', {'domain-name': 'unit.tests', 'id': 9}
        )
        slave.list_master_servers('unit.tests')
        self.client.get.assert_called_with(
            'dns/list-master-servers', {'domain-name': 'unit.tests'}
        )

    def test_axfr(self):
        axfr = AXFRService(self.client)
        axfr.add_ip('unit.tests', '2.2.2.2')
        self.client.post.assert_called_with(
            'dns/axfr-add', {'domain-name': 'unit.tests', 'ip': '2.2.2.2'}
        )
        axfr.remove_ip('unit.tests', 3)
        self.client.post.assert_called_with(
            'dns/axfr-remove', {'domain-name': 'unit.tests', 'id': 3}
        )
        axfr.list_ips('unit.tests')
        self.client.get.assert_called_with(
            'dns/axfr-list', {'domain-name': 'unit.tests'}
        )


class TestRecordService(ServiceTestCase):
    def test_list(self):
        self.client.get.return_value = {'1': RECORD_A, '2': RECORD_MX}
        result = RecordService(self.client).list(
            'unit.tests', _type=RecordType.MX, rows_per_page=RowsPerPage.TEN
        )
        self.client.get.assert_called_once_with(
            'dns/records',
            {
                'domain-name': 'unit.tests',
                'page': 1,
                'rows-per-page': 10,
                'type': 'MX',
            },
        )
        self.assertEqual([1, 2], [r.id for r in result['records']])
        self.assertIsInstance(result['records'][1], Record)
        self.assertEqual((1, 1), (result['page'], result['pages']))

    def test_get_all_entries(self):
        self.client.get.side_effect = [
            {'1': RECORD_A, 'page': 1, 'pages': 2},
            {'2': RECORD_MX, 'page': 2, 'pages': 2},
        ]
        entries = RecordService(self.client).get_all_entries('unit.tests')
        self.assertEqual([RECORD_A, RECORD_MX], entries)

    def test_get_all_empty_zone(self):
        self.client.get.return_value = []
        self.assertEqual([], RecordService(self.client).get_all('unit.tests'))

    def test_get(self):
        self.client.get.return_value = RECORD_MX
        record = RecordService(self.client).get('unit.tests', 2)
        self.assertEqual(10, record.priority)
        self.client.get.assert_called_once_with(
            'dns/get-record', {'domain-name': 'unit.tests', 'record-id': 2}
        )

    def test_create(self):
        self.client.post.return_value = {
            'status': 'Success',
            'statusDescription': 'The record was added successfully. [987]',
        }
        record_id = RecordService(self.client).create(
            CreateRecordRequest('unit.tests', 'A', 'www', '1.2.3.4', ttl=300)
        )
        self.assertEqual(987, record_id)
        self.client.post.assert_called_once_with(
            'dns/add-record',
            {
                'domain-name': 'unit.tests',
                'record-type': 'A',
                'host': 'www',
                'record': '1.2.3.4',
                'ttl': 300,
            },
        )

    def test_create_from_dict_validates(self):
        with self.assertRaises(ClouDNSClientValidationError):
            RecordService(self.client).create(
                {
                    'domain_name': 'unit.tests',
                    'record_type': 'MX',
                    'host': '',
                    'record': 'mx.unit.tests',
                }
            )
        self.client.post.assert_not_called()

    def test_create_without_id(self):
        self.client.post.return_value = {'status': 'Success'}
        with self.assertRaises(ClouDNSClientException) as ctx:
            RecordService(self.client).create(
                CreateRecordRequest('unit.tests', 'A', '', '1.2.3.4')
            )
        self.assertEqual(
            'Failed to extract id from response', str(ctx.exception)
        )

    def test_update(self):
        RecordService(self.client).update(
            'unit.tests',
            5,
            {
                'record': '5.6.7.8',
                'ttl': TTL.MINUTES_5,
                'save_path': False,
                'priority': None,
                'unknown': 'ignored',
            },
        )
        self.client.post.assert_called_once_with(
            'dns/mod-record',
            {
                'domain-name': 'unit.tests',
                'record-id': 5,
                'record': '5.6.7.8',
                'ttl': 300,
                'save-path': '0',
            },
        )

    def test_delete_multiple(self):
        self.client.post.side_effect = [
            {'status': 'Success'},
            ClouDNSClientException('Invalid record-id'),
        ]
        results = RecordService(self.client).delete_multiple(
            'unit.tests', [1, 2]
        )
        self.assertEqual({'status': 'Success'}, results[1])
        self.assertEqual(
            {'status': 'Failed', 'statusDescription': 'Invalid record-id'},
            results[2],
        )

    def test_delete_multiple_collects_auth_failure(self):
        self.client.post.side_effect = ClouDNSClientUnauthorized()
        results = RecordService(self.client).delete_multiple(
            'unit.tests', [1]
        )
        self.assertEqual('Failed', results[1]['status'])

    def test_copy_import_export(self):
        records = RecordService(self.client)
        records.copy('a.tests', 'b.tests', True)
        self.client.post.assert_called_with(
            'dns/copy-records',
            {
                'from-domain': 'a.tests',
                'to-domain': 'b.tests',
                'delete-current-records': '1',
            },
        )
        records.import_records(
            'unit.tests', 'www IN A 1.2.3.4', record_types=[RecordType.A]
        )
        self.client.post.assert_called_with(
            'dns/records-import',
            {
                'domain-name': 'unit.tests',
                'format': 'bind',
                'content': 'www IN A 1.2.3.4',
                'delete-existing-records': '0',
                'record-types': ['A'],
            },
        )
        self.client.get.return_value = {'zone': '$ORIGIN unit.tests.'}
        self.assertEqual('$ORIGIN unit.tests.', records.export('unit.tests'))


class TestDynamicDNSService(ServiceTestCase):
    def test_urls(self):
        self.client.get.return_value = {'url': 'https://ipv4.cloudns.net/?q=x'}
        ddns = DynamicDNSService(self.client)
        self.assertEqual(
            'https://ipv4.cloudns.net/?q=x', ddns.get_dynamic_url('a', 1)
        )
        self.assertTrue(ddns.is_enabled('a', 1))
        self.client.get.side_effect = ClouDNSClientException('disabled')
        self.assertFalse(ddns.is_enabled('a', 1))

    def test_history(self):
        self.client.get.return_value = {
            '0': {'date': '2024-01-01', 'ip': '1.2.3.4'},
            'pages': 1,
        }
        result = DynamicDNSService(self.client).get_history('unit.tests', 1)
        self.assertEqual(
            [{'date': '2024-01-01', 'ip': '1.2.3.4', 'user_agent': ''}],
            result['history'],
        )

    def test_update_ip(self):
        self.client.transport.send.return_value = Mock(
            status_code=200, text='OK'
        )
        result = DynamicDNSService(self.client).update_ip(
            'https://ipv4.cloudns.net/api/dynamicURL/?q=abc123', '9.9.9.9'
        )
        self.client.transport.send.assert_called_once_with(
            'GET',
            'https://ipv4.cloudns.net/api/dynamicURL/',
            params={'q': 'abc123', 'ip': '9.9.9.9'},
        )
        self.assertEqual(
            {'status': 'Success', 'response': 'OK', 'ip': '9.9.9.9'}, result
        )

    def test_update_ip_auto(self):
        self.client.transport.send.return_value = Mock(
            status_code=500, text='err'
        )
        result = DynamicDNSService(self.client).update_ip(
            'https://ipv4.cloudns.net/api/dynamicURL/?q=abc123'
        )
        self.assertEqual('Failed', result['status'])
        self.assertEqual('auto-detected', result['ip'])

    def test_update_ip_invalid_url(self):
        with self.assertRaises(ClouDNSClientValidationError) as ctx:
            DynamicDNSService(self.client).update_ip('https://x.tests/')
        self.assertEqual('Invalid dynamic URL format', str(ctx.exception))


class TestOtherRecordServices(ServiceTestCase):
    def test_failover(self):
        FailoverService(self.client).activate(
            'unit.tests',
            1,
            {
                'check_type': 1,
                'down_event_handler': 1,
                'up_event_handler': 1,
                'main_ip': '1.1.1.1',
                'backup_ip_1': '2.2.2.2',
                'backup_ip_3': '3.3.3.3',
            },
        )
        self.client.post.assert_called_once_with(
            'dns/activate-failover',
            {
                'domain-name': 'unit.tests',
                'record-id': 1,
                'check-type': 1,
                'down-event-handler': 1,
                'up-event-handler': 1,
                'main-ip': '1.1.1.1',
                'backup-ip-1': '2.2.2.2',
                'backup-ip-3': '3.3.3.3',
            },
        )

    def test_geodns(self):
        self.client.get.return_value = {'available': 'true'}
        self.assertTrue(GeoDNSService(self.client).is_available('unit.tests'))
        self.client.get.return_value = {}
        self.assertFalse(GeoDNSService(self.client).is_available('x'))

    def test_mail_forwarding(self):
        mail = MailForwardingService(self.client)
        mail.add('unit.tests', 'info', '', 'me@example.test')
        self.client.post.assert_called_with(
            'dns/add-mail-forward',
            {
                'domain-name': 'unit.tests',
                'box': 'info',
                'host': '',
                'destination': 'me@example.test',
            },
        )
        mail.delete('unit.tests', 4)
        self.client.post.assert_called_with(
            'dns/delete-mail-forward',
            {'domain-name': 'unit.tests', 'mail-forward-id': 4},
        )


class TestAccountServices(ServiceTestCase):
    def test_is_authenticated(self):
        self.client.post.return_value = {'status': 'Success'}
        self.assertTrue(AccountService(self.client).is_authenticated())
        self.client.post.assert_called_once_with('login/login')
        self.client.post.side_effect = ClouDNSClientUnauthorized()
        self.assertFalse(AccountService(self.client).is_authenticated())

    def test_current_ip(self):
        self.client.get.return_value = {'ip': '8.8.8.8'}
        self.assertEqual('8.8.8.8', AccountService(self.client).get_current_ip())

    def test_monitoring_create(self):
        MonitoringService(self.client).create(
            {
                'name': 'web',
                'ip': '1.2.3.4',
                'monitoring_type': 'https',
                'check_period': 60,
                'path': '/health',
                'check_region': None,
            }
        )
        self.client.post.assert_called_once_with(
            'monitoring/create',
            {
                'name': 'web',
                'ip': '1.2.3.4',
                'monitoring-type': 'https',
                'check-period': 60,
                'path': '/health',
            },
        )

    def test_monitoring_invalid_type(self):
        with self.assertRaises(ClouDNSClientValidationError):
            MonitoringService(self.client).create(
                {
                    'name': 'x',
                    'ip': '1.2.3.4',
                    'monitoring_type': 'gopher',
                    'check_period': 60,
                }
            )

    def test_utility(self):
        utility = UtilityService(self.client)
        utility.get_available_record_types(ZoneType.MASTER)
        self.client.get.assert_called_with(
            'dns/get-available-record-types', {'zone-type': 'master'}
        )
        utility.create_failover_webhook('unit.tests', 1, 'webhook', 'https://x')
        self.client.post.assert_called_with(
            'dns/create-failover-notification',
            {
                'domain-name': 'unit.tests',
                'record-id': 1,
                'type': 'webhook',
                'value': 'https://x',
            },
        )


class TestClouDNS(TestCase):
    def test_services_share_client(self):
        client = Mock()
        api = ClouDNS(client)
        self.assertIs(client, api.client)
        for name, klass in (
            ('account', AccountService),
            ('zone', ZoneService),
            ('record', RecordService),
            ('dynamic_dns', DynamicDNSService),
            ('geo_dns', GeoDNSService),
            ('soa', SOAService),
            ('mail_forwarding', MailForwardingService),
            ('slave_zone', SlaveZoneService),
            ('axfr', AXFRService),
            ('failover', FailoverService),
            ('monitoring', MonitoringService),
            ('utility', UtilityService),
            ('dnssec', DNSSECService),
        ):
            service = getattr(api, name)
            self.assertIsInstance(service, klass)
            self.assertIs(client, service._client)

    def test_from_config(self):
        api = ClouDNS.from_config(
            'sub', 'pw', sub_user=True, retry_times=0, cache_enabled=False
        )
        self.assertIsInstance(api.client, ClouDNSClient)
        self.assertEqual(
            {'sub-auth-id': 'sub', 'auth-password': 'pw'},
            api.client.credentials.auth_params,
        )
        self.assertEqual(0, api.client.config.retry_times)
        api.client.close()
