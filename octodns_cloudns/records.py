#
#
#

"""Record level services: records, dynamic DNS, failover, GeoDNS and mail
forwarding."""

import logging
from urllib.parse import parse_qs, urlparse

from .client import id_from_status
from .exceptions import ClouDNSClientException, ClouDNSClientValidationError
from .models import (
    CreateRecordRequest,
    Record,
    RowsPerPage,
    numbered_entries,
    page_info,
    wire_value,
)


class RecordService(object):
    '''CRUD over the records of a single zone.

    Listing endpoints return the API's dicts keyed by record id; ``list``
    and ``get_all`` turn them into ``Record`` models while ``list_entries``
    and ``get_all_entries`` keep the raw dicts.
    '''

    # python name -> wire name, for mod-record
    UPDATE_FIELDS = {
        'host': 'host',
        'record': 'record',
        'ttl': 'ttl',
        'priority': 'priority',
        'weight': 'weight',
        'port': 'port',
        'frame': 'frame',
        'frame_title': 'frame-title',
        'frame_keywords': 'frame-keywords',
        'frame_description': 'frame-description',
        'save_path': 'save-path',
        'redirect_type': 'redirect-type',
        'geodns_location': 'geodns-location',
    }

    def __init__(self, client):
        self._client = client
        self.log = logging.getLogger('RecordService')

    def list_entries(
        self,
        domain_name,
        host=None,
        _type=None,
        page=1,
        rows_per_page=RowsPerPage.THIRTY,
    ):
        params = {
            'domain-name': domain_name,
            'page': page,
            'rows-per-page': wire_value(rows_per_page),
        }
        if host is not None:
            params['host'] = host
        if _type is not None:
            params['type'] = wire_value(_type)

        response = self._client.get('dns/records', params)
        page, pages = page_info(response, page)
        return {
            'records': numbered_entries(response),
            'page': page,
            'pages': pages,
        }

    def list(
        self,
        domain_name,
        host=None,
        _type=None,
        page=1,
        rows_per_page=RowsPerPage.THIRTY,
    ):
        ret = self.list_entries(domain_name, host, _type, page, rows_per_page)
        ret['records'] = [Record.from_api(r) for r in ret['records']]
        return ret

    def get_all_entries(self, domain_name, host=None, _type=None):
        ret = []
        page = 1
        while True:
            result = self.list_entries(
                domain_name, host, _type, page, RowsPerPage.HUNDRED
            )
            ret += result['records']
            if page >= result['pages']:
                break
            page += 1
        return ret

    def get_all(self, domain_name, host=None, _type=None):
        return [
            Record.from_api(r)
            for r in self.get_all_entries(domain_name, host, _type)
        ]

    def get(self, domain_name, record_id):
        response = self._client.get(
            'dns/get-record',
            {'domain-name': domain_name, 'record-id': record_id},
        )
        return Record.from_api(response)

    def create(self, request):
        '''Create a record and return its id.'''
        if isinstance(request, dict):
            request = CreateRecordRequest.from_dict(request)
        self.log.debug(
            'create: domain_name=%s, host=%s, type=%s',
            request.domain_name,
            request.host,
            request.record_type.value,
        )
        response = self._client.post('dns/add-record', request.to_params())
        return id_from_status(response)

    def update(self, domain_name, record_id, updates):
        params = {'domain-name': domain_name, 'record-id': record_id}
        for key, wire in self.UPDATE_FIELDS.items():
            value = updates.get(key)
            if value is None:
                continue
            if isinstance(value, bool):
                value = '1' if value else '0'
            params[wire] = wire_value(value)
        return self._client.post('dns/mod-record', params)

    def delete(self, domain_name, record_id):
        return self._client.post(
            'dns/delete-record',
            {'domain-name': domain_name, 'record-id': record_id},
        )

    def delete_multiple(self, domain_name, record_ids):
        '''Delete each record, collecting failures instead of stopping.'''
        results = {}
        for record_id in record_ids:
            try:
                results[record_id] = self.delete(domain_name, record_id)
            except ClouDNSClientException as e:
                self.log.warning(
                    'delete_multiple: record_id=%s failed, %s', record_id, e
                )
                results[record_id] = {
                    'status': 'Failed',
                    'statusDescription': e.message,
                }
        return results

    def copy(self, from_domain, to_domain, delete_current_records=False):
        return self._client.post(
            'dns/copy-records',
            {
                'from-domain': from_domain,
                'to-domain': to_domain,
                'delete-current-records': (
                    '1' if delete_current_records else '0'
                ),
            },
        )

    def import_records(
        self,
        domain_name,
        content,
        _format='bind',
        delete_existing_records=False,
        record_types=None,
    ):
        params = {
            'domain-name': domain_name,
            'format': _format,
            'content': content,
            'delete-existing-records': (
                '1' if delete_existing_records else '0'
            ),
        }
        if record_types:
            params['record-types'] = [wire_value(t) for t in record_types]
        return self._client.post('dns/records-import', params)

    def export(self, domain_name):
        response = self._client.get(
            'dns/records-export', {'domain-name': domain_name}
        )
        return response.get('zone', '')


class DynamicDNSService(object):
    def __init__(self, client):
        self._client = client
        self.log = logging.getLogger('DynamicDNSService')

    def get_dynamic_url(self, domain_name, record_id):
        response = self._client.get(
            'dns/get-dynamic-url',
            {'domain-name': domain_name, 'record-id': record_id},
        )
        return response.get('url', '')

    def disable_dynamic_url(self, domain_name, record_id):
        return self._client.post(
            'dns/disable-dynamic-url',
            {'domain-name': domain_name, 'record-id': record_id},
        )

    def change_dynamic_url(self, domain_name, record_id):
        response = self._client.post(
            'dns/change-dynamic-url',
            {'domain-name': domain_name, 'record-id': record_id},
        )
        return response.get('url', '')

    def get_history(
        self,
        domain_name,
        record_id,
        page=1,
        rows_per_page=RowsPerPage.THIRTY,
    ):
        response = self._client.get(
            'dns/get-dynamic-url-history',
            {
                'domain-name': domain_name,
                'record-id': record_id,
                'page': page,
                'rows-per-page': wire_value(rows_per_page),
            },
        )
        history = [
            {
                'date': entry.get('date', ''),
                'ip': entry.get('ip', ''),
                'user_agent': entry.get('user_agent', ''),
            }
            for entry in numbered_entries(response)
        ]
        page, pages = page_info(response, page)
        return {'history': history, 'page': page, 'pages': pages}

    def update_ip(self, dynamic_url, ip=None):
        '''Hit a dynamic URL directly, outside the authenticated API.'''
        query = parse_qs(urlparse(dynamic_url).query)
        if not query.get('q'):
            raise ClouDNSClientValidationError('Invalid dynamic URL format')
        params = {'q': query['q'][0]}
        if ip is not None:
            params['ip'] = ip

        response = self._client.transport.send(
            'GET', dynamic_url.split('?', 1)[0], params=params
        )
        return {
            'status': 'Success' if response.status_code == 200 else 'Failed',
            'response': response.text,
            'ip': ip or 'auto-detected',
        }

    def is_enabled(self, domain_name, record_id):
        try:
            return bool(self.get_dynamic_url(domain_name, record_id))
        except ClouDNSClientException as e:
            self.log.debug('is_enabled: record_id=%s, %s', record_id, e)
            return False


class FailoverService(object):
    MAX_BACKUP_IPS = 4

    def __init__(self, client):
        self._client = client

    def activate(self, domain_name, record_id, config):
        params = {
            'domain-name': domain_name,
            'record-id': record_id,
            'check-type': config['check_type'],
            'down-event-handler': config['down_event_handler'],
            'up-event-handler': config['up_event_handler'],
            'main-ip': config['main_ip'],
        }
        if config.get('monitoring_region') is not None:
            params['monitoring-region'] = config['monitoring_region']
        for i in range(1, self.MAX_BACKUP_IPS + 1):
            backup = config.get(f'backup_ip_{i}')
            if backup is not None:
                params[f'backup-ip-{i}'] = backup
        return self._client.post('dns/activate-failover', params)

    def deactivate(self, domain_name, record_id):
        return self._client.post(
            'dns/deactivate-failover',
            {'domain-name': domain_name, 'record-id': record_id},
        )


class GeoDNSService(object):
    def __init__(self, client):
        self._client = client

    def get_locations(self):
        return self._client.get('dns/geodns-locations')

    def is_available(self, domain_name):
        response = self._client.get(
            'dns/is-geodns-available', {'domain-name': domain_name}
        )
        return str(response.get('available', '0')).lower() in ('1', 'true')


class MailForwardingService(object):
    def __init__(self, client):
        self._client = client

    def list(self, domain_name):
        return self._client.get(
            'dns/mail-forwards', {'domain-name': domain_name}
        )

    def add(self, domain_name, box, host, destination):
        return self._client.post(
            'dns/add-mail-forward',
            {
                'domain-name': domain_name,
                'box': box,
                'host': host,
                'destination': destination,
            },
        )

    def delete(self, domain_name, mail_forward_id):
        return self._client.post(
            'dns/delete-mail-forward',
            {'domain-name': domain_name, 'mail-forward-id': mail_forward_id},
        )
