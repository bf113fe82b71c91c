#
#
#

"""Account level services: login/account info, monitoring and utility
lookups."""

import logging

from .exceptions import ClouDNSClientException, ClouDNSClientValidationError
from .models import MonitoringType, RowsPerPage, wire_value


class AccountService(object):
    def __init__(self, client):
        self._client = client
        self.log = logging.getLogger('AccountService')

    def test_login(self):
        return self._client.post('login/login')

    def get_current_ip(self):
        return self._client.get('account/get-current-ip').get('ip', '')

    def get_balance(self):
        return self._client.get('account/get-balance')

    def get_info(self):
        return self._client.get('account/get-info')

    def get_statistics(self):
        return self._client.get('account/get-statistics')

    def is_authenticated(self):
        try:
            response = self.test_login()
        except ClouDNSClientException as e:
            self.log.debug('is_authenticated: %s', e)
            return False
        return response.get('status') == 'Success'


class MonitoringService(object):
    # optional python name -> wire name
    OPTIONAL_FIELDS = {
        'port': 'port',
        'path': 'path',
        'content': 'content',
        'timeout': 'timeout',
        'check_region': 'check-region',
    }

    def __init__(self, client):
        self._client = client

    def create(self, config):
        try:
            monitoring_type = MonitoringType(
                wire_value(config['monitoring_type'])
            )
        except ValueError:
            raise ClouDNSClientValidationError(
                f"Invalid monitoring type {config['monitoring_type']!r}"
            )
        params = {
            'name': config['name'],
            'ip': config['ip'],
            'monitoring-type': monitoring_type.value,
            'check-period': config['check_period'],
        }
        for key, wire in self.OPTIONAL_FIELDS.items():
            if config.get(key) is not None:
                params[wire] = config[key]
        return self._client.post('monitoring/create', params)

    def list(self, page=1, rows_per_page=RowsPerPage.THIRTY, search=None):
        params = {'page': page, 'rows-per-page': wire_value(rows_per_page)}
        if search is not None:
            params['search'] = search
        return self._client.get('monitoring/list', params)

    def delete(self, monitoring_id):
        return self._client.post('monitoring/delete', {'id': monitoring_id})


class UtilityService(object):
    def __init__(self, client):
        self._client = client

    def get_available_ttls(self):
        return self._client.get('dns/get-available-ttl')

    def get_available_record_types(self, zone_type):
        return self._client.get(
            'dns/get-available-record-types',
            {'zone-type': wire_value(zone_type)},
        )

    def create_failover_webhook(self, domain_name, record_id, _type, url):
        return self._client.post(
            'dns/create-failover-notification',
            {
                'domain-name': domain_name,
                'record-id': record_id,
                'type': _type,
                'value': url,
            },
        )
