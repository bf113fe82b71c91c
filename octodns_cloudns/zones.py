#
#
#

"""Zone level services: zones, SOA, DNSSEC, slave zones and AXFR."""

import logging

from .exceptions import ClouDNSClientException, ClouDNSClientUnauthorized
from .models import (
    CreateZoneRequest,
    RowsPerPage,
    Zone,
    numbered_entries,
    page_info,
    wire_value,
)


class ZoneService(object):
    def __init__(self, client):
        self._client = client
        self.log = logging.getLogger('ZoneService')

    def list(
        self,
        page=1,
        rows_per_page=RowsPerPage.THIRTY,
        search=None,
        group_id=None,
    ):
        params = {'page': page, 'rows-per-page': wire_value(rows_per_page)}
        if search is not None:
            params['search'] = search
        if group_id is not None:
            params['group-id'] = group_id

        response = self._client.get('dns/list-zones', params)
        zones = [Zone.from_api(d) for d in numbered_entries(response)]
        page, pages = page_info(response, page)
        return {'page': page, 'pages': pages, 'zones': zones}

    def create(self, request):
        if isinstance(request, dict):
            request = CreateZoneRequest.from_dict(request)
        self.log.debug('create: domain_name=%s', request.domain_name)
        return self._client.post('dns/register', request.to_params())

    def delete(self, domain_name):
        return self._client.post('dns/delete', {'domain-name': domain_name})

    def get_info(self, domain_name):
        return self._client.get(
            'dns/get-zone-info', {'domain-name': domain_name}
        )

    def get_statistics(self):
        return self._client.get('dns/get-zones-stats')

    def update_status(self, domain_name, status):
        return self._client.post(
            'dns/change-status',
            {'domain-name': domain_name, 'status': wire_value(status)},
        )

    def get_page_count(self, search=None, group_id=None):
        params = {}
        if search is not None:
            params['search'] = search
        if group_id is not None:
            params['group-id'] = group_id
        response = self._client.get('dns/get-pages-count', params)
        if isinstance(response, dict):
            return int(response.get('pages', 1))
        return int(response)

    def exists(self, domain_name):
        '''Whether the account holds the zone.

        Only a ``Failed`` API answer means missing; authentication,
        transport and HTTP status errors propagate.
        '''
        try:
            self.get_info(domain_name)
        except ClouDNSClientUnauthorized:
            raise
        except ClouDNSClientException as e:
            if e.context.get('status') != 'Failed':
                raise
            self.log.debug('exists: domain_name=%s, %s', domain_name, e)
            return False
        return True

    def get_all(self, search=None, group_id=None):
        ret = []
        page = 1
        while True:
            result = self.list(page, RowsPerPage.HUNDRED, search, group_id)
            ret += result['zones']
            if page >= result['pages']:
                break
            page += 1
        return ret


class SOAService(object):
    # python name -> wire name
    FIELDS = {
        'primary_ns': 'primary-ns',
        'admin_mail': 'admin-mail',
        'default_ttl': 'default-ttl',
        'refresh': 'refresh',
        'retry': 'retry',
        'expire': 'expire',
    }

    def __init__(self, client):
        self._client = client

    def get_details(self, domain_name):
        return self._client.get(
            'dns/get-soa-details', {'domain-name': domain_name}
        )

    def modify(self, domain_name, updates):
        params = {'domain-name': domain_name}
        for key, wire in self.FIELDS.items():
            if updates.get(key) is not None:
                params[wire] = wire_value(updates[key])
        return self._client.post('dns/modify-soa-details', params)

    def reset(self, domain_name):
        return self._client.post(
            'dns/reset-soa-details', {'domain-name': domain_name}
        )


class DNSSECService(object):
    '''DNSSEC activation and DS record management.'''

    ALGORITHMS = {
        5: 'RSA/SHA-1',
        7: 'RSASHA1-NSEC3-SHA1',
        8: 'RSA/SHA-256',
        10: 'RSA/SHA-512',
        13: 'ECDSA Curve P-256 with SHA-256',
        14: 'ECDSA Curve P-384 with SHA-384',
    }

    def __init__(self, client):
        self._client = client
        self.log = logging.getLogger('DNSSECService')

    def activate(self, domain_name):
        return self._client.post(
            'dns/activate-dnssec', {'domain-name': domain_name}
        )

    def deactivate(self, domain_name):
        return self._client.post(
            'dns/deactivate-dnssec', {'domain-name': domain_name}
        )

    def get_ds_records(self, domain_name):
        return self._client.get(
            'dns/get-dnssec-ds-records', {'domain-name': domain_name}
        )

    def available_algorithms(self):
        return dict(self.ALGORITHMS)

    def add_ds_record(
        self, domain_name, key_tag, algorithm, digest_type, digest
    ):
        return self._client.post(
            'dns/add-dnssec-ds-record',
            {
                'domain-name': domain_name,
                'key-tag': key_tag,
                'algorithm': algorithm,
                'digest-type': digest_type,
                'digest': digest,
            },
        )

    def remove_ds_record(self, domain_name, key_tag=None):
        params = {'domain-name': domain_name}
        if key_tag is not None:
            params['key-tag'] = key_tag
        return self._client.post('dns/remove-dnssec-ds-record', params)

    def is_available(self, domain_name):
        response = self._client.get(
            'dns/is-dnssec-available', {'domain-name': domain_name}
        )
        return str(response.get('available')) == '1'

    def set_opt_out(self, domain_name, enabled):
        return self._client.post(
            'dns/set-dnssec-optout',
            {'domain-name': domain_name, 'status': '1' if enabled else '0'},
        )

    def is_active(self, domain_name):
        try:
            response = self.get_ds_records(domain_name)
        except ClouDNSClientException as e:
            self.log.debug('is_active: domain_name=%s, %s', domain_name, e)
            return False
        return response.get('status') == 'Success'

    def get_status(self, domain_name):
        status = {
            'available': self.is_available(domain_name),
            'active': False,
            'ds_records': [],
        }
        if not status['available']:
            return status
        try:
            response = self.get_ds_records(domain_name)
        except ClouDNSClientException as e:
            self.log.debug('get_status: domain_name=%s, %s', domain_name, e)
            return status
        if response.get('status') == 'Success':
            status['active'] = True
            status['ds_records'] = response.get('ds', [])
        return status


class SlaveZoneService(object):
    def __init__(self, client):
        self._client = client

    def add_master_server(self, domain_name, master_ip):
        return self._client.post(
            'dns/add-master-server',
            {'domain-name': domain_name, 'master-ip': master_ip},
        )

    def delete_master_server(self, domain_name, master_id):
        return self._client.post(
            'dns/delete-master-server',
            {'domain-name': domain_name, 'id': master_id},
        )

    def list_master_servers(self, domain_name):
        return self._client.get(
            'dns/list-master-servers', {'domain-name': domain_name}
        )


class AXFRService(object):
    def __init__(self, client):
        self._client = client

    def add_ip(self, domain_name, ip):
        return self._client.post(
            'dns/axfr-add', {'domain-name': domain_name, 'ip': ip}
        )

    def remove_ip(self, domain_name, axfr_id):
        return self._client.post(
            'dns/axfr-remove', {'domain-name': domain_name, 'id': axfr_id}
        )

    def list_ips(self, domain_name):
        return self._client.get('dns/axfr-list', {'domain-name': domain_name})
