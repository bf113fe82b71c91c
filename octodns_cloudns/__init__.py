#
#
#

import logging
import shlex
from collections import defaultdict

from octodns.provider.base import BaseProvider
from octodns.record import Record

from .exceptions import (
    ClouDNSClientException,
    ClouDNSClientNotFound,
    ClouDNSClientRateLimited,
    ClouDNSClientUnauthorized,
    ClouDNSClientValidationError,
)

__version__ = '0.1.0'

# after __version__, the transport reads it for the User-Agent
from .api import ClouDNS  # noqa: E402
from .client import ClouDNSClient  # noqa: E402
from .config import ClientConfig, Credentials  # noqa: E402
from .models import (  # noqa: E402
    TTL,
    CreateRecordRequest,
    CreateZoneRequest,
    ZoneType,
)

__all__ = [
    'ClientConfig',
    'ClouDNS',
    'ClouDNSClient',
    'ClouDNSClientException',
    'ClouDNSClientNotFound',
    'ClouDNSClientRateLimited',
    'ClouDNSClientUnauthorized',
    'ClouDNSClientValidationError',
    'ClouDNSProvider',
    'Credentials',
]


class ClouDNSProvider(BaseProvider):
    SUPPORTS_GEO = False
    SUPPORTS_DYNAMIC = False
    SUPPORTS_ROOT_NS = True
    SUPPORTS = set(
        (
            'A',
            'AAAA',
            'ALIAS',
            'CAA',
            'CNAME',
            'MX',
            'NS',
            'PTR',
            'SRV',
            'TXT',
        )
    )

    # provider config keys handed to ClientConfig
    CLIENT_OPTIONS = (
        'base_url',
        'timeout',
        'retry_times',
        'retry_delay',
        'cache_enabled',
        'cache_ttl',
        'cache_prefix',
        'log_enabled',
        'log_level',
        'verify',
    )

    def __init__(
        self,
        id,
        auth_id,
        auth_password,
        *args,
        sub_user=False,
        sub_user_username=False,
        **kwargs,
    ):
        self.log = logging.getLogger(f'ClouDNSProvider[{id}]')
        options = {
            k: kwargs.pop(k) for k in self.CLIENT_OPTIONS if k in kwargs
        }
        self.log.debug(
            '__init__: id=%s, auth_id=%s, auth_password=***, sub_user=%s, '
            'sub_user_username=%s',
            id,
            auth_id,
            sub_user,
            sub_user_username,
        )
        super().__init__(id, *args, **kwargs)

        credentials = Credentials(
            auth_id, auth_password, sub_user, sub_user_username
        )
        self._client = ClouDNSClient(credentials, ClientConfig(**options))
        self._api = ClouDNS(self._client)

        self._zone_records = {}

    def _append_dot(self, value):
        if value == '@' or value[-1] == '.':
            return value
        return f'{value}.'

    def _record_ttl(self, record):
        return int(record['ttl'])

    def _data_for_multiple(self, _type, records):
        values = [record['record'].replace(';', '\\;') for record in records]
        return {
            'ttl': self._record_ttl(records[0]),
            'type': _type,
            'values': values,
        }

    _data_for_A = _data_for_multiple
    _data_for_AAAA = _data_for_multiple
    _data_for_TXT = _data_for_multiple

    def _data_for_single(self, _type, records):
        record = records[0]
        return {
            'ttl': self._record_ttl(record),
            'type': _type,
            'value': self._append_dot(record['record']),
        }

    _data_for_ALIAS = _data_for_single
    _data_for_CNAME = _data_for_single
    _data_for_PTR = _data_for_single

    def _data_for_CAA(self, _type, records):
        values = []
        for record in records:
            if record.get('caa_type'):
                values.append(
                    {
                        'flags': int(record.get('caa_flag') or 0),
                        'tag': record['caa_type'],
                        'value': record.get('caa_value', ''),
                    }
                )
                continue
            raw = record['record']
            try:
                flags, tag, value = shlex.split(raw)[:3]
                values.append({'flags': int(flags), 'tag': tag, 'value': value})
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

    def _data_for_MX(self, _type, records):
        values = []
        for record in records:
            values.append(
                {
                    'preference': int(record['priority']),
                    'exchange': self._append_dot(record['record']),
                }
            )
        return {
            'ttl': self._record_ttl(records[0]),
            'type': _type,
            'values': values,
        }

    def _data_for_NS(self, _type, records):
        values = []
        for record in records:
            values.append(self._append_dot(record['record']))
        return {
            'ttl': self._record_ttl(records[0]),
            'type': _type,
            'values': values,
        }

    def _data_for_SRV(self, _type, records):
        values = []
        for record in records:
            values.append(
                {
                    'port': int(record['port']),
                    'priority': int(record['priority']),
                    'target': self._append_dot(record['record']),
                    'weight': int(record['weight']),
                }
            )
        return {
            'ttl': self._record_ttl(records[0]),
            'type': _type,
            'values': values,
        }

    def list_zones(self):
        self.log.debug('list_zones:')
        return sorted(f'{z.name}.' for z in self._api.zone.get_all() if z.name)

    def zone_records(self, zone):
        if zone.name not in self._zone_records:
            domain_name = zone.name[:-1]
            if not self._api.zone.exists(domain_name):
                return []
            records = self._api.record.get_all_entries(domain_name)
            for record in records:
                if record.get('host') in ('@', None):
                    record['host'] = ''
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
            _type = record['type']
            if _type not in self.SUPPORTS:
                self.log.warning(
                    'populate: skipping unsupported %s record', _type
                )
                continue
            values[record['host']][_type].append(record)

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

    def _process_desired_zone(self, desired):
        desired = super()._process_desired_zone(desired)
        for record in list(desired.records):
            ttl = TTL.nearest(record.ttl).value
            if ttl == record.ttl:
                continue
            self.supports_warn_or_except(
                f'{record.fqdn} {record._type} ttl={record.ttl} is not '
                'offered by ClouDNS',
                f'using {ttl}',
            )
            record = record.copy()
            record.ttl = ttl
            desired.add_record(record, replace=True)
        return desired

    def _params_for_multiple(self, record):
        for value in record.values:
            yield {
                'record': value.replace('\\;', ';'),
                'host': record.name,
                'ttl': record.ttl,
                'record_type': record._type,
            }

    _params_for_A = _params_for_multiple
    _params_for_AAAA = _params_for_multiple
    _params_for_NS = _params_for_multiple
    _params_for_TXT = _params_for_multiple

    def _params_for_single(self, record):
        yield {
            'record': record.value,
            'host': record.name,
            'ttl': record.ttl,
            'record_type': record._type,
        }

    _params_for_ALIAS = _params_for_single
    _params_for_CNAME = _params_for_single
    _params_for_PTR = _params_for_single

    def _params_for_CAA(self, record):
        for value in record.values:
            yield {
                'record': '',
                'caa_flag': str(value.flags),
                'caa_tag': value.tag,
                'caa_value': value.value,
                'host': record.name,
                'ttl': record.ttl,
                'record_type': record._type,
            }

    def _params_for_MX(self, record):
        for value in record.values:
            yield {
                'record': value.exchange,
                'priority': value.preference,
                'host': record.name,
                'ttl': record.ttl,
                'record_type': record._type,
            }

    def _params_for_SRV(self, record):
        for value in record.values:
            yield {
                'record': value.target,
                'priority': value.priority,
                'weight': value.weight,
                'port': value.port,
                'host': record.name,
                'ttl': record.ttl,
                'record_type': record._type,
            }

    def _apply_Create(self, domain_name, change):
        new = change.new
        params_for = getattr(self, f'_params_for_{new._type}')
        for params in params_for(new):
            self._api.record.create(
                CreateRecordRequest(domain_name=domain_name, **params)
            )

    def _apply_Update(self, domain_name, change):
        # simpler to delete-then-recreate than to match values to ids
        self._apply_Delete(domain_name, change)
        self._apply_Create(domain_name, change)

    def _apply_Delete(self, domain_name, change):
        existing = change.existing
        for record in self.zone_records(existing.zone):
            if (
                existing.name == record['host']
                and existing._type == record['type']
            ):
                self._api.record.delete(domain_name, record['id'])

    def _apply(self, plan):
        desired = plan.desired
        changes = plan.changes
        domain_name = desired.name[:-1]
        self.log.debug(
            '_apply: zone=%s, len(changes)=%d', desired.name, len(changes)
        )

        if not self._api.zone.exists(domain_name):
            self.log.debug('_apply:   no matching zone, creating domain')
            self._api.zone.create(
                CreateZoneRequest(domain_name, ZoneType.MASTER)
            )

        for change in changes:
            class_name = change.__class__.__name__
            getattr(self, f'_apply_{class_name}')(domain_name, change)

        # Clear out the caches if any
        self._zone_records.pop(desired.name, None)
        self._client.clear_cache()
