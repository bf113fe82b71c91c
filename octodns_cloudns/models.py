#
#
#

"""Enums and request/response models of the ClouDNS API.

Request models validate on construction and render the flat parameter map
the client sends; response models are built from the API's dicts.
"""

import re
from dataclasses import asdict, dataclass, field
from enum import Enum, IntEnum
from ipaddress import ip_address
from typing import List, Optional

from .exceptions import ClouDNSClientValidationError


def wire_value(value):
    '''Normalize an enum or a raw scalar to what goes on the wire.'''
    if isinstance(value, Enum):
        return value.value
    return value


def _flag(value):
    return '1' if value else '0'


class RecordType(str, Enum):
    A = 'A'
    AAAA = 'AAAA'
    CNAME = 'CNAME'
    MX = 'MX'
    TXT = 'TXT'
    NS = 'NS'
    PTR = 'PTR'
    SRV = 'SRV'
    SPF = 'SPF'
    CAA = 'CAA'
    SSHFP = 'SSHFP'
    TLSA = 'TLSA'
    NAPTR = 'NAPTR'
    RP = 'RP'
    CERT = 'CERT'
    OPENPGPKEY = 'OPENPGPKEY'
    HINFO = 'HINFO'
    SMIMEA = 'SMIMEA'
    DNAME = 'DNAME'
    LOC = 'LOC'
    # ClouDNS specific
    WR = 'WR'
    ALIAS = 'ALIAS'

    @property
    def requires_priority(self):
        return self in (RecordType.MX, RecordType.SRV)

    @property
    def requires_port(self):
        return self is RecordType.SRV

    @property
    def requires_weight(self):
        return self is RecordType.SRV

    @property
    def description(self):
        return _RECORD_TYPE_DESCRIPTIONS[self]

    @classmethod
    def values(cls):
        return [t.value for t in cls]


_RECORD_TYPE_DESCRIPTIONS = {
    RecordType.A: 'IPv4 address',
    RecordType.AAAA: 'IPv6 address',
    RecordType.CNAME: 'Canonical name',
    RecordType.MX: 'Mail exchange',
    RecordType.TXT: 'Text record',
    RecordType.NS: 'Name server',
    RecordType.PTR: 'Pointer record',
    RecordType.SRV: 'Service record',
    RecordType.SPF: 'Sender Policy Framework',
    RecordType.CAA: 'Certificate Authority Authorization',
    RecordType.SSHFP: 'SSH fingerprint',
    RecordType.TLSA: 'TLS authentication',
    RecordType.NAPTR: 'Naming Authority Pointer',
    RecordType.RP: 'Responsible Person',
    RecordType.CERT: 'Certificate record',
    RecordType.OPENPGPKEY: 'OpenPGP key',
    RecordType.HINFO: 'Host information',
    RecordType.SMIMEA: 'S/MIME association',
    RecordType.DNAME: 'Delegation name',
    RecordType.LOC: 'Location information',
    RecordType.WR: 'Web Redirect',
    RecordType.ALIAS: 'Similar to CNAME but for root domain',
}


class ZoneType(str, Enum):
    MASTER = 'master'
    SLAVE = 'slave'
    PARKED = 'parked'
    GEODNS = 'geodns'
    REVERSE = 'reverse'

    @property
    def requires_master_ip(self):
        return self is ZoneType.SLAVE

    @property
    def description(self):
        return {
            ZoneType.MASTER: 'Master DNS zone',
            ZoneType.SLAVE: 'Slave DNS zone',
            ZoneType.PARKED: 'Parked domain',
            ZoneType.GEODNS: 'GeoDNS zone',
            ZoneType.REVERSE: 'Reverse DNS zone',
        }[self]

    @classmethod
    def values(cls):
        return [t.value for t in cls]


class TTL(IntEnum):
    MINUTE_1 = 60
    MINUTES_5 = 300
    MINUTES_15 = 900
    MINUTES_30 = 1800
    HOUR_1 = 3600
    HOURS_6 = 21600
    HOURS_12 = 43200
    DAY_1 = 86400
    DAYS_2 = 172800
    DAYS_3 = 259200
    WEEK_1 = 604800
    WEEKS_2 = 1209600
    MONTH_1 = 2592000

    @property
    def label(self):
        seconds = self.value
        for unit, size in (
            ('month', 2592000),
            ('week', 604800),
            ('day', 86400),
            ('hour', 3600),
            ('minute', 60),
        ):
            if seconds % size == 0:
                count = seconds // size
                return f'{count} {unit}' + ('s' if count > 1 else '')
        return f'{seconds} seconds'

    @classmethod
    def values(cls):
        return [t.value for t in cls]

    @classmethod
    def is_valid(cls, ttl):
        return ttl in cls.values()

    @classmethod
    def default(cls):
        return cls.HOUR_1

    @classmethod
    def nearest(cls, seconds):
        '''Smallest allowed TTL that is >= seconds, else the largest.'''
        for ttl in cls:
            if ttl.value >= seconds:
                return ttl
        return cls.MONTH_1


class RowsPerPage(IntEnum):
    TEN = 10
    TWENTY = 20
    THIRTY = 30
    FIFTY = 50
    HUNDRED = 100

    @classmethod
    def values(cls):
        return [r.value for r in cls]

    @classmethod
    def is_valid(cls, rows):
        return rows in cls.values()

    @classmethod
    def default(cls):
        return cls.THIRTY


class MonitoringType(str, Enum):
    DNS = 'dns'
    TCP = 'tcp'
    UDP = 'udp'
    ICMP = 'icmp'
    SMTP = 'smtp'
    HTTP = 'http'
    HTTPS = 'https'
    SSL = 'ssl'

    @property
    def requires_port(self):
        return self in (
            MonitoringType.TCP,
            MonitoringType.UDP,
            MonitoringType.SMTP,
            MonitoringType.SSL,
        )

    @property
    def requires_path(self):
        return self in (MonitoringType.HTTP, MonitoringType.HTTPS)

    @property
    def default_port(self):
        return {
            MonitoringType.SMTP: 25,
            MonitoringType.HTTP: 80,
            MonitoringType.HTTPS: 443,
            MonitoringType.SSL: 443,
        }.get(self)

    @classmethod
    def values(cls):
        return [t.value for t in cls]


@dataclass(frozen=True)
class CreateRecordRequest:
    domain_name: str
    record_type: RecordType
    host: str
    record: str
    ttl: int = TTL.HOUR_1.value
    priority: Optional[int] = None
    weight: Optional[int] = None
    port: Optional[int] = None
    frame: Optional[str] = None
    frame_title: Optional[str] = None
    frame_keywords: Optional[str] = None
    frame_description: Optional[str] = None
    save_path: Optional[bool] = None
    redirect_type: Optional[int] = None
    geodns_location: Optional[str] = None
    caa_flag: Optional[str] = None
    caa_tag: Optional[str] = None
    caa_value: Optional[str] = None
    sshfp_algorithm: Optional[int] = None
    sshfp_fp_type: Optional[int] = None
    sshfp_fingerprint: Optional[str] = None
    tlsa_usage: Optional[int] = None
    tlsa_selector: Optional[int] = None
    tlsa_matching_type: Optional[int] = None
    tlsa_certificate: Optional[str] = None

    def __post_init__(self):
        try:
            object.__setattr__(
                self, 'record_type', RecordType(wire_value(self.record_type))
            )
        except ValueError:
            raise ClouDNSClientValidationError(
                f'Invalid record type {self.record_type!r}'
            )
        object.__setattr__(self, 'ttl', int(wire_value(self.ttl)))
        self.validate()

    def validate(self):
        _type = self.record_type
        if not TTL.is_valid(self.ttl):
            allowed = ', '.join(str(v) for v in TTL.values())
            raise ClouDNSClientValidationError(
                f'Invalid TTL value. Allowed values: {allowed}'
            )
        for needed, attr in (
            (_type.requires_priority, 'priority'),
            (_type.requires_port, 'port'),
            (_type.requires_weight, 'weight'),
        ):
            if needed and getattr(self, attr) is None:
                raise ClouDNSClientValidationError(
                    f'Record type {_type.value} requires {attr}'
                )
        if _type is RecordType.CAA and None in (
            self.caa_flag,
            self.caa_tag,
            self.caa_value,
        ):
            raise ClouDNSClientValidationError(
                'CAA record requires flag, tag, and value'
            )
        if _type is RecordType.SSHFP and None in (
            self.sshfp_algorithm,
            self.sshfp_fp_type,
            self.sshfp_fingerprint,
        ):
            raise ClouDNSClientValidationError(
                'SSHFP record requires algorithm, fingerprint type, and '
                'fingerprint'
            )
        if _type is RecordType.TLSA and None in (
            self.tlsa_usage,
            self.tlsa_selector,
            self.tlsa_matching_type,
            self.tlsa_certificate,
        ):
            raise ClouDNSClientValidationError(
                'TLSA record requires usage, selector, matching type, and '
                'certificate'
            )

    @classmethod
    def from_dict(cls, data):
        data = dict(data)
        if 'ttl' not in data or data['ttl'] is None:
            data['ttl'] = TTL.default().value
        return cls(**data)

    @property
    def record_value(self):
        _type = self.record_type
        if _type is RecordType.CAA:
            return f'{self.caa_flag} {self.caa_tag} {self.caa_value}'
        if _type is RecordType.SSHFP:
            return (
                f'{self.sshfp_algorithm} {self.sshfp_fp_type} '
                f'{self.sshfp_fingerprint}'
            )
        if _type is RecordType.TLSA:
            return (
                f'{self.tlsa_usage} {self.tlsa_selector} '
                f'{self.tlsa_matching_type} {self.tlsa_certificate}'
            )
        return self.record

    def to_params(self):
        params = {
            'domain-name': self.domain_name,
            'record-type': self.record_type.value,
            'host': self.host,
            'record': self.record_value,
            'ttl': self.ttl,
        }
        for attr in ('priority', 'weight', 'port'):
            value = getattr(self, attr)
            if value is not None:
                params[attr] = value
        if self.record_type is RecordType.WR:
            for attr in (
                'frame',
                'frame_title',
                'frame_keywords',
                'frame_description',
                'redirect_type',
            ):
                value = getattr(self, attr)
                if value is not None:
                    params[attr.replace('_', '-')] = value
            if self.save_path is not None:
                params['save-path'] = _flag(self.save_path)
        if self.geodns_location is not None:
            params['geodns-location'] = self.geodns_location
        return params


_NAMESERVER_RE = re.compile(
    r'^[a-zA-Z0-9][a-zA-Z0-9-]{0,62}(\.[a-zA-Z0-9][a-zA-Z0-9-]{0,62})*$'
)


@dataclass(frozen=True)
class CreateZoneRequest:
    domain_name: str
    zone_type: ZoneType = ZoneType.MASTER
    master_ip: Optional[str] = None
    nameservers: List[str] = field(default_factory=list)

    def __post_init__(self):
        try:
            object.__setattr__(
                self, 'zone_type', ZoneType(wire_value(self.zone_type))
            )
        except ValueError:
            raise ClouDNSClientValidationError(
                f'Invalid zone type {self.zone_type!r}'
            )
        self.validate()

    def validate(self):
        if not self.domain_name:
            raise ClouDNSClientValidationError('Domain name is required')
        if self.zone_type.requires_master_ip and not self.master_ip:
            raise ClouDNSClientValidationError(
                f'Zone type {self.zone_type.value} requires master IP'
            )
        if self.master_ip:
            try:
                ip_address(self.master_ip)
            except ValueError:
                raise ClouDNSClientValidationError(
                    'Invalid master IP address'
                )
        for ns in self.nameservers:
            if not _NAMESERVER_RE.match(ns):
                raise ClouDNSClientValidationError(f'Invalid nameserver: {ns}')

    @classmethod
    def from_dict(cls, data):
        return cls(**data)

    def to_params(self):
        params = {
            'domain-name': self.domain_name,
            'zone-type': self.zone_type.value,
        }
        if self.master_ip is not None:
            params['master-ip'] = self.master_ip
        if self.nameservers:
            params['ns'] = list(self.nameservers)
        return params


def _int_or_none(data, key):
    value = data.get(key)
    if value is None or value == '':
        return None
    return int(value)


def _bool_or_none(data, key):
    value = data.get(key)
    if value is None or value == '':
        return None
    if isinstance(value, str):
        return value.strip().lower() not in ('0', 'false', 'no')
    return bool(value)


def _compact(data):
    return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class Record:
    id: int
    type: RecordType
    host: str
    record: str
    ttl: int
    priority: Optional[int] = None
    weight: Optional[int] = None
    port: Optional[int] = None
    frame: Optional[str] = None
    frame_title: Optional[str] = None
    frame_keywords: Optional[str] = None
    frame_description: Optional[str] = None
    save_path: Optional[bool] = None
    redirect_type: Optional[int] = None
    geodns_location: Optional[str] = None
    is_active: Optional[bool] = None
    created: Optional[str] = None
    modified: Optional[str] = None

    @classmethod
    def from_api(cls, data):
        return cls(
            id=int(data['id']),
            type=RecordType(data['type']),
            host=data['host'],
            record=data['record'],
            ttl=int(data['ttl']),
            priority=_int_or_none(data, 'priority'),
            weight=_int_or_none(data, 'weight'),
            port=_int_or_none(data, 'port'),
            frame=data.get('frame'),
            frame_title=data.get('frame_title'),
            frame_keywords=data.get('frame_keywords'),
            frame_description=data.get('frame_description'),
            save_path=_bool_or_none(data, 'save_path'),
            redirect_type=_int_or_none(data, 'redirect_type'),
            geodns_location=data.get('geodns_location'),
            is_active=_bool_or_none(data, 'is_active'),
            created=data.get('created'),
            modified=data.get('modified'),
        )

    def to_dict(self):
        data = asdict(self)
        data['type'] = self.type.value
        return _compact(data)


@dataclass(frozen=True)
class Zone:
    name: str
    type: ZoneType
    status: str = 'active'
    records_count: int = 0
    master_ip: Optional[str] = None
    is_updated: Optional[bool] = None
    last_update: Optional[str] = None
    created: Optional[str] = None
    group_id: Optional[int] = None

    @classmethod
    def from_api(cls, data):
        return cls(
            name=data['name'],
            type=ZoneType(data['type']),
            status=data.get('status') or 'active',
            records_count=int(data.get('records') or 0),
            master_ip=data.get('master_ip'),
            is_updated=_bool_or_none(data, 'is_updated'),
            last_update=data.get('last_update'),
            created=data.get('created'),
            group_id=_int_or_none(data, 'group_id'),
        )

    def to_dict(self):
        data = asdict(self)
        data['type'] = self.type.value
        data['records'] = data.pop('records_count')
        return _compact(data)


def numbered_entries(response):
    '''Values of the numeric keys of a paged ClouDNS listing.'''
    if isinstance(response, list):
        return [e for e in response if isinstance(e, dict)]
    if not isinstance(response, dict):
        return []
    return [
        value
        for key, value in response.items()
        if str(key).isdigit() and isinstance(value, dict)
    ]


def page_info(response, page):
    '''(page, pages) reported by a paged listing, defaulting sensibly.'''
    if not isinstance(response, dict):
        return page, 1
    return int(response.get('page') or page), int(response.get('pages') or 1)
