#
#
#

from .account import AccountService, MonitoringService, UtilityService
from .client import ClouDNSClient
from .config import ClientConfig, Credentials
from .records import (
    DynamicDNSService,
    FailoverService,
    GeoDNSService,
    MailForwardingService,
    RecordService,
)
from .zones import (
    AXFRService,
    DNSSECService,
    SlaveZoneService,
    SOAService,
    ZoneService,
)


class ClouDNS(object):
    '''Entry point grouping every service around one client.

    Services are stateless, a new one is handed out on each access.
    '''

    def __init__(self, client):
        self._client = client

    @classmethod
    def from_config(
        cls,
        auth_id,
        auth_password,
        sub_user=False,
        sub_user_username=False,
        **options,
    ):
        credentials = Credentials(
            auth_id, auth_password, sub_user, sub_user_username
        )
        return cls(ClouDNSClient(credentials, ClientConfig(**options)))

    @classmethod
    def from_env(cls, env=None):
        return cls(ClouDNSClient.from_env(env))

    @property
    def client(self):
        return self._client

    @property
    def account(self):
        return AccountService(self._client)

    @property
    def zone(self):
        return ZoneService(self._client)

    @property
    def record(self):
        return RecordService(self._client)

    @property
    def dynamic_dns(self):
        return DynamicDNSService(self._client)

    @property
    def geo_dns(self):
        return GeoDNSService(self._client)

    @property
    def soa(self):
        return SOAService(self._client)

    @property
    def mail_forwarding(self):
        return MailForwardingService(self._client)

    @property
    def slave_zone(self):
        return SlaveZoneService(self._client)

    @property
    def axfr(self):
        return AXFRService(self._client)

    @property
    def failover(self):
        return FailoverService(self._client)

    @property
    def monitoring(self):
        return MonitoringService(self._client)

    @property
    def utility(self):
        return UtilityService(self._client)

    @property
    def dnssec(self):
        return DNSSECService(self._client)
