#
#
#

"""HTTP transport for the ClouDNS client.

``Transport`` is the structural (PEP 544) seam the request pipeline talks
to; ``SessionTransport`` implements it over a ``requests.Session``.
"""

from typing import Any, Dict, Optional, Protocol

from requests import Response, Session

from octodns import __VERSION__ as octodns_version

from . import __version__ as package_version


class Transport(Protocol):
    """Protocol for something able to send one HTTP request.

    Implementations must return the response for every status code and
    only raise for transport-level failures (connection, timeout, TLS),
    as a ``requests.RequestException`` or an ``OSError``.
    """

    def send(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Response:
        """Send a request.

        Args:
            method: 'GET' or 'POST'
            endpoint: Path relative to the base URL, or an absolute URL
            params: Query string parameters
            data: Form-encoded body parameters

        Returns:
            The raw response, whatever its status
        """
        ...

    def close(self) -> None: ...


def wire_params(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    '''Encode list values the way the API expects them, ``key[]=v``.'''
    if params is None:
        return None
    ret = {}
    for key, value in params.items():
        if isinstance(value, (list, tuple)):
            key = key if key.endswith('[]') else f'{key}[]'
            value = [str(v) for v in value]
        ret[key] = value
    return ret


class SessionTransport(object):
    def __init__(self, base_url, timeout=30, verify=True, user_agent=None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.verify = verify
        session = Session()
        session.headers.update(
            {
                'Accept': 'application/json',
                'User-Agent': user_agent
                or f'octodns/{octodns_version} octodns-cloudns/{package_version}',
            }
        )
        self._session = session

    @property
    def headers(self):
        return self._session.headers

    def url(self, endpoint):
        if endpoint.startswith(('http://', 'https://')):
            return endpoint
        return f'{self.base_url}/{endpoint}'

    def send(self, method, endpoint, params=None, data=None):
        return self._session.request(
            method,
            self.url(endpoint),
            params=wire_params(params),
            data=wire_params(data),
            timeout=self.timeout,
            verify=self.verify,
        )

    def close(self):
        self._session.close()
