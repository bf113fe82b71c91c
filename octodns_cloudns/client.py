#
#
#

import json
import logging
import re
import time
from collections.abc import Mapping
from copy import deepcopy

from .cache import ResponseCache
from .config import ClientConfig, Credentials
from .exceptions import (
    ClouDNSClientException,
    ClouDNSClientRateLimited,
    classify_failure,
)
from .retry import TRANSPORT_ERRORS, RetryPolicy
from .transport import SessionTransport

LOG_BODY_LIMIT = 1000
REDACTED = '***REDACTED***'
SENSITIVE_KEYS = ('authorization', 'auth-password')

_STATUS_ID_RE = re.compile(r'\[(\d+)\]')


def id_from_status(response):
    '''Extract the ``[12345]`` id ClouDNS embeds in statusDescription.'''
    description = ''
    if isinstance(response, dict):
        description = response.get('statusDescription') or ''
    match = _STATUS_ID_RE.search(description)
    if not match:
        raise ClouDNSClientException(
            'Failed to extract id from response', {'response': response}
        )
    return int(match.group(1))


def _redact(mapping):
    return {
        k: REDACTED if str(k).lower() in SENSITIVE_KEYS else v
        for k, v in (mapping or {}).items()
    }


class ClouDNSClient(object):
    '''Request pipeline shared by every ClouDNS service call.

    Injects the auth parameters, formats the endpoint, serves and fills the
    GET response cache, retries transient transport failures and maps
    failed responses onto the exceptions in ``octodns_cloudns.exceptions``.
    '''

    def __init__(
        self, credentials, config=None, transport=None, sleep=time.sleep
    ):
        self.log = logging.getLogger('ClouDNSClient')
        self.credentials = credentials
        self.config = config or ClientConfig()
        self.log.debug(
            '__init__: identity=%s, password=***, base_url=%s',
            credentials.identity,
            self.config.base_url,
        )
        self._log_level = logging.getLevelName(self.config.log_level.upper())
        if not isinstance(self._log_level, int):
            self._log_level = logging.INFO
        self._transport = transport or SessionTransport(
            self.config.base_url,
            timeout=self.config.timeout,
            verify=self.config.verify,
        )
        self._retry = RetryPolicy(
            self.config.retry_times, self.config.retry_delay, sleep=sleep
        )
        self._cache = ResponseCache(
            self.config.cache_ttl,
            prefix=self.config.cache_prefix,
            maxsize=self.config.cache_maxsize,
        )

    @classmethod
    def from_env(cls, env=None, **kwargs):
        return cls(
            Credentials.from_env(env), ClientConfig.from_env(env), **kwargs
        )

    @property
    def cache(self):
        return self._cache

    @property
    def retry_policy(self):
        return self._retry

    @property
    def transport(self):
        return self._transport

    def close(self):
        self._transport.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def get(self, endpoint, params=None):
        return self.request('GET', endpoint, params)

    def post(self, endpoint, params=None):
        return self.request('POST', endpoint, params)

    def clear_cache(self, pattern=None):
        '''Drop cached GET responses, returning how many went.

        Keys are ``cache_prefix + sha256 hexdigest``, so ``pattern`` matches
        the leading hex digits of the hash, never an endpoint name. Without
        a pattern every entry under ``cache_prefix`` is dropped.
        '''
        dropped = self._cache.invalidate(pattern)
        self.log.debug('clear_cache: pattern=%s, dropped=%d', pattern, dropped)
        return dropped

    def format_endpoint(self, endpoint):
        endpoint = endpoint.lstrip('/')
        if '.' not in endpoint:
            endpoint = f'{endpoint}.{self.config.response_format}'
        return endpoint

    def request(self, method, endpoint, params=None):
        method = method.upper()
        # auth params last, callers never override identity
        params = {**(params or {}), **self.credentials.auth_params}
        endpoint = self.format_endpoint(endpoint)

        cacheable = method == 'GET' and self.config.cache_enabled
        key = self._cache.fingerprint(method, endpoint, params)
        if cacheable:
            cached = self._cache.get(key)
            if cached is not None:
                self.log.debug('request: cache hit, endpoint=%s', endpoint)
                return deepcopy(cached)

        try:
            response = self._retry.call(self._send, method, endpoint, params)
        except TRANSPORT_ERRORS as e:
            raise ClouDNSClientException(
                f'HTTP request failed: {e}',
                {'method': method, 'endpoint': endpoint},
            ) from e

        body = response.text
        if response.status_code != 200:
            self._raise_for_status(response, method, endpoint, body)

        data = self._parse(body)

        if isinstance(data, dict) and data.get('status') == 'Failed':
            raise classify_failure(data.get('statusDescription'), data)

        if cacheable:
            self._cache.put(key, deepcopy(data))

        return data

    def _raise_for_status(self, response, method, endpoint, body):
        status = response.status_code
        message = f'API request failed with status {status}: {body}'
        context = {
            'method': method,
            'endpoint': endpoint,
            'status_code': status,
        }
        if status == 429:
            retry_after = response.headers.get('Retry-After')
            try:
                retry_after = int(retry_after)
            except (TypeError, ValueError):
                retry_after = None
            raise ClouDNSClientRateLimited(
                message, context, retry_after=retry_after
            )
        raise ClouDNSClientException(message, context)

    def _parse(self, body):
        fmt = self.config.response_format
        if fmt != 'json':
            raise ClouDNSClientException(
                f'{fmt.upper()} response format not yet implemented'
            )
        try:
            return json.loads(body)
        except ValueError as e:
            raise ClouDNSClientException(
                f'Failed to parse JSON response: {e}', {'body': body[:200]}
            ) from e

    def _send(self, method, endpoint, params):
        if method == 'GET':
            kwargs = {'params': params}
        else:
            kwargs = {'data': params}
        if self.config.log_enabled:
            self._log_request(method, endpoint, params)
        response = self._transport.send(method, endpoint, **kwargs)
        if self.config.log_enabled:
            self._log_response(response)
        return response

    def _log_request(self, method, endpoint, params):
        headers = getattr(self._transport, 'headers', None)
        if not isinstance(headers, Mapping):
            headers = {}
        self.log.log(
            self._log_level,
            'ClouDNS API Request: method=%s, endpoint=%s, params=%s, '
            'headers=%s',
            method,
            endpoint,
            _redact(params),
            _redact(headers),
        )

    def _log_response(self, response):
        self.log.log(
            self._log_level,
            'ClouDNS API Response: status=%s, body=%s',
            response.status_code,
            response.text[:LOG_BODY_LIMIT],
        )
