#
#
#

"""Credentials and client settings.

Both are immutable and built once, either from keyword arguments (the
octoDNS provider config) or from ``CLOUDNS_*`` environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

DEFAULT_BASE_URL = 'https://api.cloudns.net'
RESPONSE_FORMATS = ('json', 'xml')

_TRUTHY = ('1', 'true', 'yes', 'on')


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name)
    if value is None or value == '':
        return default
    return value.strip().lower() in _TRUTHY


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name)
    if value is None or value == '':
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f'{name} must be an integer, got {value!r}')


@dataclass(frozen=True)
class Credentials:
    identity: str
    password: str = field(repr=False)
    act_as_sub_user: bool = False
    sub_user_uses_username: bool = False
    auth_params: Dict[str, str] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self):
        params = {'auth-password': self.password}
        if self.act_as_sub_user:
            if self.sub_user_uses_username:
                params['sub-auth-user'] = self.identity
            else:
                params['sub-auth-id'] = self.identity
        else:
            params['auth-id'] = self.identity
        object.__setattr__(self, 'auth_params', params)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None):
        env = os.environ if env is None else env
        return cls(
            identity=env.get('CLOUDNS_AUTH_ID', ''),
            password=env.get('CLOUDNS_AUTH_PASSWORD', ''),
            act_as_sub_user=_env_bool(env, 'CLOUDNS_IS_SUB_USER', False),
            sub_user_uses_username=_env_bool(
                env, 'CLOUDNS_USE_SUB_USERNAME', False
            ),
        )


@dataclass(frozen=True)
class ClientConfig:
    base_url: str = DEFAULT_BASE_URL
    response_format: str = 'json'
    # seconds
    timeout: float = 30
    retry_times: int = 3
    # milliseconds
    retry_delay: int = 1000
    cache_enabled: bool = True
    # seconds
    cache_ttl: int = 300
    cache_prefix: str = 'cloudns_'
    cache_maxsize: int = 1024
    log_enabled: bool = True
    log_level: str = 'INFO'
    verify: bool = True

    def __post_init__(self):
        if self.response_format not in RESPONSE_FORMATS:
            raise ValueError(
                f"Invalid response_format '{self.response_format}'. "
                f"Must be one of {', '.join(RESPONSE_FORMATS)}"
            )
        for name in (
            'timeout',
            'retry_times',
            'retry_delay',
            'cache_ttl',
            'cache_maxsize',
        ):
            if getattr(self, name) < 0:
                raise ValueError(f'{name} must not be negative')

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None):
        env = os.environ if env is None else env
        defaults = cls()
        return cls(
            base_url=env.get('CLOUDNS_BASE_URL') or defaults.base_url,
            response_format=env.get('CLOUDNS_RESPONSE_FORMAT')
            or defaults.response_format,
            timeout=_env_int(env, 'CLOUDNS_TIMEOUT', defaults.timeout),
            retry_times=_env_int(
                env, 'CLOUDNS_RETRY_TIMES', defaults.retry_times
            ),
            retry_delay=_env_int(
                env, 'CLOUDNS_RETRY_DELAY', defaults.retry_delay
            ),
            cache_enabled=_env_bool(
                env, 'CLOUDNS_CACHE_ENABLED', defaults.cache_enabled
            ),
            cache_ttl=_env_int(env, 'CLOUDNS_CACHE_TTL', defaults.cache_ttl),
            cache_prefix=env.get('CLOUDNS_CACHE_PREFIX')
            or defaults.cache_prefix,
            log_enabled=_env_bool(
                env, 'CLOUDNS_LOG_ENABLED', defaults.log_enabled
            ),
            log_level=(
                env.get('CLOUDNS_LOG_LEVEL') or defaults.log_level
            ).upper(),
        )
