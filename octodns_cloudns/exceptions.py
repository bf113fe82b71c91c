#
#
#

from octodns.provider import ProviderException


class ClouDNSClientException(ProviderException):
    '''Base of every error raised by the ClouDNS client.

    Raised as-is for generic failures: transport errors, non-200 statuses,
    unparsable bodies and business failures that match no other kind.
    '''

    default_message = 'ClouDNS API request failed'

    def __init__(self, message=None, context=None):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.context = dict(context or {})


class ClouDNSClientUnauthorized(ClouDNSClientException):
    default_message = 'Authentication failed'


class ClouDNSClientValidationError(ClouDNSClientException):
    default_message = 'Validation failed'

    def __init__(self, message=None, context=None, errors=None):
        super().__init__(message, context)
        self.errors = list(errors or [])


class ClouDNSClientNotFound(ClouDNSClientException):
    default_message = 'Resource not found'

    def __init__(
        self, message=None, context=None, resource_type=None, resource_id=None
    ):
        super().__init__(message, context)
        self.resource_type = resource_type
        self.resource_id = resource_id


class ClouDNSClientRateLimited(ClouDNSClientException):
    default_message = 'Rate limit exceeded'

    def __init__(self, message=None, context=None, retry_after=None):
        super().__init__(message, context)
        self.retry_after = retry_after


# Ordered: the first matching rule wins.
_FAILURE_RULES = (
    (('authentication',), ClouDNSClientUnauthorized),
    (('missing', 'invalid', 'wrong'), ClouDNSClientValidationError),
)


def classify_failure(description, context=None):
    '''Map the statusDescription of a failed response to an exception.

    Returns the exception instance, the caller raises it.
    '''
    if not description:
        return ClouDNSClientException('Unknown error', context)

    lowered = description.lower()
    for needles, klass in _FAILURE_RULES:
        if any(needle in lowered for needle in needles):
            return klass(description, context)

    return ClouDNSClientException(description, context)
