#
#
#

import logging
import time

from requests import RequestException
from tenacity import Retrying, stop_after_attempt

RETRY_STATUSES = frozenset((429, 500, 502, 503, 504))

# what a Transport raises for connection, timeout or socket failures
TRANSPORT_ERRORS = (RequestException, OSError)


class RetryPolicy(object):
    '''Linear backoff around a single transport call.

    Retry ``n`` (1-indexed) waits ``n * retry_delay`` milliseconds, and at
    most ``retry_times`` retries follow the first attempt. Only transport
    exceptions and the statuses in ``RETRY_STATUSES`` are retried.
    '''

    def __init__(self, retry_times=3, retry_delay=1000, sleep=time.sleep):
        self.retry_times = retry_times
        self.retry_delay = retry_delay
        self._sleep = sleep
        self.log = logging.getLogger('ClouDNSRetryPolicy')

    def should_retry(self, retries, response=None, exception=None):
        if retries >= self.retry_times:
            return False
        if isinstance(exception, TRANSPORT_ERRORS):
            return True
        if response is not None and response.status_code in RETRY_STATUSES:
            return True
        return False

    def delay(self, retries):
        '''Milliseconds to wait before retry number ``retries``.'''
        return retries * self.retry_delay

    def _retry(self, retry_state):
        outcome = retry_state.outcome
        retries = retry_state.attempt_number - 1
        if outcome.failed:
            return self.should_retry(retries, exception=outcome.exception())
        return self.should_retry(retries, response=outcome.result())

    def _wait(self, retry_state):
        return self.delay(retry_state.attempt_number) / 1000.0

    def _before_sleep(self, retry_state):
        outcome = retry_state.outcome
        if outcome.failed:
            reason = repr(outcome.exception())
        else:
            reason = f'status={outcome.result().status_code}'
        self.log.warning(
            'retrying: attempt=%d, delay=%dms, reason=%s',
            retry_state.attempt_number + 1,
            self.delay(retry_state.attempt_number),
            reason,
        )

    def call(self, fn, *args, **kwargs):
        '''Run ``fn`` under the policy.

        Once retries are exhausted the last response is returned or the
        last exception re-raised, never a tenacity ``RetryError``.
        '''
        retrying = Retrying(
            stop=stop_after_attempt(self.retry_times + 1),
            wait=self._wait,
            retry=self._retry,
            sleep=self._sleep,
            before_sleep=self._before_sleep,
            retry_error_callback=lambda state: state.outcome.result(),
        )
        return retrying(fn, *args, **kwargs)
