"""
mw_bot_client.governor - keeps a session polite: backs off while the
database replication lag is too high and spaces out writes.
"""
import logging
import threading
import time

__all__ = [
    'DEFAULT_THROTTLE',
    'DEFAULT_MAXLAG',
    'LAG_CHECK_INTERVAL',
    'LAG_SLEEP',
    'RateGovernor',
]

logger = logging.getLogger(__name__)

DEFAULT_THROTTLE = 10 # seconds between writes
DEFAULT_MAXLAG = 5 # seconds; below 1 disables the lag check
LAG_CHECK_INTERVAL = 30 # seconds between lag probes
LAG_SLEEP = 30 # seconds to wait while the lag is too high

class RateGovernor(object):
    """Lag back-off and write throttle for one session."""
    def __init__(self, domain, throttle=DEFAULT_THROTTLE,
                 maxlag=DEFAULT_MAXLAG):
        self.domain = domain
        self.throttle_interval = throttle
        self.maxlag = maxlag
        self.last_lag_check = None
        self._lag_lock = threading.Lock()

    def __repr__(self):
        return '<RateGovernor throttle={t}s maxlag={m}s>'.format(
            t=self.throttle_interval, m=self.maxlag)

    def _due(self):
        return self.last_lag_check is None \
            or time.monotonic() - self.last_lag_check >= LAG_CHECK_INTERVAL

    def wait_for_lag(self, probe):
        """Block while the lag reported by ``probe()`` exceeds maxlag.

        Only one thread probes at a time; the others see its timestamp
        and go straight on.
        """
        if self.maxlag < 1 or not self._due():
            return
        with self._lag_lock:
            if not self._due():
                return
            # stamp first so concurrent callers skip the probe
            self.last_lag_check = time.monotonic()
            lag = probe()
            while lag > self.maxlag:
                logger.warning('[%s] Sleeping for %ds as current database lag '
                               '(%ss) exceeds the maximum allowed value of %ss',
                               self.domain, LAG_SLEEP, lag, self.maxlag)
                time.sleep(LAG_SLEEP)
                lag = probe()
                self.last_lag_check = time.monotonic()

    def throttle(self, start):
        """Sleep until ``throttle_interval`` seconds have passed since
        ``start`` (a time.monotonic() value).
        """
        remaining = self.throttle_interval - (time.monotonic() - start)
        if remaining > 0:
            time.sleep(remaining)
        return max(remaining, 0)
