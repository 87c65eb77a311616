"""Test the lag back-off and the write throttle."""
import threading
from unittest import TestCase, mock
from mw_bot_client.governor import RateGovernor, LAG_SLEEP

class TestGovernor(TestCase):
    """Test RateGovernor."""
    @mock.patch('time.sleep')
    def test_lag_wait(self, sleep):
        """Assert that high lag is waited out, then requests go on."""
        governor = RateGovernor('test', maxlag=5)
        lag = mock.Mock(side_effect=[12, 8, 2])
        governor.wait_for_lag(lag)
        self.assertEqual(lag.call_count, 3)
        self.assertEqual(sleep.call_args_list,
                         [mock.call(LAG_SLEEP), mock.call(LAG_SLEEP)])
    def test_lag_check_interval(self):
        """Assert that the lag is checked at most once per interval."""
        governor = RateGovernor('test', maxlag=5)
        lag = mock.Mock(return_value=0)
        governor.wait_for_lag(lag)
        governor.wait_for_lag(lag)
        self.assertEqual(lag.call_count, 1)
        governor.last_lag_check -= 31
        governor.wait_for_lag(lag)
        self.assertEqual(lag.call_count, 2)
    def test_disabled(self):
        """Assert that a maxlag below 1 disables the lag check."""
        governor = RateGovernor('test', maxlag=0)
        lag = mock.Mock(return_value=100)
        governor.wait_for_lag(lag)
        self.assertFalse(lag.called)
    def test_no_stampede(self):
        """Assert that concurrent callers share one lag check."""
        governor = RateGovernor('test', maxlag=5)
        started = threading.Event()
        release = threading.Event()
        calls = []
        def lag():
            calls.append(1)
            started.set()
            release.wait(5)
            return 0
        first = threading.Thread(target=governor.wait_for_lag, args=(lag,))
        first.start()
        started.wait(5)
        others = [threading.Thread(target=governor.wait_for_lag,
                                   args=(lag,)) for _ in range(4)]
        for thread in others:
            thread.start()
        release.set()
        for thread in [first] + others:
            thread.join(5)
        self.assertEqual(len(calls), 1)

    @mock.patch('time.sleep')
    @mock.patch('time.monotonic', return_value=103.0)
    def test_throttle(self, monotonic, sleep):
        """Assert that the throttle sleeps out the rest of the interval."""
        governor = RateGovernor('test', throttle=10)
        self.assertEqual(governor.throttle(100.0), 7.0)
        sleep.assert_called_once_with(7.0)

    @mock.patch('time.sleep')
    @mock.patch('time.monotonic', return_value=120.0)
    def test_throttle_elapsed(self, monotonic, sleep):
        """Assert that a slow write is not slowed down further."""
        governor = RateGovernor('test', throttle=10)
        self.assertEqual(governor.throttle(100.0), 0)
        self.assertFalse(sleep.called)
