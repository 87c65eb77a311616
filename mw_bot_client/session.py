"""
mw_bot_client.session - the mutable state behind a Wiki.

Everything here that writes can touch (cookies, identity, counters)
must only be changed while holding ``Session.lock``.
"""
import threading
from .excs import ValidationError
from .governor import DEFAULT_THROTTLE, DEFAULT_MAXLAG
from .status import Assertions, DEFAULT_STATUS_INTERVAL

__all__ = [
    'SNAPSHOT_VERSION',
    'DEFAULT_QUERY_LIMIT',
    'HIGH_QUERY_LIMIT',
    'Session',
    'make_snapshot',
    'read_snapshot',
]

SNAPSHOT_VERSION = 1
DEFAULT_QUERY_LIMIT = 500
HIGH_QUERY_LIMIT = 5000 # for users with apihighlimits

class Session(object):
    """State of one connection to a wiki.

    ``cookies`` are sent with plain reads. ``write_cookies`` are
    harvested whenever a token is fetched and are sent with every POST.
    """
    #pylint: disable=too-many-instance-attributes
    def __init__(self, domain, script_path='/w', user_agent=None,
                 scheme='https', throttle=DEFAULT_THROTTLE, maxlag=DEFAULT_MAXLAG,
                 assertions=Assertions.NONE,
                 status_interval=DEFAULT_STATUS_INTERVAL):
        self.domain = domain
        self.script_path = script_path
        self.scheme = scheme
        self.user_agent = user_agent
        self.throttle = throttle
        self.maxlag = maxlag
        self.assertions = assertions
        self.status_interval = status_interval
        self.lock = threading.RLock()
        self.cookies = {}
        self.write_cookies = {}
        self.user = None
        self.blocked = False
        self.retry_armed = True
        self.query_limit = DEFAULT_QUERY_LIMIT
        self.namespaces = None
        self.watchlist = None

    def __repr__(self):
        return '<Session {d} as {u}>'.format(
            d=self.domain, u=self.user.name if self.user else 'anonymous')

    def reset(self):
        """Forget the identity and all cookies."""
        with self.lock:
            self.cookies.clear()
            self.write_cookies.clear()
            self.user = None
            self.blocked = False
            self.retry_armed = True
            self.query_limit = DEFAULT_QUERY_LIMIT
            self.watchlist = None

    def invalidate_namespaces(self):
        """Drop the namespace cache."""
        self.namespaces = None

    def invalidate_watchlist(self):
        """Drop the watchlist cache."""
        self.watchlist = None

def make_snapshot(session):
    """Return a plain, JSON-serializable dict describing ``session``.

    Write cookies are not included; they are fetched again with the
    next token.
    """
    with session.lock:
        return {
            'version': SNAPSHOT_VERSION,
            'domain': session.domain,
            'script_path': session.script_path,
            'scheme': session.scheme,
            'username': session.user.name if session.user else None,
            'cookies': dict(session.cookies),
            'throttle': session.throttle,
            'maxlag': session.maxlag,
            'assertions': int(session.assertions),
            'namespaces': dict(session.namespaces)
                          if session.namespaces is not None else None,
            'status_interval': session.status_interval,
            'user_agent': session.user_agent,
        }

def read_snapshot(data):
    """Build a Session from a dict made by ``make_snapshot``.

    The identity is left to the caller (it needs a Wiki); the username
    is returned alongside the session.
    """
    if not isinstance(data, dict) or data.get('version') != SNAPSHOT_VERSION:
        raise ValidationError('Unsupported session snapshot version: {!r}'
                              .format(data.get('version')
                                      if isinstance(data, dict) else data))
    try:
        session = Session(
            data['domain'],
            data['script_path'],
            user_agent=data['user_agent'],
            scheme=data.get('scheme', 'https'),
            throttle=data['throttle'],
            maxlag=data['maxlag'],
            assertions=Assertions(data['assertions']),
            status_interval=data['status_interval'],
        )
    except KeyError as exc:
        raise ValidationError('Session snapshot is missing {}'.format(exc))
    session.cookies.update(data.get('cookies') or {})
    if data.get('namespaces') is not None:
        session.namespaces = dict(data['namespaces'])
    return session, data.get('username')
