"""
mw_bot_client.status - periodic self checks run before mutations.
"""
import enum
import logging
from .excs import AssertionFailed, AccountBlocked

__all__ = [
    'DEFAULT_STATUS_INTERVAL',
    'Assertions',
    'StatusChecker',
]

logger = logging.getLogger(__name__)

DEFAULT_STATUS_INTERVAL = 100 # mutations between full status checks

class Assertions(enum.IntFlag):
    """Conditions a session can be required to meet before it writes."""
    NONE = 0
    LOGGED_IN = 1
    BOT = 2
    NO_MESSAGES = 4

class StatusChecker(object):
    """Runs the assertions configured on a wiki's session.

    The caller must hold the session lock.
    """
    def __init__(self, wiki):
        self.wiki = wiki
        self.counter = 0

    def __repr__(self):
        return '<StatusChecker {c}/{i}>'.format(
            c=self.counter, i=self.wiki.status_interval)

    def prime(self):
        """Make the next check() a full one."""
        self.counter = self.wiki.status_interval

    def check(self):
        """Count one mutation and verify the assertions.

        Every ``status_interval`` calls the identity is refreshed from
        the server and, with NO_MESSAGES, the new message flag fetched.
        A block found by the refresh disables writes like one reported
        by the server.
        """
        session = self.wiki.session
        assertions = session.assertions
        messages = False
        if self.counter >= session.status_interval:
            self.counter = 0
            if session.user is not None:
                session.user.refresh()
                if session.user.blocked:
                    session.blocked = True
                    session.write_cookies.clear()
                    logger.error('[%s] %s is blocked', session.domain,
                                 session.user.name)
                    raise AccountBlocked('{} is blocked; log in again to '
                                         'write.'.format(session.user.name))
            if assertions & Assertions.NO_MESSAGES:
                messages = self.wiki.has_new_messages()
            logger.debug('[%s] Status check done', session.domain)
        else:
            self.counter += 1

        if assertions & Assertions.LOGGED_IN and session.user is None:
            raise AssertionFailed('Not logged in')
        if assertions & Assertions.BOT and (
                session.user is None or not session.user.is_a('bot')):
            raise AssertionFailed('Not a bot')
        if messages:
            raise AssertionFailed('There are new messages')
