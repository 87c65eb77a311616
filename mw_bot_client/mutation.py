"""
mw_bot_client.mutation - the path every write request takes.

Every write runs the status check once, then is attempted at most
twice. Each attempt fetches fresh page info and a token, checks the
protection level against the current user, sends the request and reads
the answer. The post-write throttle runs however the write ended, unless
the write turned out to be unnecessary and nothing was sent.
"""
import logging
import time
import requests
from . import codec
from .excs import (WikiError, EditConflict, PermissionDenied, ProtectedPage,
                   CascadeProtected, InsufficientRights, CredentialsExpired,
                   AccountBlocked, TransientError, RateLimited,
                   DatabaseLocked, MutationFailed, UnknownError)
from .page import Protection
from .status import Assertions

__all__ = [
    'MAX_ATTEMPTS',
    'ANONYMOUS_TOKEN',
    'check_rights',
    'upload_level',
    'classify',
    'MutationPipeline',
]

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 2
ANONYMOUS_TOKEN = '+\\' # the csrf token handed to logged-out users

RETRYABLE = (TransientError, MutationFailed,
             requests.exceptions.ConnectionError, requests.exceptions.Timeout)

_ERRORS = {
    'ratelimited': RateLimited,
    'readonly': DatabaseLocked,
    'autoblocked': AccountBlocked,
    'cascadeprotected': CascadeProtected,
    'protectedpage': ProtectedPage,
    'protectedtitle': ProtectedPage,
    'protectednamespace': ProtectedPage,
    'protectednamespace-interface': ProtectedPage,
    'permissiondenied': InsufficientRights,
    'cantsend': InsufficientRights,
    'assertuserfailed': CredentialsExpired,
    'assertbotfailed': CredentialsExpired,
    'notloggedin': CredentialsExpired,
    'unknownerror': UnknownError,
}

_SKIPPED = object() # an attempt that found nothing to do

def check_rights(user, level, cascade=False, move=False, upload=False):
    """Raise if ``user`` (None when logged out) may not change a page
    protected at ``level``.

    Administrators may always proceed. For everybody else a cascade
    protection counts as full protection. UPLOAD only restricts uploads.
    """
    if user is not None and user.is_a('sysop'):
        return
    if cascade:
        raise CascadeProtected('The page is cascade-protected.')
    if level is Protection.NONE:
        return
    if level is Protection.SEMI:
        if user is None:
            raise ProtectedPage('The page is semi-protected.')
        return
    if level is Protection.MOVE:
        if move:
            raise ProtectedPage('The page is move-protected.')
        return
    if level is Protection.SEMI_AND_MOVE:
        if user is None or move:
            raise ProtectedPage('The page is semi- and move-protected.')
        return
    if level is Protection.UPLOAD:
        if upload:
            raise ProtectedPage('The file is upload-protected.')
        return
    raise ProtectedPage('The page is protected ({}).'.format(level.value))

def upload_level(restrictions):
    """The Protection level that applies to uploading over a file page
    with the given action -> group restrictions.
    """
    group = restrictions.get('upload')
    if not group:
        return Protection.NONE
    return Protection.SEMI if group == 'autoconfirmed' else Protection.UPLOAD

def classify(text, accept=None, ignorable=()):
    """Read the answer to a write request.

    Returns the ``accept`` element of a successful answer, or None when
    the server reported an error code listed in ``ignorable``. Anything
    else raises the matching exception; exceptions about the answer
    itself carry it as ``response``.
    """
    if not text or not text.strip():
        raise UnknownError('The server sent an empty response.',
                           response=text)
    doc = codec.parse(text)
    error = codec.api_error(doc)
    if error is not None:
        code, info = error
        if code in ignorable:
            logger.info('Ignoring %s: %s', code, info)
            return None
        message = '{}: {}'.format(code, info)
        if code == 'editconflict':
            raise EditConflict(message)
        if code.startswith('blocked'):
            raise AccountBlocked(message, response=text, code=code)
        if code.startswith('internal_api_error'):
            raise UnknownError(message, response=text, code=code)
        raise _ERRORS.get(code, MutationFailed)(message, response=text,
                                                code=code)
    if accept is None:
        return doc
    node = doc.find(accept)
    if node is None or node.get('result', 'Success') != 'Success':
        raise MutationFailed('No success marker in the {} response.'
                             .format(accept), response=text)
    return node

class MutationPipeline(object):
    """Runs writes for one wiki."""
    def __init__(self, wiki):
        self.wiki = wiki

    def __repr__(self):
        return '<MutationPipeline for {}>'.format(self.wiki)

    def run(self, name, title, build, move=False, right=None, retry=True,
            accept=None, ignorable=(), files=None, tokens='csrf',
            require_exists=False, throttle=True, skip=None, upload=False):
        """Perform one write.

        ``build`` is called with the fresh PageInfo of ``title`` and
        returns the request parameters, or None to skip the write. The
        token and assertion parameters are added here. ``skip`` is a
        predicate on the PageInfo checked before the protection level;
        when it holds nothing is done, nothing is raised and there is no
        throttle. Returns the success element of the answer, or None if
        nothing was done.
        """
        #pylint: disable=too-many-arguments
        session = self.wiki.session
        attempts = MAX_ATTEMPTS if retry else 1
        with session.lock:
            start = time.monotonic()
            result = None
            try:
                self.wiki.status.check()
                for attempt in range(1, attempts + 1):
                    session.retry_armed = attempt < attempts
                    try:
                        result = self._attempt(name, title, build, move,
                                               right, accept, ignorable,
                                               files, tokens, require_exists,
                                               skip, upload)
                        return None if result is _SKIPPED else result
                    except RETRYABLE as exc:
                        if attempt == attempts:
                            logger.error('[%s] %s of %s failed: %s',
                                         session.domain, name, title, exc)
                            raise
                        logger.warning('[%s] %s of %s failed (%s), '
                                       'retrying once', session.domain,
                                       name, title, exc)
            finally:
                session.retry_armed = True
                if throttle and result is not _SKIPPED:
                    self.wiki.governor.throttle(start)

    def _attempt(self, name, title, build, move, right, accept, ignorable,
                 files, tokens, require_exists, skip, upload):
        #pylint: disable=too-many-arguments
        session = self.wiki.session
        if session.blocked:
            raise AccountBlocked('The current user is blocked; '
                                 'log in again to write.')
        user = session.user
        if right is not None and (user is None
                                  or not user.is_allowed_to(right)):
            raise InsufficientRights('Permission denied: cannot {} '
                                     '(needs the {} right).'
                                     .format(name, right))

        info = self.wiki.page_info(title, tokens=tokens)
        if user is not None and (not session.write_cookies
                                 or info.token == ANONYMOUS_TOKEN):
            self.wiki.logout()
            raise CredentialsExpired('Cookies have expired.')
        if require_exists and not info.exists:
            raise WikiError.missingtitle('{} does not exist.'.format(title))
        if skip is not None and skip(info):
            return _SKIPPED
        try:
            check_rights(user, info.protection, info.cascade, move, upload)
            if upload:
                check_rights(user, upload_level(info.restrictions),
                             upload=True)
        except PermissionDenied:
            logger.error('[%s] Cannot %s %s: protected (%s)', session.domain,
                         name, title, info.protection.value)
            raise

        params = build(info)
        if params is None:
            return _SKIPPED
        params.setdefault('token', info.token)
        if session.assertions & Assertions.BOT:
            params.setdefault('assert', 'bot')
        elif user is not None:
            params.setdefault('assert', 'user')
        text = self.wiki.fetch(params, post=True, files=files)
        try:
            node = classify(text, accept, ignorable)
        except AccountBlocked:
            session.blocked = True
            session.write_cookies.clear()
            logger.error('[%s] Cannot %s %s: the current user is blocked',
                         session.domain, name, title)
            raise
        if node is not None:
            logger.info('[%s] Successfully performed %s on %s',
                        session.domain, name, title)
        return node
