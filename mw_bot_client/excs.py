"""
mw_bot_client.excs - Exceptions raised by the client.

To catch a permission error:

..code-block:: python

    try:
        wiki.edit('Main Page', contents, 'summary')
    except mw.PermissionDenied as exc:
        print('Cannot edit:', exc)

Errors returned by the API for read requests are raised as subclasses of
``WikiError`` named after the error code:

..code-block:: python

    try:
        wiki.page_text('Special:Version')
    except mw.WikiError.invalidtitle:
        pass

Note that ``EditConflict`` does NOT inherit from WikiError.
"""

__all__ = [
    'WikiError',
    'WikiWarning',
    'EditConflict',
    'LoginError',
    'BadCredentials',
    'UnknownAccount',
    'LoginFailed',
    'PermissionDenied',
    'ProtectedPage',
    'CascadeProtected',
    'InsufficientRights',
    'SessionError',
    'CredentialsExpired',
    'AccountBlocked',
    'TransientError',
    'RateLimited',
    'DatabaseLocked',
    'MutationFailed',
    'UnknownError',
    'ValidationError',
    'AssertionFailed',
]

class _MetaGetattr(type):
    """Metaclass to provide __getattr__ on a class."""
    def __getattr__(cls, name):
        # error codes never start with an underscore; private lookups
        # by introspection tools must not mint new classes
        if name.startswith('_'):
            raise AttributeError(name)
        setattr(cls, name, type(name, (cls,), {}))
        return getattr(cls, name)

#pylint: disable=too-few-public-methods
class WikiError(Exception, metaclass=_MetaGetattr):
    """An error returned by the wiki's API, or raised while talking to it.

    ``response`` is the raw server response when one is available.
    """
    def __init__(self, message='', response=None, code=None):
        super().__init__(message)
        self.response = response
        self._code = code

    @property
    def code(self):
        """Return the API error code, falling back to the class name."""
        return self._code or type(self).__name__

class WikiWarning(UserWarning, metaclass=_MetaGetattr):
    """The API sent a warning in the response."""
    pass

class EditConflict(Exception):
    """Someone else edited the page after the base timestamp of an edit.

    Note: this exception does NOT inherit from WikiError! You must
    use it explicitly:
        try:
            wiki.edit(title, contents, summary, basetime=stamp)
        except (WikiError, EditConflict):
            print('API error or edit conflict')
    """
    pass

class LoginError(WikiError):
    """Logging in failed."""

class BadCredentials(LoginError):
    """The password was wrong."""

class UnknownAccount(LoginError):
    """The account does not exist."""

class LoginFailed(LoginError):
    """Logging in failed for a reason the server did not explain."""

class PermissionDenied(WikiError):
    """The current user may not perform this action."""

class ProtectedPage(PermissionDenied):
    """The target page is protected at a level the user cannot edit."""

class CascadeProtected(ProtectedPage):
    """The target page is transcluded into a cascade-protected page."""

class InsufficientRights(PermissionDenied):
    """The user lacks the right needed for the action."""

class SessionError(WikiError):
    """The session cannot be used for writing any more."""

class CredentialsExpired(SessionError):
    """The session cookies have expired."""

class AccountBlocked(SessionError):
    """The current user (or their IP address) is blocked."""

class TransientError(WikiError):
    """A server-side condition that may clear up by itself."""

class RateLimited(TransientError):
    """The server throttled the action."""

class DatabaseLocked(TransientError):
    """The wiki database is read-only."""

class MutationFailed(WikiError):
    """A write request was answered without a success marker."""

class UnknownError(WikiError):
    """The API reported an internal error, or sent nothing at all."""

class ValidationError(WikiError, ValueError):
    """Arguments were rejected before anything was sent to the server."""

class AssertionFailed(AssertionError):
    """A configured session assertion (logged in, bot, no messages) is false."""
