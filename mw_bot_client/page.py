"""
This submodule contains the Page and User objects, and the page
metadata fetched before every write.
"""
# pylint: disable=too-many-arguments
from enum import Enum
from .excs import ValidationError

__all__ = [
    'Protection',
    'PageInfo',
    'Page',
    'User',
]

class Protection(Enum):
    """Protection levels of a page.

    Cascade protection is not a level; it is carried separately by
    ``PageInfo.cascade`` and behaves like FULL.
    """
    NONE = 'none'
    SEMI = 'semi'
    FULL = 'full'
    MOVE = 'move'
    SEMI_AND_MOVE = 'semi+move'
    CREATE = 'create'
    UPLOAD = 'upload'

class PageInfo(object):
    """Metadata and a write token for a page, fetched fresh before
    every mutation. Never cache one of these across writes.
    """
    def __init__(self, title, exists=False, protection=Protection.NONE,
                 cascade=False, token=None, lastrevid=None, size=None,
                 touched=None, displaytitle=None, restrictions=None):
        self.title = title
        self.exists = exists
        self.protection = protection
        self.cascade = cascade
        # action -> group, e.g. {'upload': 'sysop'}
        self.restrictions = restrictions if restrictions is not None else {}
        self.token = token
        self.lastrevid = lastrevid
        self.size = size
        self.touched = touched
        self.displaytitle = displaytitle

    def __repr__(self):
        """Represent page info."""
        return '<PageInfo {t} ({p}{c})>'.format(
            t=self.title, p=self.protection.value,
            c=', cascade' if self.cascade else '')

    __str__ = __repr__

    def __bool__(self):
        """Page info is truthy if the page exists."""
        return self.exists

class Page(object):
    """A page on a wiki. Must be initialized with a Wiki instance.

    This is only a handle; every method calls the matching Wiki method.
    """
    def __init__(self, wiki, title):
        self.wiki = wiki
        self.title = title

    def __repr__(self):
        """Represent a page instance."""
        return "<Page {name}>".format(name=self.title)

    def __eq__(self, other):
        """Check if two pages are the same."""
        return isinstance(other, Page) and self.title == other.title

    def __hash__(self):
        """Page.__hash__() <==> hash(Page)"""
        return hash(self.title)

    __str__ = __repr__

    def info(self):
        """Query information about the page."""
        return self.wiki.page_info(self.title)

    def read(self):
        """Retrieve the page's content."""
        return self.wiki.page_text(self.title)

    def edit(self, content, summary, **kwargs):
        """Edit the page with the content content."""
        return self.wiki.edit(self.title, content, summary, **kwargs)

    def delete(self, reason):
        """Delete this page. Note: this is NOT the same thing
        as `del page`! `del` only unsets names, not objects.
        """
        return self.wiki.delete(self.title, reason)

    def move(self, newtitle, reason='', **kwargs):
        """Move this page to a new title."""
        self.wiki.move(self.title, newtitle, reason, **kwargs)
        self.title = newtitle

    def history(self, quantity=None, **kwargs):
        """Generate Revisions of this page, newest first."""
        return self.wiki.page_history(self.title, quantity, **kwargs)

    def top(self):
        """Return the most recent Revision of this page."""
        return self.wiki.top_revision(self.title)

    def backlinks(self, namespace=None, quantity=None):
        """Generate titles of pages that link to this page."""
        return self.wiki.what_links_here(self.title, namespace, quantity)

    def transclusions(self, namespace=None, quantity=None):
        """Generate titles of pages that transclude this page."""
        return self.wiki.what_transcludes_here(self.title, namespace,
                                               quantity)

    def categorymembers(self, namespace=None, quantity=None):
        """Generate titles of pages in this category."""
        return self.wiki.category_members(self.title, namespace, quantity)

    def logs(self, quantity=None, **kwargs):
        """Generate log entries whose target is this page."""
        return self.wiki.log_entries(quantity, target=self.title, **kwargs)

    def links(self, namespace=None, quantity=None):
        """Generate titles of the pages this page links to."""
        return self.wiki.links_on_page(self.title, namespace, quantity)

    def categories(self, quantity=None):
        """Generate titles of the categories this page is in."""
        return self.wiki.page_categories(self.title, quantity)

    def templates(self, namespace=None, quantity=None):
        return self.wiki.page_templates(self.title, namespace, quantity)

    def images(self, quantity=None):
        return self.wiki.page_images(self.title, quantity)

    def creator(self):
        """Return the name of the user who created this page."""
        return self.wiki.page_creator(self.title)

class User(object):
    """A user on a wiki.

    Rights, groups and edit count are cached the first time one of them
    is needed and only refreshed by an explicit ``refresh()``.
    """
    def __init__(self, wiki, name, rights=None, groups=None,
                 editcount=None, blocked=None, emailable=None):
        self.wiki = wiki
        self.name = name
        self._rights = rights
        self._groups = groups
        self._editcount = editcount
        self._blocked = blocked
        self._emailable = emailable

    def __repr__(self):
        """Represent a User."""
        return '<User {un}>'.format(un=self.name)

    __str__ = __repr__

    def __eq__(self, other):
        """Check if two users are the same."""
        return isinstance(other, User) and self.name == other.name

    def __hash__(self):
        """User.__hash__() <==> hash(User)"""
        return hash(self.name)

    def _cached(self, attr):
        if getattr(self, attr) is None:
            self.refresh()
        return getattr(self, attr)

    def refresh(self):
        """Re-fetch rights, groups and edit count. Returns self."""
        data = self.wiki.user_info(self.name)
        if data is None:
            raise ValidationError('User {} does not exist.'.format(self.name))
        self._rights = data._rights
        self._groups = data._groups
        self._editcount = data._editcount
        self._blocked = data._blocked
        self._emailable = data._emailable
        return self

    def invalidate(self):
        """Drop cached data; the next access re-fetches it."""
        self._rights = self._groups = self._editcount = None
        self._blocked = self._emailable = None

    @property
    def rights(self):
        """The set of rights this user holds."""
        return self._cached('_rights')

    @property
    def groups(self):
        """The set of groups this user is in."""
        return self._cached('_groups')

    @property
    def editcount(self):
        """The number of edits this user has made."""
        return self._cached('_editcount')

    @property
    def blocked(self):
        """Whether this user is currently blocked."""
        return self._cached('_blocked')

    @property
    def emailable(self):
        """Whether this user accepts email from other users."""
        return self._cached('_emailable')

    def is_allowed_to(self, right):
        """Check whether this user holds ``right``."""
        return right in self.rights

    def is_a(self, group):
        """Check whether this user is in ``group``."""
        return group in self.groups

    def contribs(self, namespace=None, quantity=None, **kwargs):
        """Get contributions from this user."""
        return self.wiki.contribs(self.name, namespace=namespace,
                                  quantity=quantity, **kwargs)

    def block_log(self, quantity=None):
        """Generate block log entries targeting this user."""
        return self.wiki.log_entries(quantity, logtype='block',
                                     target='User:' + self.name)

    def email(self, message, subject, ccme=False):
        """Email this user."""
        return self.wiki.email_user(self.name, message, subject, ccme)

    def change_groups(self, add=(), remove=(), reason=''):
        """Add this user to and remove them from groups."""
        return self.wiki.change_user_groups(self, add, remove, reason)
