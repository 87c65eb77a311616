"""This submodule contains the small classes."""
import logging
from collections import namedtuple
from . import codec

__all__ = [
    'Meta',
    'ExternalLink',
    'InterwikiLink',
    'SearchResult',
    'GlobalUsage',
]

logger = logging.getLogger(__name__)

ExternalLink = namedtuple('ExternalLink', 'title url')
InterwikiLink = namedtuple('InterwikiLink', 'title prefix target')
SearchResult = namedtuple('SearchResult', 'title snippet size timestamp')
GlobalUsage = namedtuple('GlobalUsage', 'wiki title')

class Meta(object):
    """A separate class for the API "meta" modules."""
    def __init__(self, wiki):
        """Initialize the instance with its wiki."""
        self.wiki = wiki

    def __repr__(self):
        """Represent the Meta instance (there should only ever be one!)."""
        return '<Meta>'

    __str__ = __repr__

    def tokens(self, kind='csrf'):
        """Get a token for a database-modifying action.

        The parameter "kind" specifies the type. Fetching a token also
        refreshes the session's write cookies.
        """
        params = {
            'action': 'query',
            'meta': 'tokens',
            'type': kind,
        }
        doc = self.wiki.request(_write=True, **params)
        return codec.tokens_from(doc).get(kind)

    def userinfo(self, prop=None):
        """Retrieve info about the currently logged-in user.

        Returns the <userinfo> element.
        """
        params = {
            'action': 'query',
            'meta': 'userinfo',
            'uiprop': prop,
        }
        return self.wiki.request(**params).find('userinfo')

    def has_new_messages(self):
        """Check whether the current user has unread talk page messages."""
        info = self.userinfo('hasmsg')
        return info is not None and info.has_attr('messages')

    def siteinfo(self, prop='general'):
        """Retrieve information about the site.

        Returns the parsed document; see
        https://www.mediawiki.org/wiki/API:Siteinfo for its layout.
        """
        params = {
            'action': 'query',
            'meta': 'siteinfo',
            'siprop': prop,
        }
        return self.wiki.request(**params)

    def lag(self):
        """Return the current database replication lag in seconds.

        This request is exempt from the lag check itself.
        """
        params = {
            'action': 'query',
            'meta': 'siteinfo',
            'siprop': 'dbrepllag',
        }
        doc = self.wiki.request(_gate=False, **params)
        db = doc.find('db')
        lag = codec.to_int(db.get('lag')) if db is not None else None
        if lag is None:
            lag = 0 # no replicas, or none reporting
        logger.info('[%s] Current database replication lag is %s seconds',
                    self.wiki.domain, lag)
        return lag

    def namespaces(self):
        """Return a dict mapping namespace names (and aliases) to IDs."""
        doc = self.siteinfo('namespaces|namespacealiases')
        result = {}
        for node in doc.find_all(['ns']):
            nsid = codec.to_int(node.get('id'))
            name = node.get_text()
            if name:
                result[name] = nsid
            if node.get('canonical'):
                result.setdefault(node.get('canonical'), nsid)
        logger.info('[%s] Retrieved namespace list (%d names)',
                    self.wiki.domain, len(result))
        return result

    def statistics(self):
        """Return site statistics (pages, articles, edits, images,
        users, activeusers, admins, jobs) as a dict of ints.
        """
        doc = self.siteinfo('statistics')
        stats = doc.find('statistics')
        return {key: codec.to_int(value)
                for key, value in (stats.attrs if stats is not None else {}).items()}

    def version(self):
        """Return the MediaWiki version string of the site."""
        general = self.siteinfo('general').find('general')
        return general.get('generator') if general is not None else None
