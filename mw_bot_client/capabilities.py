"""
mw_bot_client.capabilities - what a particular family of sites can do
beyond plain MediaWiki.

A Wiki holds one of these and forwards the family-specific operations
to it, so a Wikimedia wiki is the same Wiki class with a different
capability set.
"""
from . import pager
from .excs import WikiError
from .misc import GlobalUsage

__all__ = [
    'SiteCapabilities',
    'WikimediaCapabilities',
]

class SiteCapabilities(object):
    """Capabilities of a plain MediaWiki install: none beyond the core."""
    features = frozenset()

    def __repr__(self):
        return '<{}>'.format(type(self).__name__)

    def supports(self, feature):
        """Check whether ``feature`` (e.g. 'globalusage') is available."""
        return feature in self.features

    def site_matrix(self, wiki):
        """List the domains of the sites in this wiki's family."""
        raise WikiError.nosuchmodule('{} has no site matrix'.format(wiki))

    def global_usage(self, wiki, title, quantity=None):
        """Generate uses of a file on other wikis of the family."""
        raise WikiError.nosuchmodule('{} has no global usage'.format(wiki))

class WikimediaCapabilities(SiteCapabilities):
    """Wikimedia sites: a site matrix and cross-wiki file usage."""
    features = frozenset(['sitematrix', 'globalusage'])

    def site_matrix(self, wiki):
        """List the domains of all open, public Wikimedia sites."""
        doc = wiki.request(action='sitematrix')
        domains = []
        for node in doc.find_all(['site', 'special']):
            if not node.has_attr('url'):
                continue # the <site> list wrapper
            if node.has_attr('closed') or node.has_attr('private') \
                    or node.has_attr('fishbowl'):
                continue
            domains.append(node['url'].split('://', 1)[-1])
        return domains

    def global_usage(self, wiki, title, quantity=None):
        """Generate GlobalUsage records for a file, excluding the wiki
        itself.
        """
        if not title.startswith('File:'):
            title = 'File:' + title
        params = {
            'action': 'query',
            'prop': 'globalusage',
            'titles': title,
            'gufilterlocal': True,
        }
        return pager.generate(
            wiki.query, params, 'gu', 'gucontinue',
            lambda node: GlobalUsage(node.get('wiki'), node.get('title')),
            quantity, wiki.session.query_limit, 'gulimit')
