"""
A MediaWiki API client for bots.

Logs in, reads pages and lists of any length, and writes politely:
every write fetches a fresh token, checks page protection first, backs
off while the database is lagging and is spaced out by a throttle.

Requires the ``requests``, ``beautifulsoup4`` and ``lxml`` libraries.

http://www.mediawiki.org/

Installation
============

To install the latest development version::

    pip install -e .

Example Usage
=============

.. code-block:: python

    import mw_bot_client as mw

Log in and edit a page:

.. code-block:: python

    wp = mw.Wiki('en.wikipedia.org', user_agent='MyCoolBot/0.0.0')

    wp.login('ExampleBot', password)

    sandbox = wp.page('User:ExampleBot/sandbox')
    contents = sandbox.read()
    sandbox.edit(contents + '\\n This is a test!', 'Made a test edit')

List pages in a category:

.. code-block:: python

    for title in wp.category('Redirects').categorymembers(quantity=100):
        print(title)

Revert the last edit to a page if it was vandalism:

.. code-block:: python

    top = wp.top_revision('Main Page')
    if looks_like_vandalism(top):
        wp.rollback(top)

Keep a session across runs:

.. code-block:: python

    with open('session.json', 'w') as f:
        json.dump(wp.snapshot(), f)
    ...
    with open('session.json') as f:
        wp = mw.Wiki.restore(json.load(f))

MIT Licensed.
"""

__version__ = '1.0.0'

from .wiki import Wiki
from .page import Page, User, PageInfo, Protection
from .revn import (Revision, LogEntry, FileVersion, MoveDetails,
                   RenameDetails, BlockDetails, RightsDetails,
                   ProtectionDetails)
from .status import Assertions
from .capabilities import SiteCapabilities, WikimediaCapabilities
from .excs import *
from .misc import *

__all__ = [
    'Wiki',
    'Page',
    'User',
    'PageInfo',
    'Protection',
    'Revision',
    'LogEntry',
    'FileVersion',
    'MoveDetails',
    'RenameDetails',
    'BlockDetails',
    'RightsDetails',
    'ProtectionDetails',
    'Assertions',
    'SiteCapabilities',
    'WikimediaCapabilities',
    'Meta',
    'ExternalLink',
    'InterwikiLink',
    'SearchResult',
    'GlobalUsage',
] + excs.__all__
