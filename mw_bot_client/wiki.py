"""
See the Wiki docstrings.
"""
#pylint: disable=too-many-lines
import logging
import time
from warnings import warn as _warn
from . import codec, pager
from .page import Page, User
from .revn import Revision
from .misc import Meta, ExternalLink, InterwikiLink, SearchResult
from .excs import (WikiError, WikiWarning, BadCredentials, UnknownAccount,
                   LoginFailed, ValidationError)
from .governor import RateGovernor, DEFAULT_THROTTLE, DEFAULT_MAXLAG
from .transport import Transport
from .session import (Session, make_snapshot, read_snapshot,
                      DEFAULT_QUERY_LIMIT, HIGH_QUERY_LIMIT)
from .status import Assertions, StatusChecker, DEFAULT_STATUS_INTERVAL
from .mutation import MutationPipeline
from .capabilities import SiteCapabilities

__all__ = [
    'LOGIN_COOLDOWN',
    'DEFAULT_USER_AGENT',
    'Wiki',
]

logger = logging.getLogger(__name__)

LOGIN_COOLDOWN = 20 # seconds to wait after a failed login
DEFAULT_USER_AGENT = 'mw_bot_client/1.0.0, python-requests'

_REVPROPS = 'ids|timestamp|user|comment|flags|size'

class Wiki(object): #pylint: disable=too-many-public-methods
    #pylint: disable=too-many-arguments
    """The base class for a wiki. Contains most API modules as methods.

    Nothing is requested from the server on construction.
    """

    def __init__(self, domain='en.wikipedia.org', script_path='/w',
                 user_agent=None, capabilities=None, scheme='https',
                 throttle=DEFAULT_THROTTLE, maxlag=DEFAULT_MAXLAG,
                 zipped=True, assertions=Assertions.NONE,
                 status_interval=DEFAULT_STATUS_INTERVAL):
        """Initialize a wiki with its domain.

        If user_agent is specified, all requests will use that user agent.
        Otherwise, a generic user agent is used. ``capabilities`` is a
        SiteCapabilities instance for the site family (for example
        WikimediaCapabilities); by default only the core API is assumed.
        """
        self.session = Session(domain, script_path,
                               user_agent or DEFAULT_USER_AGENT, scheme,
                               throttle, maxlag, assertions, status_interval)
        self._setup(zipped, capabilities)

    def _setup(self, zipped, capabilities):
        session = self.session
        self.api_url = '{scheme}://{domain}{path}/api.php'.format(
            scheme=session.scheme, domain=session.domain,
            path=session.script_path)
        self.transport = Transport(self.api_url, session.user_agent, zipped)
        self.governor = RateGovernor(session.domain, session.throttle,
                                     session.maxlag)
        self.status = StatusChecker(self)
        self.pipeline = MutationPipeline(self)
        self.capabilities = capabilities if capabilities is not None \
            else SiteCapabilities()
        self.meta = Meta(self)

    def __repr__(self):
        """Represent a Wiki object."""
        return "<Wiki at {addr}>".format(addr=self.domain)

    def __eq__(self, other):
        """Check if two Wikis are equal."""
        return isinstance(other, Wiki) and self.api_url == other.api_url

    def __hash__(self):
        """Wiki.__hash__() <==> hash(Wiki)"""
        return hash(self.api_url)

    __str__ = __repr__

    # configuration

    @property
    def domain(self):
        """The domain name of the wiki, e.g. en.wikipedia.org."""
        return self.session.domain

    @property
    def current_user(self):
        """The logged-in User, or None."""
        return self.session.user

    @property
    def throttle(self):
        """Minimum number of seconds between the starts of two writes."""
        return self.session.throttle

    @throttle.setter
    def throttle(self, value):
        self.session.throttle = self.governor.throttle_interval = value
        logger.info('[%s] Throttle set to %s seconds', self.domain, value)

    @property
    def maxlag(self):
        """Maximum tolerated database lag in seconds; below 1 disables
        the lag check.
        """
        return self.session.maxlag

    @maxlag.setter
    def maxlag(self, value):
        self.session.maxlag = self.governor.maxlag = value
        logger.info('[%s] Setting maximum allowable database lag to %s',
                    self.domain, value)

    @property
    def assertions(self):
        """Assertions checked before every write."""
        return self.session.assertions

    @assertions.setter
    def assertions(self, value):
        self.session.assertions = Assertions(value)

    @property
    def status_interval(self):
        """Number of writes between full status checks."""
        return self.session.status_interval

    @status_interval.setter
    def status_interval(self, value):
        self.session.status_interval = value

    @property
    def user_agent(self):
        """The User-Agent header sent with every request."""
        return self.session.user_agent

    @user_agent.setter
    def user_agent(self, value):
        self.session.user_agent = self.transport.user_agent = value

    @property
    def zipped(self):
        """Whether responses are requested gzip-compressed."""
        return self.transport.zipped

    @zipped.setter
    def zipped(self, value):
        self.transport.zipped = value

    # requests

    def fetch(self, params, post=False, write=False, files=None, gate=True,
              harvest=None):
        """Send a request and return the response text.

        Reads send the session cookies and POSTs send the write cookies.
        With ``write``, the cookies set by the response become the new
        write cookies (on top of the session cookies).
        """
        session = self.session
        if gate:
            self.governor.wait_for_lag(self.meta.lag)
        if write and harvest is None:
            harvest = {}
        if post:
            text = self.transport.post(params, session.write_cookies,
                                       files=files, harvest=harvest)
        else:
            text = self.transport.get(params, session.cookies,
                                      harvest=harvest)
        if write:
            with session.lock:
                session.write_cookies.clear()
                session.write_cookies.update(session.cookies)
                session.write_cookies.update(harvest)
        return text

    def request(self, _post=False, _write=False, _gate=True, _files=None,
                **params):
        """Inner request method.

        Remains public since it might be used per se. Returns the parsed
        response; API errors are raised as WikiError.<code> and API
        warnings are issued as WikiWarnings.
        """
        text = self.fetch(params, post=_post, write=_write, files=_files,
                          gate=_gate)
        doc = codec.parse(text)
        error = codec.api_error(doc)
        if error is not None:
            code, info = error
            raise getattr(WikiError, code or 'unknownerror')(
                code + ': ' + info, response=text, code=code)
        for module, value in codec.api_warnings(doc):
            _warn('warning from {} module: {}'.format(module, value),
                  WikiWarning)
        return doc

    def post_request(self, **params):
        """Alias for Wiki.request(_post=True)"""
        return self.request(_post=True, **params)

    def query(self, params):
        """Wiki.request with the parameters as one dict."""
        return self.request(**params)

    def _generate(self, params, tag, cont, build, quantity, limitkey):
        """Centralize generation of API data."""
        return pager.generate(self.query, params, tag, cont, build,
                              quantity, self.session.query_limit, limitkey)

    def close(self):
        """Close the connections of this wiki."""
        self.transport.close()

    # session

    def login(self, username, password):
        """Login with a username and password; store cookies.

        Returns the logged-in User. A failed login sleeps for
        LOGIN_COOLDOWN seconds before raising.
        """
        session = self.session
        with session.lock:
            lgtoken = self.meta.tokens('login')
            params = {
                'action': 'login',
                'lgname': username,
                'lgpassword': password,
                'lgtoken': lgtoken,
            }
            harvest = {}
            text = self.fetch(params, post=True, harvest=harvest)
            node = codec.parse(text).find('login')
            result = node.get('result') if node is not None else None
            if result == 'Success':
                session.cookies.update(session.write_cookies)
                session.cookies.update(harvest)
                session.write_cookies.update(harvest)
                session.blocked = False
                session.user = User(self, node.get('lgusername', username))
                if session.user.is_allowed_to('apihighlimits'):
                    session.query_limit = HIGH_QUERY_LIMIT
                else:
                    session.query_limit = DEFAULT_QUERY_LIMIT
                logger.info('[%s] Successfully logged in as %s',
                            self.domain, session.user.name)
                return session.user

            logger.warning('[%s] Failed to log in as %s: %s', self.domain,
                           username, result)
            time.sleep(LOGIN_COOLDOWN)
            if result in ('WrongPass', 'WrongPluginPass'):
                raise BadCredentials('Failed to log in as {}: wrong password.'
                                     .format(username), response=text)
            if result == 'NotExists':
                raise UnknownAccount('Failed to log in as {}: the account '
                                     'does not exist.'.format(username),
                                     response=text)
            reason = node.get('reason') if node is not None else None
            raise LoginFailed('Failed to log in as {}: {}'.format(
                username, reason or result or 'unknown failure'),
                              response=text)

    def logout(self):
        """Forget the current user and the cookies of this session.

        Nothing is sent to the server; other holders of the same session
        cookies stay logged in.
        """
        with self.session.lock:
            user = self.session.user
            self.session.reset()
            self.status.counter = 0
        logger.info('[%s] Logged out %s', self.domain,
                    user.name if user is not None else 'anonymous user')

    def logout_everywhere(self):
        """End the session on the server as well, logging out every
        holder of it.
        """
        with self.session.lock:
            token = self.meta.tokens()
            self.request(_post=True, action='logout', token=token)
            self.logout()

    def snapshot(self):
        """Return the state of this session as a plain dict.

        Pass it to Wiki.restore to resume the session without logging in.
        """
        return make_snapshot(self.session)

    @classmethod
    def restore(cls, data, capabilities=None, zipped=True):
        """Rebuild a Wiki from a dict made by Wiki.snapshot.

        The first write after restoring performs a full status check.
        """
        session, username = read_snapshot(data)
        wiki = cls.__new__(cls)
        wiki.session = session
        wiki._setup(zipped, capabilities)
        if username is not None:
            session.user = User(wiki, username)
        wiki.status.prime()
        logger.info('[%s] Restored session for %s', session.domain,
                    username or 'anonymous user')
        return wiki

    def page(self, title):
        """Return a Page instance based off of the title of the page."""
        if isinstance(title, Page):
            return title
        return Page(self, title)

    def category(self, title):
        """Return a Page instance based off of the title of the page
        with `Category:` prepended.
        """
        if isinstance(title, Page):
            return title
        return Page(self, 'Category:' + title)

    def user(self, name):
        """Return a User instance based off of the username."""
        if isinstance(name, User):
            return name
        return User(self, name)

    # pages

    def page_info(self, title, tokens=None):
        """Fetch the PageInfo of a page.

        With ``tokens`` (a token type such as 'csrf' or 'rollback') a
        token is fetched along with it and the write cookies refreshed.
        """
        params = {
            'action': 'query',
            'prop': 'info',
            'inprop': 'protection|displaytitle',
            'titles': title,
        }
        if tokens:
            params['meta'] = 'tokens'
            params['type'] = tokens
        doc = self.request(_write=bool(tokens), **params)
        return codec.page_info_from(doc, title, tokens or 'csrf')

    def pages_exist(self, titles):
        """Return a list of booleans, one per title."""
        titles = list(titles)
        present = {}
        normalized = {}
        for i in range(0, len(titles), 50):
            doc = self.request(action='query', prop='info',
                               titles=titles[i:i + 50])
            for node in doc.find_all('n'):
                normalized[node.get('from')] = node.get('to')
            for node in doc.find_all('page'):
                present[node.get('title')] = not (node.has_attr('missing')
                                                  or node.has_attr('invalid'))
        return [present.get(normalized.get(title, title), False)
                for title in titles]

    def exists(self, title):
        """Check whether a page exists."""
        return self.pages_exist([title])[0]

    def page_text(self, title):
        """Retrieve the wikitext of the current revision of a page.

        Returns None if the text is hidden.
        """
        params = {
            'action': 'query',
            'prop': 'revisions',
            'rvprop': 'content',
            'rvslots': 'main',
            'titles': title,
        }
        doc = self.request(**params)
        page = doc.find('page')
        if page is None or page.has_attr('missing') \
                or page.has_attr('invalid'):
            raise WikiError.missingtitle('{} does not exist.'.format(title))
        rev = page.find('rev')
        if rev is None:
            return ''
        slot = rev.find('slot')
        node = slot if slot is not None else rev
        if node.has_attr('texthidden'):
            return None
        return node.get_text()

    def parse(self, text, title=None, **evil):
        """Parse wikitext into HTML."""
        params = {
            'action': 'parse',
            'text': text,
            'title': title,
            'prop': 'text',
            'contentmodel': 'wikitext',
            'disablelimitreport': True,
        }
        params.update(evil)
        return self.request(**params).find('parse').find('text').get_text()

    def rendered_text(self, title):
        """Return the HTML of a page as rendered by the wiki."""
        params = {
            'action': 'parse',
            'page': title,
            'redirects': True,
            'prop': 'text',
            'disablelimitreport': True,
        }
        return self.request(**params).find('parse').find('text').get_text()

    def section_text(self, title, number):
        """Retrieve the wikitext of section ``number`` of a page (0 is
        the lead).
        """
        params = {
            'action': 'query',
            'prop': 'revisions',
            'rvprop': 'content',
            'rvslots': 'main',
            'rvsection': number,
            'titles': title,
        }
        try:
            doc = self.request(**params)
        except (WikiError.rvnosuchsection, WikiError.nosuchsection) as exc:
            raise ValidationError('There is no section {} in {}'.format(
                number, title)) from exc
        rev = doc.find('rev')
        if rev is None:
            raise WikiError.missingtitle('{} does not exist.'.format(title))
        slot = rev.find('slot')
        return (slot if slot is not None else rev).get_text()

    def section_map(self, title):
        """Return a dict mapping section numbers ("1", "2.1", ...) to
        section headings, in page order.
        """
        params = {
            'action': 'parse',
            'page': title,
            'redirects': True,
            'prop': 'sections',
        }
        sections = self.request(**params).find('sections')
        if sections is None:
            return {}
        return {s.get('number'): s.get('line')
                for s in sections.find_all('s', recursive=False)}

    def export(self, title):
        """Export the current revision of a page as Special:Export XML."""
        params = {
            'action': 'query',
            'export': True,
            'exportnowrap': True,
            'titles': title,
        }
        return self.fetch(params)

    def links_on_page(self, title, namespace=None, quantity=None):
        """Generate titles of the pages a page links to."""
        params = {
            'action': 'query',
            'prop': 'links',
            'titles': title,
            'plnamespace': namespace,
        }
        return self._generate(params, 'pl', 'plcontinue',
                              lambda node: node.get('title'),
                              quantity, 'pllimit')

    def page_categories(self, title, quantity=None):
        """Generate titles of the categories a page is in, hidden
        categories included.
        """
        params = {
            'action': 'query',
            'prop': 'categories',
            'titles': title,
        }
        return self._generate(params, 'cl', 'clcontinue',
                              lambda node: node.get('title'),
                              quantity, 'cllimit')

    def page_templates(self, title, namespace=None, quantity=None):
        """Generate titles of the pages a page transcludes."""
        params = {
            'action': 'query',
            'prop': 'templates',
            'titles': title,
            'tlnamespace': namespace,
        }
        return self._generate(params, 'tl', 'tlcontinue',
                              lambda node: node.get('title'),
                              quantity, 'tllimit')

    def page_images(self, title, quantity=None):
        """Generate titles of the files used on a page."""
        params = {
            'action': 'query',
            'prop': 'images',
            'titles': title,
        }
        return self._generate(params, 'im', 'imcontinue',
                              lambda node: node.get('title'),
                              quantity, 'imlimit')

    def language_links(self, title):
        """Return a dict mapping language codes to the titles of the same
        page on the other language wikis.
        """
        params = {
            'action': 'query',
            'prop': 'langlinks',
            'titles': title,
        }
        return dict(self._generate(
            params, 'll', 'llcontinue',
            lambda node: (node.get('lang'), node.get_text()),
            None, 'lllimit'))

    # revisions

    def top_revision(self, title):
        """Return the most recent Revision of a page, or None if the page
        does not exist.
        """
        params = {
            'action': 'query',
            'prop': 'revisions',
            'rvprop': _REVPROPS,
            'rvlimit': 1,
            'titles': title,
        }
        page = self.request(**params).find('page')
        rev = page.find('rev') if page is not None else None
        if rev is None:
            return None
        return codec.revision_from(rev, page.get('title', title))

    def revision(self, revid):
        """Return the Revision with the given ID, or None if there is none."""
        params = {
            'action': 'query',
            'prop': 'revisions',
            'rvprop': _REVPROPS,
            'revids': revid,
        }
        page = self.request(**params).find('page')
        rev = page.find('rev') if page is not None else None
        if rev is None:
            return None
        return codec.revision_from(rev, page.get('title'))

    def page_history(self, title, quantity=None, start=None, end=None):
        """Generate Revisions of a page, newest first.

        ``start`` and ``end`` are datetimes bounding the history.
        """
        params = {
            'action': 'query',
            'prop': 'revisions',
            'rvprop': _REVPROPS,
            'titles': title,
            'rvstart': start,
            'rvend': end,
        }
        return self._generate(params, 'rev', 'rvcontinue',
                              lambda node: codec.revision_from(node, title),
                              quantity, 'rvlimit')

    def first_revision(self, title):
        """Return the oldest Revision of a page, or None if the page does
        not exist.
        """
        params = {
            'action': 'query',
            'prop': 'revisions',
            'rvprop': _REVPROPS,
            'rvlimit': 1,
            'rvdir': 'newer',
            'titles': title,
        }
        page = self.request(**params).find('page')
        rev = page.find('rev') if page is not None else None
        if rev is None:
            return None
        return codec.revision_from(rev, page.get('title', title))

    def page_creator(self, title):
        """Return the name of the user who created a page, or None if it
        is hidden or the page does not exist.
        """
        first = self.first_revision(title)
        return first.user if first is not None else None

    def diff(self, revision, to='prev'):
        """Return the HTML diff from ``revision`` to another revision.

        ``to`` is a Revision, a revision ID, or one of 'prev', 'next' and
        'cur'. Returns None if the server produced no diff (for example
        when asking for the 'prev' of a page's first revision).
        """
        params = {
            'action': 'compare',
            'fromrev': revision.revid,
        }
        if isinstance(to, Revision):
            params['torev'] = to.revid
        elif isinstance(to, int) and not isinstance(to, bool):
            params['torev'] = to
        elif to in ('prev', 'next', 'cur'):
            params['torelative'] = to
        else:
            raise ValidationError('Cannot diff against {!r}'.format(to))
        node = self.request(**params).find('compare')
        if node is None or not node.get_text():
            return None
        return node.get_text()

    def diff_to_text(self, revision, text):
        """Return the HTML diff from ``revision`` to some wikitext, like
        the "Show changes" button.
        """
        params = {
            'action': 'compare',
            'fromrev': revision.revid,
            'totext': text,
            'tocontentmodel': 'wikitext',
        }
        node = self.post_request(**params).find('compare')
        return node.get_text() if node is not None else None

    # namespaces

    def _namespaces(self):
        if self.session.namespaces is None:
            self.session.namespaces = self.meta.namespaces()
        return self.session.namespaces

    def namespace(self, title):
        """Return the namespace ID of a title (0 for the main namespace)."""
        if ':' not in title:
            return 0
        prefix = title.split(':', 1)[0]
        return self._namespaces().get(prefix, 0)

    def namespace_identifier(self, nsid):
        """Return the name of a namespace ID ('' for the main namespace)."""
        if nsid == 0:
            return ''
        for name, value in self._namespaces().items():
            if value == nsid:
                return name
        raise ValidationError('Unknown namespace {!r}'.format(nsid))

    def invalidate_namespaces(self):
        """Drop the cached namespace list; it is fetched again on use."""
        self.session.invalidate_namespaces()

    # users

    def user_info(self, name):
        """Fetch a User with rights, groups and edit count filled in, or
        None if there is no such user.
        """
        params = {
            'action': 'query',
            'list': 'users',
            'ususers': name,
            'usprop': 'groups|rights|editcount|blockinfo|emailable',
        }
        return codec.user_from(self, self.request(**params).find('user'))

    def user_exists(self, name):
        """Check whether a user exists."""
        return self.user_info(name) is not None

    def all_users(self, prefix=None, group=None, quantity=None):
        """Generate Users registered on the wiki, in name order."""
        params = {
            'action': 'query',
            'list': 'allusers',
            'auprefix': prefix,
            'augroup': group,
        }
        return self._generate(params, 'u', 'aufrom',
                              lambda node: User(self, node.get('name')),
                              quantity, 'aulimit')

    def contribs(self, user, namespace=None, quantity=None, start=None,
                 end=None, prefix=False):
        """Generate Revisions made by a user, newest first.

        With ``prefix``, ``user`` is a prefix of names (for example an
        IP range such as '127.0.').
        """
        params = {
            'action': 'query',
            'list': 'usercontribs',
            'ucprop': 'ids|title|timestamp|comment|size|flags',
            'ucnamespace': namespace,
            'ucstart': start,
            'ucend': end,
        }
        params['ucuserprefix' if prefix else 'ucuser'] = user
        return self._generate(params, 'item', 'uccontinue',
                              codec.revision_from, quantity, 'uclimit')

    def has_new_messages(self):
        """Check whether the current user has new talk page messages."""
        return self.meta.has_new_messages()

    def block_list(self, users=None, quantity=None, start=None, end=None):
        """Generate LogEntries for the currently active blocks."""
        params = {
            'action': 'query',
            'list': 'blocks',
            'bkusers': users,
            'bkstart': start,
            'bkend': end,
            'bkprop': 'id|user|by|timestamp|expiry|reason|flags',
        }
        return self._generate(params, 'block', 'bkcontinue',
                              codec.block_from, quantity, 'bklimit')

    # lists

    def category_members(self, category, namespace=None, quantity=None):
        """Generate titles of the members of a category."""
        if not category.startswith('Category:'):
            category = 'Category:' + category
        params = {
            'action': 'query',
            'list': 'categorymembers',
            'cmtitle': category,
            'cmnamespace': namespace,
            'cmprop': 'title',
        }
        return self._generate(params, 'cm', 'cmcontinue',
                              lambda node: node.get('title'),
                              quantity, 'cmlimit')

    def what_links_here(self, title, namespace=None, quantity=None,
                        redirects=False):
        """Generate titles of pages linking to a page.

        With ``redirects`` only redirects are listed.
        """
        params = {
            'action': 'query',
            'list': 'backlinks',
            'bltitle': title,
            'blnamespace': namespace,
            'blfilterredir': 'redirects' if redirects else None,
        }
        return self._generate(params, 'bl', 'blcontinue',
                              lambda node: node.get('title'),
                              quantity, 'bllimit')

    def what_transcludes_here(self, title, namespace=None, quantity=None):
        """Generate titles of pages transcluding a page."""
        params = {
            'action': 'query',
            'list': 'embeddedin',
            'eititle': title,
            'einamespace': namespace,
        }
        return self._generate(params, 'ei', 'eicontinue',
                              lambda node: node.get('title'),
                              quantity, 'eilimit')

    def image_usage(self, title, namespace=None, quantity=None):
        """Generate titles of pages using a file."""
        if not title.startswith('File:'):
            title = 'File:' + title
        params = {
            'action': 'query',
            'list': 'imageusage',
            'iutitle': title,
            'iunamespace': namespace,
        }
        return self._generate(params, 'iu', 'iucontinue',
                              lambda node: node.get('title'),
                              quantity, 'iulimit')

    def duplicate_files(self, title, quantity=None):
        """Generate titles of files with the same contents as a file."""
        if not title.startswith('File:'):
            title = 'File:' + title
        params = {
            'action': 'query',
            'prop': 'duplicatefiles',
            'titles': title,
        }
        return self._generate(params, 'df', 'dfcontinue',
                              lambda node: 'File:' + node.get('name'),
                              quantity, 'dflimit')

    def file_history(self, title, quantity=None):
        """Generate the live upload history of a file as FileVersions,
        newest first. Deleted versions are not included.
        """
        if not title.startswith('File:'):
            title = 'File:' + title
        params = {
            'action': 'query',
            'prop': 'imageinfo',
            'iiprop': 'timestamp|user|comment|size|sha1|url',
            'titles': title,
        }
        return self._generate(
            params, 'ii', 'iistart',
            lambda node: codec.file_version_from(node, title),
            quantity, 'iilimit')

    def file_metadata(self, title):
        """Return a dict describing the current version of a file.

        The keys are size, width, height and mime, plus whatever
        metadata (such as EXIF) the server extracted. Returns None if
        the file does not exist.
        """
        if not title.startswith('File:'):
            title = 'File:' + title
        params = {
            'action': 'query',
            'prop': 'imageinfo',
            'iiprop': 'size|mime|metadata',
            'titles': title,
        }
        info = self.request(**params).find('ii')
        if info is None:
            return None
        result = {
            'size': codec.to_int(info.get('size')),
            'width': codec.to_int(info.get('width')),
            'height': codec.to_int(info.get('height')),
            'mime': info.get('mime'),
        }
        for node in info.find_all('metadata'):
            if node.has_attr('name'):
                result.setdefault(node['name'], node.get('value'))
        return result

    def prefix_index(self, prefix, quantity=None):
        """Generate titles starting with ``prefix`` (which may carry a
        namespace, e.g. 'Talk:Foo').
        """
        nsid = self.namespace(prefix)
        if nsid != 0:
            prefix = prefix.split(':', 1)[1]
        params = {
            'action': 'query',
            'list': 'allpages',
            'apprefix': prefix,
            'apnamespace': nsid,
        }
        return self._generate(params, 'p', 'apcontinue',
                              lambda node: node.get('title'),
                              quantity, 'aplimit')

    def long_pages(self, cutoff, namespace=0, quantity=None):
        """Generate titles of pages of at least ``cutoff`` bytes."""
        params = {
            'action': 'query',
            'list': 'allpages',
            'apminsize': cutoff,
            'apnamespace': namespace,
        }
        return self._generate(params, 'p', 'apcontinue',
                              lambda node: node.get('title'),
                              quantity, 'aplimit')

    def short_pages(self, cutoff, namespace=0, quantity=None):
        """Generate titles of pages of at most ``cutoff`` bytes."""
        params = {
            'action': 'query',
            'list': 'allpages',
            'apmaxsize': cutoff,
            'apnamespace': namespace,
        }
        return self._generate(params, 'p', 'apcontinue',
                              lambda node: node.get('title'),
                              quantity, 'aplimit')

    def random_page(self, namespace=0):
        """Return the title of a random page, like Special:Random.

        Pass namespace=None for any namespace.
        """
        params = {
            'action': 'query',
            'list': 'random',
            'rnnamespace': namespace,
            'rnlimit': 1,
        }
        node = self.request(**params).find('random')
        page = node.find('page') if node is not None else None
        return page.get('title') if page is not None else None

    def search(self, query, namespace=None, quantity=None):
        """Generate SearchResults for a full text search."""
        params = {
            'action': 'query',
            'list': 'search',
            'srsearch': query,
            'srnamespace': namespace,
            'srprop': 'snippet|size|timestamp',
        }
        return self._generate(
            params, 'p', 'sroffset',
            lambda node: SearchResult(
                node.get('title'), node.get('snippet'),
                codec.to_int(node.get('size')),
                codec.parse_timestamp(node.get('timestamp'))),
            quantity, 'srlimit')

    def linksearch(self, pattern, namespace=None, quantity=None,
                   protocol=None):
        """Generate ExternalLinks matching a URL pattern such as
        '*.example.com'.
        """
        params = {
            'action': 'query',
            'list': 'exturlusage',
            'euquery': pattern,
            'euprotocol': protocol,
            'eunamespace': namespace,
            'euprop': 'title|url',
        }
        return self._generate(
            params, 'eu', ('euoffset', 'eucontinue'),
            lambda node: ExternalLink(node.get('title'), node.get('url')),
            quantity, 'eulimit')

    def interwiki_backlinks(self, prefix, target=None, quantity=None):
        """Generate InterwikiLinks to ``prefix``, optionally only those
        to the page ``target`` on the other wiki.
        """
        params = {
            'action': 'query',
            'list': 'iwbacklinks',
            'iwblprefix': prefix,
            'iwbltitle': target,
            'iwblprop': 'iwprefix|iwtitle',
        }
        return self._generate(
            params, 'iw', 'iwblcontinue',
            lambda node: InterwikiLink(node.get('title'),
                                       node.get('iwprefix'),
                                       node.get('iwtitle')),
            quantity, 'iwbllimit')

    def watchlist(self, cache=True):
        """Return the titles on the current user's watchlist.

        The list is cached on the session; pass cache=False or call
        invalidate_watchlist() to fetch it again.
        """
        if cache and self.session.watchlist is not None:
            return list(self.session.watchlist)
        params = {
            'action': 'query',
            'list': 'watchlistraw',
        }
        titles = list(self._generate(params, 'wr', 'wrcontinue',
                                     lambda node: node.get('title'),
                                     None, 'wrlimit'))
        self.session.watchlist = titles
        return list(titles)

    def is_watched(self, title):
        """Check whether a page is on the current user's watchlist.

        Uses the cached watchlist, fetching it first if needed.
        """
        return title in self.watchlist()

    def invalidate_watchlist(self):
        """Drop the cached watchlist."""
        self.session.invalidate_watchlist()

    def watchlist_changes(self, quantity=None, allrev=False, namespace=None):
        """Generate Revisions of pages on the current user's watchlist."""
        params = {
            'action': 'query',
            'list': 'watchlist',
            'wlprop': 'ids|title|timestamp|user|comment|sizes|flags',
            'wlallrev': allrev,
            'wlnamespace': namespace,
        }
        return self._generate(params, 'item', 'wlcontinue',
                              codec.revision_from, quantity, 'wllimit')

    def log_entries(self, quantity=None, logtype=None, user=None,
                    target=None, start=None, end=None):
        """Generate LogEntries, newest first.

        ``logtype`` restricts to one log ('block', 'move', ...), ``user``
        to one performer and ``target`` to one target page.
        """
        params = {
            'action': 'query',
            'list': 'logevents',
            'leprop': 'ids|title|type|user|timestamp|comment|details',
            'letype': logtype,
            'leuser': user,
            'letitle': target,
            'lestart': start,
            'leend': end,
        }
        return self._generate(params, 'item', 'lecontinue',
                              codec.log_entry_from, quantity, 'lelimit')

    def recent_changes(self, quantity=None, namespace=None, rctype=None,
                       bots=True, start=None, end=None):
        """Generate Revisions from the recent changes feed, newest first."""
        params = {
            'action': 'query',
            'list': 'recentchanges',
            'rcprop': 'user|comment|timestamp|title|ids|sizes|flags',
            'rcnamespace': namespace,
            'rctype': rctype,
            'rcshow': None if bots else '!bot',
            'rcstart': start,
            'rcend': end,
        }
        return self._generate(params, 'rc', 'rccontinue',
                              codec.revision_from, quantity, 'rclimit')

    def new_pages(self, quantity=None, namespace=None):
        """Generate the Revisions creating new pages, newest first."""
        return self.recent_changes(quantity, namespace, rctype='new')

    # site

    def lag(self):
        """Return the current database replication lag in seconds."""
        return self.meta.lag()

    def statistics(self):
        """Return the site statistics as a dict of ints."""
        return self.meta.statistics()

    def version(self):
        """Return the MediaWiki version of the site."""
        return self.meta.version()

    def site_matrix(self):
        """List the domains of the wikis in this wiki's family."""
        return self.capabilities.site_matrix(self)

    def global_usage(self, title, quantity=None):
        """Generate uses of a file on the other wikis of the family."""
        return self.capabilities.global_usage(self, title, quantity)

    # writes

    def _may(self, right):
        user = self.session.user
        return user is not None and user.is_allowed_to(right)

    def edit(self, title, text, summary, minor=False, bot=False,
             section=None, basetime=None, **evil):
        """Edit a page.

        ``section`` is a section number or 'new' to add a section titled
        ``summary``. ``basetime`` is the timestamp of the revision the
        edit is based on; if the page changed since, EditConflict is
        raised. ``bot`` only marks the edit if the user may do so.
        """
        def build(info):
            params = {
                'action': 'edit',
                'title': title,
                'text': text,
                'summary': summary,
                'minor': minor,
                'notminor': not minor,
                'bot': bot and self._may('bot'),
                'section': section,
                'basetimestamp': basetime,
            }
            params.update(evil)
            return params
        return self.pipeline.run('edit', title, build, accept='edit')

    def new_section(self, title, heading, text, minor=False, bot=False):
        """Add a new section to a page."""
        return self.edit(title, text, heading, minor, bot, section='new')

    def prepend(self, title, text, summary, minor=False, bot=False):
        """Add text to the top of a page."""
        return self.edit(title, None, summary, minor, bot, prependtext=text)

    def delete(self, title, reason):
        """Delete a page. Deleting a page that does not exist does
        nothing.
        """
        def build(info):
            if not info.exists:
                logger.info('[%s] Page %s does not exist, not deleting',
                            self.domain, title)
                return None
            return {
                'action': 'delete',
                'title': title,
                'reason': reason,
            }
        return self.pipeline.run('delete', title, build, right='delete',
                                 accept='delete', ignorable=('missingtitle',))

    def move(self, title, newtitle, reason='', noredirect=False,
             movetalk=True, movesubpages=True):
        """Move a page.

        ``noredirect`` and ``movesubpages`` are only honoured if the user
        holds the rights for them.
        """
        def build(info):
            return {
                'action': 'move',
                'from': title,
                'to': newtitle,
                'reason': reason,
                'noredirect': noredirect and self._may('suppressredirect'),
                'movetalk': movetalk,
                'movesubpages': movesubpages and self._may('move-subpages'),
            }
        return self.pipeline.run('move', title, build, move=True,
                                 right='move', accept='move',
                                 require_exists=True)

    def rollback(self, revision, summary='', bot=False):
        """Revert the edits of the author of ``revision``.

        If the page has been edited since ``revision`` (it is no longer
        the top revision) nothing is done.
        """
        if revision.user is None:
            raise ValidationError('Cannot roll back {}: the author is hidden.'
                                  .format(revision))
        def stale(info):
            if info.lastrevid == revision.revid:
                return False
            logger.info('[%s] Rollback of %s skipped: %s has been edited '
                        'since', self.domain, revision, revision.title)
            return True
        def build(info):
            return {
                'action': 'rollback',
                'title': revision.title,
                'user': revision.user,
                'summary': summary,
                'markbot': bot and self._may('markbotedits'),
            }
        return self.pipeline.run('rollback', revision.title, build,
                                 right='rollback', accept='rollback',
                                 ignorable=('alreadyrolled', 'onlyauthor'),
                                 tokens='rollback', skip=stale)

    def undo(self, rev, newest=None, summary=None, minor=False, bot=False):
        """Undo ``rev``, or every revision from ``rev`` up to and
        including ``newest``. Both must belong to the same page.
        """
        if newest is not None and newest.title != rev.title:
            raise ValidationError('Cannot undo a range spanning two pages: '
                                  '{} and {}'.format(rev.title, newest.title))
        if newest is None or newest == rev:
            undo, undoafter = rev.revid, None
        else:
            parentid = rev.parentid
            if parentid is None:
                fetched = self.revision(rev.revid)
                parentid = fetched.parentid if fetched is not None else None
            if parentid is None:
                raise WikiError.nosuchrevid(
                    'Cannot undo back to {}: its parent revision is '
                    'unknown.'.format(rev.revid))
            undo, undoafter = newest.revid, parentid
        def build(info):
            return {
                'action': 'edit',
                'title': rev.title,
                'undo': undo,
                'undoafter': undoafter,
                'summary': summary,
                'minor': minor,
                'bot': bot and self._may('bot'),
            }
        return self.pipeline.run('undo', rev.title, build, accept='edit')

    def upload(self, data, filename, text='', reason=''):
        """Upload a file.

        ``data`` is a bytes object or a file object open in BYTES mode;
        it is sent as is. ``text`` is the initial content of the file
        description page. Failed uploads are not retried.
        """
        title = 'File:' + filename
        def build(info):
            return {
                'action': 'upload',
                'filename': filename,
                'text': text,
                'comment': reason,
                'ignorewarnings': True,
            }
        return self.pipeline.run('upload', title, build, right='upload',
                                 retry=False, accept='upload', upload=True,
                                 files={'file': (filename, data)})

    def email_user(self, user, message, subject, ccme=False):
        """Email a user. Does nothing if they do not accept email."""
        name = user.name if isinstance(user, User) else user
        target = self.user_info(name)
        if target is None or not target.emailable:
            logger.warning('[%s] User %s is not emailable', self.domain, name)
            return None
        def build(info):
            return {
                'action': 'emailuser',
                'target': name,
                'subject': subject,
                'text': message,
                'ccme': ccme,
            }
        return self.pipeline.run('emailuser', 'User:' + name, build,
                                 right='sendemail', accept='emailuser')

    def change_user_groups(self, user, add=(), remove=(), reason=''):
        """Add a user to and remove them from groups.

        Which groups may be changed is decided by the server; a refusal
        is raised as InsufficientRights. Cached data of ``user`` (and of
        the current user, if that is who changed) is dropped.
        """
        name = user.name if isinstance(user, User) else user
        if not add and not remove:
            raise ValidationError('No groups to change for {}'.format(name))
        def build(info):
            return {
                'action': 'userrights',
                'user': name,
                'add': list(add) or None,
                'remove': list(remove) or None,
                'reason': reason,
            }
        result = self.pipeline.run('userrights', 'User:' + name, build,
                                   accept='userrights', tokens='userrights')
        if isinstance(user, User):
            user.invalidate()
        current = self.session.user
        if current is not None and current.name == name:
            current.invalidate()
        return result

    def purge(self, *titles):
        """Purge the server cache of pages."""
        doc = self.post_request(action='purge', titles=titles)
        logger.info('[%s] Purged %s', self.domain, ', '.join(titles))
        return doc

    def watch(self, *titles):
        """Add pages to the current user's watchlist."""
        with self.session.lock:
            token = self.meta.tokens('watch')
            doc = self.post_request(action='watch', titles=titles,
                                    token=token)
        if self.session.watchlist is not None:
            self.session.watchlist.extend(
                t for t in titles if t not in self.session.watchlist)
        return doc

    def unwatch(self, *titles):
        """Remove pages from the current user's watchlist."""
        with self.session.lock:
            token = self.meta.tokens('watch')
            doc = self.post_request(action='watch', unwatch=True,
                                    titles=titles, token=token)
        if self.session.watchlist is not None:
            self.session.watchlist[:] = [t for t in self.session.watchlist
                                         if t not in titles]
        return doc
