"""Test various aspects of the Wiki."""
import json
import warnings
from datetime import datetime, timezone
from unittest import TestCase, mock
import mw_bot_client as mw
from .fakes import api, page_xml, user_xml, make_wiki, log_in, FakeTransport

LOGIN_TOKEN = (api('<query><tokens logintoken="lt123+\\"/></query>'),
               {'testwikiSession': 'anon'})
STAMP = datetime(2018, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

def login_result(result, **attrs):
    """An action=login response."""
    extra = ''.join(' {}="{}"'.format(k, v) for k, v in attrs.items())
    return api('<login result="{}"{}/>'.format(result, extra))

class TestWiki(TestCase):
    """Test the Wiki class."""
    def test_no_network(self):
        """Assert that constructing a Wiki sends nothing."""
        wiki = make_wiki()
        self.assertEqual(wiki.transport.calls, [])
        self.assertEqual(wiki.api_url, 'https://test.example.org/w/api.php')
    def test_page(self):
        """Assert that Wiki.page returns a Page."""
        wiki = make_wiki()
        self.assertTrue(isinstance(wiki.page('Project:Sandbox'), mw.Page))
        self.assertEqual(wiki.category('Foo').title, 'Category:Foo')
    def test_error(self):
        """Assert that API errors are raised as WikiError.<code>."""
        wiki = make_wiki([api('<error code="invalidtitle" info="Bad title"/>')])
        with self.assertRaises(mw.WikiError.invalidtitle) as caught:
            wiki.page_info('<>')
        self.assertEqual(caught.exception.code, 'invalidtitle')
    def test_warning(self):
        """Assert that API warnings are issued as WikiWarnings."""
        wiki = make_wiki([api('<warnings><query>Unrecognized value</query>'
                              '</warnings><query><pages><page title="A" '
                              'missing=""/></pages></query>')])
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter('always')
            self.assertFalse(wiki.exists('A'))
        self.assertTrue(issubclass(caught[0].category, mw.WikiWarning))
    def test_exists(self):
        """Assert that existence follows title normalization."""
        wiki = make_wiki([api(
            '<query><normalized><n from="a" to="A"/></normalized><pages>'
            '<page title="A" pageid="1"/><page title="B" missing=""/>'
            '</pages></query>')])
        self.assertEqual(wiki.pages_exist(['a', 'B']), [True, False])
    def test_page_text(self):
        """Assert that page text is read from the main slot."""
        wiki = make_wiki([api(
            '<query><pages><page title="A" pageid="1"><revisions><rev>'
            '<slots><slot slot="main" xml:space="preserve">'
            "'''Hi''' &amp; bye</slot></slots></rev></revisions></page>"
            '</pages></query>'),
                          api('<query><pages><page title="B" missing=""/>'
                              '</pages></query>')])
        self.assertEqual(wiki.page_text('A'), "'''Hi''' & bye")
        with self.assertRaises(mw.WikiError.missingtitle):
            wiki.page_text('B')
    def test_top_revision(self):
        """Assert that the top revision carries the page title."""
        wiki = make_wiki([api(
            '<query><pages><page title="A" pageid="1"><revisions><rev '
            'revid="9" parentid="8" user="X" timestamp="2018-01-02T03:04:05Z" '
            'comment="c" size="4"/></revisions></page></pages></query>')])
        rev = wiki.top_revision('A')
        self.assertEqual((rev.revid, rev.title, rev.parentid), (9, 'A', 8))
    def test_namespaces(self):
        """Assert that namespaces are cached until invalidated."""
        names = api('<query><namespaces><ns id="0" case="first-letter"/>'
                    '<ns id="1" canonical="Talk">Talk</ns><ns id="4" '
                    'canonical="Project">Wikipedia</ns></namespaces>'
                    '<namespacealiases><ns id="4">WP</ns></namespacealiases>'
                    '</query>')
        wiki = make_wiki([names, names])
        self.assertEqual(wiki.namespace('WP:Sandbox'), 4)
        self.assertEqual(wiki.namespace('Project:Sandbox'), 4)
        self.assertEqual(wiki.namespace('Sandbox'), 0)
        self.assertEqual(wiki.namespace_identifier(1), 'Talk')
        self.assertEqual(wiki.namespace_identifier(0), '')
        self.assertEqual(len(wiki.transport.calls), 1)
        wiki.invalidate_namespaces()
        wiki.namespace('Talk:X')
        self.assertEqual(len(wiki.transport.calls), 2)
    def test_configuration(self):
        """Assert that settings reach the parts that use them."""
        wiki = make_wiki()
        wiki.throttle = 3
        wiki.maxlag = 7
        wiki.user_agent = 'Other'
        self.assertEqual(wiki.governor.throttle_interval, 3)
        self.assertEqual(wiki.governor.maxlag, 7)
        self.assertEqual(wiki.transport.user_agent, 'Other')
        self.assertEqual(wiki.snapshot()['throttle'], 3)

    @mock.patch('time.sleep')
    def test_lag_gate(self, sleep):
        """Assert that requests wait while the lag is too high."""
        lagged = api('<query><dbrepllag><db host="db1" lag="9"/></dbrepllag>'
                     '</query>')
        fine = api('<query><dbrepllag><db host="db1" lag="1"/></dbrepllag>'
                   '</query>')
        wiki = make_wiki([lagged, fine, page_xml()], maxlag=5)
        wiki.page_info('Sandbox')
        sleep.assert_called_once_with(30)
        self.assertEqual(wiki.transport.calls[0].params['siprop'], 'dbrepllag')

    @mock.patch('time.sleep')
    def test_lag_unreported(self, sleep):
        """Assert that a server reporting no numeric lag counts as
        unlagged.
        """
        wiki = make_wiki([api('<query><dbrepllag><db host=""/></dbrepllag>'
                              '</query>'), page_xml()], maxlag=5)
        self.assertEqual(wiki.page_info('Sandbox').title, 'Sandbox')
        self.assertFalse(sleep.called)

class TestSession(TestCase):
    """Test logging in and out and keeping sessions."""
    def logged_in(self, highlimits=True):
        """A wiki after a successful login."""
        rights = ('edit', 'apihighlimits') if highlimits else ('edit',)
        wiki = make_wiki([LOGIN_TOKEN,
                          (login_result('Success', lgusername='Bot'),
                           {'testwikiSession': 'auth', 'testwikiUserID': '1'}),
                          user_xml('Bot', ('user', 'bot'), rights)])
        wiki.login('Bot', 'hunter2')
        return wiki
    def test_login(self):
        """Assert that a login stores cookies and the identity."""
        wiki = self.logged_in()
        self.assertEqual(wiki.current_user.name, 'Bot')
        self.assertTrue(wiki.current_user.is_a('bot'))
        self.assertEqual(wiki.session.cookies,
                         {'testwikiSession': 'auth', 'testwikiUserID': '1'})
        self.assertEqual(wiki.session.query_limit, 5000)
        post = wiki.transport.posts[0]
        self.assertEqual(post.params['lgtoken'], 'lt123+\\')
        self.assertEqual(post.cookies, {'testwikiSession': 'anon'})
    def test_page_size(self):
        """Assert that ordinary users get the ordinary page size."""
        self.assertEqual(self.logged_in(False).session.query_limit, 500)

    @mock.patch('time.sleep')
    def test_bad_password(self, sleep):
        """Assert that a wrong password raises after the cooldown."""
        wiki = make_wiki([LOGIN_TOKEN, login_result('WrongPass')])
        with self.assertRaises(mw.BadCredentials):
            wiki.login('Bot', 'wrong')
        sleep.assert_called_once_with(mw.wiki.LOGIN_COOLDOWN)
        self.assertIsNone(wiki.current_user)

    @mock.patch('time.sleep')
    def test_unknown_account(self, sleep):
        """Assert that a missing account is reported as such."""
        wiki = make_wiki([LOGIN_TOKEN, login_result('NotExists')])
        with self.assertRaises(mw.UnknownAccount):
            wiki.login('Nobody', 'x')
        self.assertTrue(sleep.called)

    @mock.patch('time.sleep')
    def test_login_failed(self, sleep):
        """Assert that other failures raise LoginFailed."""
        wiki = make_wiki([LOGIN_TOKEN, login_result(
            'Failed', reason='Incorrect username or password entered.')])
        with self.assertRaises(mw.LoginFailed) as caught:
            wiki.login('Bot', 'x')
        self.assertIn('Incorrect', str(caught.exception))
        self.assertTrue(isinstance(caught.exception, mw.LoginError))
    def test_logout(self):
        """Assert that logging out is local and forgets everything."""
        wiki = self.logged_in()
        calls = len(wiki.transport.calls)
        wiki.logout()
        self.assertIsNone(wiki.current_user)
        self.assertEqual(wiki.session.cookies, {})
        self.assertEqual(wiki.session.query_limit, 500)
        self.assertEqual(len(wiki.transport.calls), calls)
    def test_logout_everywhere(self):
        """Assert that logging out everywhere tells the server."""
        wiki = self.logged_in()
        wiki.transport.responses = [
            api('<query><tokens csrftoken="t+\\"/></query>'), api()]
        wiki.logout_everywhere()
        post = wiki.transport.posts[-1]
        self.assertEqual(post.params['action'], 'logout')
        self.assertEqual(post.params['token'], 't+\\')
        self.assertIsNone(wiki.current_user)
    def test_snapshot(self):
        """Assert that a restored session reads as the same user."""
        wiki = self.logged_in()
        wiki.session.namespaces = {'Talk': 1}
        data = json.loads(json.dumps(wiki.snapshot()))
        restored = mw.Wiki.restore(data)
        restored.transport = FakeTransport([api(
            '<query><userinfo id="1" name="Bot"/></query>')])
        self.assertEqual(restored.current_user.name, 'Bot')
        self.assertEqual(restored.session.cookies, wiki.session.cookies)
        self.assertEqual(restored.throttle, wiki.throttle)
        self.assertEqual(restored.maxlag, wiki.maxlag)
        self.assertEqual(restored.namespace('Talk:X'), 1)
        self.assertEqual(restored.api_url, wiki.api_url)
        restored.meta.userinfo()
        self.assertEqual(restored.transport.calls[0].cookies,
                         wiki.session.cookies)
        self.assertEqual(restored.status.counter, restored.status_interval)
    def test_bad_snapshot(self):
        """Assert that unknown snapshot versions are refused."""
        data = make_wiki().snapshot()
        data['version'] = 99
        with self.assertRaises(mw.ValidationError):
            mw.Wiki.restore(data)

class TestWrites(TestCase):
    """Test the specialised writes."""
    def test_rollback_stale(self):
        """Assert that rolling back a superseded revision does nothing."""
        wiki = make_wiki([page_xml(lastrevid=11, kind='rollback')])
        log_in(wiki, rights=('edit', 'rollback'))
        rev = mw.Revision(10, STAMP, 'Sandbox', 'vandalism', 'Vandal')
        self.assertIsNone(wiki.rollback(rev))
        self.assertEqual(wiki.transport.posts, [])

    @mock.patch('time.sleep')
    def test_rollback_stale_protected(self, sleep):
        """Assert that a superseded revision on a protected page is a
        quiet no-op, without a throttle pause.
        """
        wiki = make_wiki([page_xml(lastrevid=11, kind='rollback',
                                   protection='<pr type="edit" '
                                   'level="sysop"/>')], throttle=10)
        log_in(wiki, rights=('edit', 'rollback'))
        rev = mw.Revision(10, STAMP, 'Sandbox', 'vandalism', 'Vandal')
        self.assertIsNone(wiki.rollback(rev))
        self.assertEqual(wiki.transport.posts, [])
        self.assertFalse(sleep.called)
    def test_rollback(self):
        """Assert that the top revision is rolled back with its token."""
        wiki = make_wiki([page_xml(lastrevid=10, kind='rollback',
                                   token='rb+\\'),
                          api('<rollback title="Sandbox" revid="12"/>')])
        log_in(wiki, rights=('edit', 'rollback'))
        rev = mw.Revision(10, STAMP, 'Sandbox', 'vandalism', 'Vandal')
        wiki.rollback(rev)
        get, post = wiki.transport.calls
        self.assertEqual(get.params['type'], 'rollback')
        self.assertEqual(post.params['token'], 'rb+\\')
        self.assertEqual(post.params['user'], 'Vandal')
    def test_rollback_hidden_user(self):
        """Assert that a revision with a hidden author cannot be rolled
        back."""
        wiki = make_wiki()
        with self.assertRaises(mw.ValidationError):
            wiki.rollback(mw.Revision(10, STAMP, 'Sandbox', None, None))
    def test_undo_two_pages(self):
        """Assert that a range over two pages fails before any request."""
        wiki = make_wiki()
        older = mw.Revision(1, STAMP, 'A', '', 'X', parentid=0)
        newer = mw.Revision(2, STAMP, 'B', '', 'X')
        with self.assertRaises(mw.ValidationError):
            wiki.undo(older, newer)
        self.assertEqual(wiki.transport.calls, [])
    def test_undo_range(self):
        """Assert that a range undoes back to the oldest one's parent."""
        wiki = make_wiki([page_xml('A'), api('<edit result="Success"/>')])
        older = mw.Revision(5, STAMP, 'A', '', 'X', parentid=4)
        newer = mw.Revision(7, STAMP, 'A', '', 'Y')
        wiki.undo(older, newer, 'revert')
        post = wiki.transport.posts[0]
        self.assertEqual((post.params['undo'], post.params['undoafter']),
                         (7, 4))
    def test_undo_range_fetches_parent(self):
        """Assert that an unknown parent is looked up."""
        wiki = make_wiki([
            api('<query><pages><page title="A" pageid="1"><revisions>'
                '<rev revid="5" parentid="4" user="X" '
                'timestamp="2018-01-02T03:04:05Z"/></revisions></page>'
                '</pages></query>'),
            page_xml('A'), api('<edit result="Success"/>')])
        older = mw.Revision(5, STAMP, 'A', '', 'X')
        newer = mw.Revision(7, STAMP, 'A', '', 'Y')
        wiki.undo(older, newer)
        self.assertEqual(wiki.transport.posts[0].params['undoafter'], 4)
    def test_undo_range_unknown_parent(self):
        """Assert that a range whose start cannot be found is refused
        instead of shrinking to one revision.
        """
        wiki = make_wiki([api('<query><badrevids><rev revid="5"/>'
                              '</badrevids></query>')])
        older = mw.Revision(5, STAMP, 'A', '', 'X')
        newer = mw.Revision(7, STAMP, 'A', '', 'Y')
        with self.assertRaises(mw.WikiError.nosuchrevid):
            wiki.undo(older, newer)
        self.assertEqual(wiki.transport.posts, [])
    def test_undo_single(self):
        """Assert that a single revision is undone by itself."""
        wiki = make_wiki([page_xml('A'), api('<edit result="Success"/>')])
        wiki.undo(mw.Revision(5, STAMP, 'A', '', 'X'))
        post = wiki.transport.posts[0]
        self.assertEqual(post.params['undo'], 5)
        self.assertIsNone(post.params['undoafter'])
    def test_email_not_emailable(self):
        """Assert that users without email are skipped."""
        wiki = make_wiki([user_xml('Quiet')])
        log_in(wiki, rights=('sendemail',))
        self.assertIsNone(wiki.email_user('Quiet', 'hello', 'hi'))
        self.assertEqual(wiki.transport.posts, [])
    def test_email(self):
        """Assert that emails go through the write path."""
        wiki = make_wiki([user_xml('Loud', extra='emailable=""'),
                          page_xml('User:Loud'),
                          api('<emailuser result="Success"/>')])
        log_in(wiki, rights=('sendemail',))
        self.assertIsNotNone(wiki.email_user('Loud', 'hello', 'hi'))
        self.assertEqual(wiki.transport.posts[0].params['target'], 'Loud')
    def test_watch(self):
        """Assert that watching updates the cached watchlist."""
        wiki = make_wiki([api('<query><tokens watchtoken="w+\\"/></query>'),
                          api('<watch title="B" watched=""/>')])
        wiki.session.watchlist = ['A']
        wiki.watch('B')
        self.assertEqual(wiki.watchlist(), ['A', 'B'])
        self.assertEqual(wiki.transport.posts[0].params['token'], 'w+\\')
    def test_change_user_groups(self):
        """Assert that group changes use a userrights token."""
        wiki = make_wiki([page_xml('User:Target', kind='userrights',
                                   token='ur+\\'),
                          api('<userrights user="Target"><removed/><added>'
                              '<group>bot</group></added></userrights>')])
        log_in(wiki, groups=('user', 'bureaucrat'), rights=('userrights',))
        self.assertIsNotNone(wiki.change_user_groups('Target', add=['bot'],
                                                     reason='approved'))
        get, post = wiki.transport.calls
        self.assertEqual(get.params['type'], 'userrights')
        self.assertEqual(post.params['action'], 'userrights')
        self.assertEqual(post.params['token'], 'ur+\\')
        self.assertEqual(post.params['add'], ['bot'])
        self.assertIsNone(post.params['remove'])
    def test_change_nothing(self):
        """Assert that an empty group change is refused up front."""
        wiki = make_wiki()
        with self.assertRaises(mw.ValidationError):
            wiki.change_user_groups('Target')
        self.assertEqual(wiki.transport.calls, [])

class TestReads(TestCase):
    """Test the page, revision and file reads."""
    def test_links(self):
        """Assert that the links of a page are followed across pages."""
        wiki = make_wiki([
            api('<continue plcontinue="1|0|B" continue="||"/><query><pages>'
                '<page title="A" pageid="1"><links><pl ns="0" title="B"/>'
                '</links></page></pages></query>'),
            api('<query><pages><page title="A" pageid="1"><links>'
                '<pl ns="0" title="C"/></links></page></pages></query>')])
        self.assertEqual(list(wiki.links_on_page('A')), ['B', 'C'])
        first, second = wiki.transport.calls
        self.assertEqual(first.params['prop'], 'links')
        self.assertEqual(second.params['plcontinue'], '1|0|B')
    def test_page_properties(self):
        """Assert that categories, templates and images are listed."""
        wiki = make_wiki([
            api('<query><pages><page title="A"><categories><cl ns="14" '
                'title="Category:X"/></categories></page></pages></query>'),
            api('<query><pages><page title="A"><templates><tl ns="10" '
                'title="Template:Y"/></templates></page></pages></query>'),
            api('<query><pages><page title="A"><images><im ns="6" '
                'title="File:Z.png"/></images></page></pages></query>')])
        page = wiki.page('A')
        self.assertEqual(list(page.categories()), ['Category:X'])
        self.assertEqual(list(page.templates(namespace=10)), ['Template:Y'])
        self.assertEqual(list(page.images()), ['File:Z.png'])
        self.assertEqual(wiki.transport.calls[1].params['tlnamespace'], 10)
    def test_language_links(self):
        """Assert that language links come back keyed by language."""
        wiki = make_wiki([api(
            '<query><pages><page title="Sandbox"><langlinks><ll lang="de" '
            'xml:space="preserve">Spielwiese</ll><ll lang="fr" '
            'xml:space="preserve">Bac à sable</ll></langlinks></page></pages>'
            '</query>')])
        self.assertEqual(wiki.language_links('Sandbox'),
                         {'de': 'Spielwiese', 'fr': 'Bac à sable'})
    def test_creator(self):
        """Assert that the creator is the author of the oldest revision."""
        wiki = make_wiki([api(
            '<query><pages><page title="A" pageid="1"><revisions><rev '
            'revid="1" parentid="0" user="Founder" '
            'timestamp="2018-01-02T03:04:05Z"/></revisions></page></pages>'
            '</query>')])
        self.assertEqual(wiki.page('A').creator(), 'Founder')
        self.assertEqual(wiki.transport.calls[0].params['rvdir'], 'newer')
    def test_diff(self):
        """Assert that diffs are asked for by relative or absolute target."""
        body = api('<compare fromrevid="5" torevid="7" xml:space="preserve">'
                   '&lt;tr&gt;&lt;td&gt;-&lt;/td&gt;&lt;/tr&gt;</compare>')
        wiki = make_wiki([body, body])
        rev = mw.Revision(5, STAMP, 'A', '', 'X')
        self.assertEqual(wiki.diff(rev), '<tr><td>-</td></tr>')
        wiki.diff(rev, mw.Revision(7, STAMP, 'A', '', 'Y'))
        first, second = wiki.transport.calls
        self.assertEqual(first.params['torelative'], 'prev')
        self.assertEqual(second.params['torev'], 7)
        with self.assertRaises(mw.ValidationError):
            wiki.diff(rev, 'sideways')
        self.assertEqual(len(wiki.transport.calls), 2)
    def test_diff_empty(self):
        """Assert that an empty diff is None."""
        wiki = make_wiki([api('<compare/>')])
        self.assertIsNone(wiki.diff(mw.Revision(1, STAMP, 'A', '', 'X')))
    def test_section_text(self):
        """Assert that a missing section is a ValidationError."""
        wiki = make_wiki([
            api('<query><pages><page title="A"><revisions><rev><slots>'
                '<slot slot="main" xml:space="preserve">== Two ==</slot>'
                '</slots></rev></revisions></page></pages></query>'),
            api('<error code="nosuchsection" info="There is no section 9."/>')])
        self.assertEqual(wiki.section_text('A', 2), '== Two ==')
        with self.assertRaises(mw.ValidationError):
            wiki.section_text('A', 9)
    def test_section_map(self):
        """Assert that section numbers map to headings in page order."""
        wiki = make_wiki([api(
            '<parse title="A" pageid="1"><sections>'
            '<s toclevel="1" level="2" line="History" number="1"/>'
            '<s toclevel="2" level="3" line="Early" number="1.1"/>'
            '<s toclevel="1" level="2" line="See also" number="2"/>'
            '</sections></parse>')])
        sections = wiki.section_map('A')
        self.assertEqual(sections, {'1': 'History', '1.1': 'Early',
                                    '2': 'See also'})
        self.assertEqual(list(sections), ['1', '1.1', '2'])
        self.assertEqual(wiki.transport.calls[0].params['prop'], 'sections')
    def test_export(self):
        """Assert that exports are returned as sent."""
        dump = '<mediawiki><page><title>A</title></page></mediawiki>'
        wiki = make_wiki([dump])
        self.assertEqual(wiki.export('A'), dump)
        self.assertTrue(wiki.transport.calls[0].params['exportnowrap'])
    def test_file_history(self):
        """Assert that upload history is read newest first."""
        wiki = make_wiki([api(
            '<query><pages><page title="File:T.png"><imageinfo>'
            '<ii timestamp="2018-01-02T03:04:05Z" user="B" comment="v2" '
            'size="20" sha1="b"/><ii timestamp="2018-01-01T00:00:00Z" '
            'user="A" comment="v1" size="10" sha1="a"/></imageinfo></page>'
            '</pages></query>')])
        versions = list(wiki.file_history('T.png'))
        self.assertEqual([v.user for v in versions], ['B', 'A'])
        self.assertTrue(versions[0] > versions[1])
        self.assertEqual(wiki.transport.calls[0].params['titles'],
                         'File:T.png')
    def test_file_metadata(self):
        """Assert that size, type and extracted metadata are read."""
        wiki = make_wiki([api(
            '<query><pages><page title="File:T.jpg"><imageinfo><ii '
            'size="2048" width="640" height="480" mime="image/jpeg">'
            '<metadata><metadata name="Make" value="Acme"/></metadata></ii>'
            '</imageinfo></page></pages></query>'),
                          api('<query><pages><page title="File:None.jpg" '
                              'missing=""/></pages></query>')])
        self.assertEqual(wiki.file_metadata('T.jpg'), {
            'size': 2048, 'width': 640, 'height': 480, 'mime': 'image/jpeg',
            'Make': 'Acme'})
        self.assertIsNone(wiki.file_metadata('None.jpg'))
    def test_duplicates(self):
        """Assert that duplicates are named as files."""
        wiki = make_wiki([api(
            '<query><pages><page title="File:T.png"><duplicatefiles>'
            '<df name="Copy.png" user="X"/></duplicatefiles></page></pages>'
            '</query>')])
        self.assertEqual(list(wiki.duplicate_files('T.png')), ['File:Copy.png'])
    def test_random_page(self):
        """Assert that a random title is returned."""
        wiki = make_wiki([api('<query><random><page id="3" ns="0" '
                              'title="Foo"/></random></query>')])
        self.assertEqual(wiki.random_page(), 'Foo')
    def test_page_sizes(self):
        """Assert that long and short pages bound the size."""
        empty = api('<query><allpages/></query>')
        wiki = make_wiki([empty, empty])
        list(wiki.long_pages(5000))
        list(wiki.short_pages(100, namespace=2))
        long_call, short_call = wiki.transport.calls
        self.assertEqual(long_call.params['apminsize'], 5000)
        self.assertEqual(short_call.params['apmaxsize'], 100)
        self.assertEqual(short_call.params['apnamespace'], 2)
    def test_is_watched(self):
        """Assert that watch checks use the cached watchlist."""
        wiki = make_wiki([api('<query><watchlistraw><wr ns="0" title="A"/>'
                              '</watchlistraw></query>')])
        self.assertTrue(wiki.is_watched('A'))
        self.assertFalse(wiki.is_watched('B'))
        self.assertEqual(len(wiki.transport.calls), 1)
