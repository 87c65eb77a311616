"""Test various aspects of Pages and Users."""
from unittest import TestCase, mock
import mw_bot_client as mw
from .fakes import make_wiki, user_xml

class TestPage(TestCase):
    """Test Pages."""
    def test_delegation(self):
        """Assert that page methods call the wiki with the title."""
        wiki = mock.Mock()
        page = mw.Page(wiki, 'Sandbox')
        page.read()
        wiki.page_text.assert_called_once_with('Sandbox')
        page.edit('text', 'summary', minor=True)
        wiki.edit.assert_called_once_with('Sandbox', 'text', 'summary',
                                          minor=True)
        page.history(5)
        wiki.page_history.assert_called_once_with('Sandbox', 5)
    def test_move(self):
        """Assert that a moved page takes its new title."""
        page = mw.Page(mock.Mock(), 'Old')
        page.move('New', 'rename')
        self.assertEqual(page.title, 'New')
    def test_equality(self):
        """Assert that pages compare by title."""
        wiki = mock.Mock()
        self.assertEqual(mw.Page(wiki, 'A'), mw.Page(wiki, 'A'))
        self.assertEqual(len({mw.Page(wiki, 'A'), mw.Page(wiki, 'A')}), 1)

class TestUser(TestCase):
    """Test Users."""
    def test_lazy(self):
        """Assert that user data is fetched once, on first use."""
        wiki = make_wiki([user_xml('Bot', ('user', 'bot'), ('edit', 'bot'))])
        user = wiki.user('Bot')
        self.assertEqual(wiki.transport.calls, [])
        self.assertTrue(user.is_a('bot'))
        self.assertTrue(user.is_allowed_to('edit'))
        self.assertEqual(user.editcount, 7)
        self.assertEqual(len(wiki.transport.calls), 1)
    def test_refresh(self):
        """Assert that refresh re-fetches after invalidate."""
        wiki = make_wiki([user_xml('Bot', ('user',)),
                          user_xml('Bot', ('user', 'sysop'))])
        user = wiki.user('Bot')
        self.assertFalse(user.is_a('sysop'))
        user.invalidate()
        self.assertTrue(user.is_a('sysop'))
        self.assertEqual(len(wiki.transport.calls), 2)
    def test_missing(self):
        """Assert that refreshing a missing user fails."""
        wiki = make_wiki(['<?xml version="1.0"?><api><query><users>'
                          '<user name="Ghost" missing=""/></users></query>'
                          '</api>'])
        with self.assertRaises(mw.ValidationError):
            wiki.user('Ghost').refresh()
    def test_block_log(self):
        """Assert that the block log is asked for by target."""
        wiki = mock.Mock()
        mw.User(wiki, 'V').block_log(3)
        wiki.log_entries.assert_called_once_with(3, logtype='block',
                                                 target='User:V')
