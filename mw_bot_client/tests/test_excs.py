"""Test exception handling"""
from unittest import TestCase
import mw_bot_client as mw

class TestExcs(TestCase):
    """TestCase class to test exception handling."""
    def test_catch(self):
        """Test try/except to catch specific errors."""
        errored = False
        try:
            raise mw.WikiError.protectedpage('protectedpage: no')
        except mw.WikiError.protectedpage:
            errored = True
        self.assertTrue(errored)
        self.assertIs(mw.WikiError.protectedpage, mw.WikiError.protectedpage)
        self.assertTrue(issubclass(mw.WikiError.badtoken, mw.WikiError))
    def test_private_names(self):
        """Assert that private lookups do not create error classes."""
        with self.assertRaises(AttributeError):
            getattr(mw.WikiError, '_private')
    def test_code(self):
        """Assert that the code falls back to the class name."""
        self.assertEqual(mw.WikiError.readonly().code, 'readonly')
        self.assertEqual(mw.RateLimited('x', code='ratelimited').code,
                         'ratelimited')
    def test_conflict(self):
        """Test that EditConflict stands apart from WikiError."""
        self.assertFalse(issubclass(mw.EditConflict, mw.WikiError))
    def test_hierarchy(self):
        """Assert the grouping of the typed errors."""
        self.assertTrue(issubclass(mw.CascadeProtected, mw.ProtectedPage))
        self.assertTrue(issubclass(mw.ProtectedPage, mw.PermissionDenied))
        self.assertTrue(issubclass(mw.RateLimited, mw.TransientError))
        self.assertTrue(issubclass(mw.AccountBlocked, mw.SessionError))
        self.assertTrue(issubclass(mw.ValidationError, ValueError))
        self.assertTrue(issubclass(mw.AssertionFailed, AssertionError))
        self.assertFalse(issubclass(mw.AssertionFailed, mw.WikiError))
