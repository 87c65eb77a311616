"""
This submodule contains the Revision and LogEntry records.

Both are immutable. A field the server redacted (a hidden user, comment
or action) is None. Revisions are equal when their IDs are equal; both
kinds order by timestamp.
"""
from collections import namedtuple

__all__ = [
    'Revision',
    'LogEntry',
    'FileVersion',
    'MoveDetails',
    'RenameDetails',
    'BlockDetails',
    'RightsDetails',
    'ProtectionDetails',
]

class _ByTimestamp(object):
    """Mixin ordering records by their ``timestamp`` field."""
    __slots__ = ()

    def __lt__(self, other):
        return self.timestamp < other.timestamp

    def __le__(self, other):
        return self.timestamp <= other.timestamp

    def __gt__(self, other):
        return self.timestamp > other.timestamp

    def __ge__(self, other):
        return self.timestamp >= other.timestamp

_RevisionBase = namedtuple('_RevisionBase', (
    'revid timestamp title summary user minor bot size '
    'rcid rollbacktoken parentid'
))

class Revision(_ByTimestamp, _RevisionBase):
    """A revision of a page."""
    __slots__ = ()

    def __new__(cls, revid, timestamp, title, summary, user, minor=False,
                bot=False, size=0, rcid=None, rollbacktoken=None,
                parentid=None):
        return super().__new__(cls, revid, timestamp, title, summary, user,
                               minor, bot, size, rcid, rollbacktoken,
                               parentid)

    def __repr__(self):
        """Represent a revision of a page."""
        return "<Revision {revid} of page {name}>".format(revid=self.revid,
                                                         name=self.title)

    __str__ = __repr__

    def __eq__(self, other):
        """Check if two revisions are the same."""
        return isinstance(other, Revision) and self.revid == other.revid

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        """Revision.__hash__() <==> hash(Revision)"""
        return hash(self.revid)

_LogEntryBase = namedtuple('_LogEntryBase', (
    'type action reason performer target timestamp details'
))

class LogEntry(_ByTimestamp, _LogEntryBase):
    """An entry in one of the wiki's logs.

    ``details`` depends on ``type``: MoveDetails for moves, RenameDetails
    for user renames, BlockDetails for blocks, RightsDetails for rights
    changes, ProtectionDetails for protections, otherwise None.
    """
    __slots__ = ()

    def __repr__(self):
        """Represent a log entry."""
        return '<LogEntry {type}/{action} {target} by {user}>'.format(
            type=self.type, action=self.action, target=self.target,
            user=self.performer)

    __str__ = __repr__

_FileVersionBase = namedtuple('_FileVersionBase', (
    'title timestamp user comment size sha1 url'
))

class FileVersion(_ByTimestamp, _FileVersionBase):
    """One uploaded version of a file, from the file's upload history."""
    __slots__ = ()

    def __repr__(self):
        return '<FileVersion of {title} at {ts}>'.format(
            title=self.title, ts=self.timestamp)

    __str__ = __repr__

# details variants for LogEntry
MoveDetails = namedtuple('MoveDetails', 'new_title')
RenameDetails = namedtuple('RenameDetails', 'new_name')
BlockDetails = namedtuple('BlockDetails', (
    'anononly nocreate noautoblock noemail nousertalk duration'
))
RightsDetails = namedtuple('RightsDetails', 'groups')
ProtectionDetails = namedtuple('ProtectionDetails', 'level description')
