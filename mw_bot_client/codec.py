"""
mw_bot_client.codec - turning request parameters into form values and
XML API responses back into records.

Responses are read with a tolerant attribute lookup: every element is a
map of the attributes that are present. A missing attribute (for example
one the server redacted) becomes None in the record instead of an error.
Entity escapes such as ``&quot;`` are decoded by the XML parser.
"""
import re
from datetime import datetime, timezone
from bs4 import BeautifulSoup
from .page import PageInfo, Protection, User
from .revn import (Revision, LogEntry, FileVersion, MoveDetails,
                   RenameDetails, BlockDetails, RightsDetails,
                   ProtectionDetails)

__all__ = [
    'TIMESTAMP_FORMAT',
    'encode_params',
    'format_timestamp',
    'parse_timestamp',
    'parse',
    'api_error',
    'api_warnings',
    'continue_params',
    'tokens_from',
    'restrictions_from',
    'protection_from',
    'page_info_from',
    'revision_from',
    'file_version_from',
    'log_entry_from',
    'block_from',
    'user_from',
]

TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%SZ'

_RESTRICTION = re.compile(r'\[(\w+)=(\w+)\]')

def encode_params(params):
    """Turn a dict of Python values into API form values.

    None and False are dropped, True becomes '1', lists and tuples are
    joined with '|' and datetimes are formatted as API timestamps.
    """
    result = {}
    for key, value in params.items():
        if value is None or value is False:
            continue
        if value is True:
            value = '1'
        elif isinstance(value, datetime):
            value = format_timestamp(value)
        elif isinstance(value, (list, tuple)):
            value = '|'.join(str(item) for item in value)
        elif not isinstance(value, (str, bytes)):
            value = str(value)
        result[key] = value
    result['format'] = 'xml'
    return result

def format_timestamp(stamp):
    """Format a datetime as an API timestamp (naive datetimes are UTC)."""
    if stamp.tzinfo is not None:
        stamp = stamp.astimezone(timezone.utc)
    return stamp.strftime(TIMESTAMP_FORMAT)

def parse_timestamp(text):
    """Parse an API timestamp into an aware UTC datetime, or None."""
    if not text:
        return None
    try:
        return datetime.strptime(text, TIMESTAMP_FORMAT).replace(
            tzinfo=timezone.utc)
    except ValueError:
        return None

def to_int(text):
    """int(text), or None if text is absent or not a number."""
    try:
        return int(text)
    except (TypeError, ValueError):
        return None

def parse(text):
    """Parse a response body into a document."""
    return BeautifulSoup(text or '', 'xml')

def _root(doc):
    root = doc.find('api')
    return root if root is not None else doc

def api_error(doc):
    """Return (code, info) for an <error> response, or None."""
    error = _root(doc).find('error', recursive=False)
    if error is None:
        return None
    return error.get('code', ''), error.get('info', '')

def api_warnings(doc):
    """Return a list of (module, text) pairs for <warnings>."""
    warnings = _root(doc).find('warnings', recursive=False)
    if warnings is None:
        return []
    return [(node.name, node.get_text())
            for node in warnings.find_all(True, recursive=False)]

def continue_params(doc, name):
    """Return the parameters that continue a list request, or None if
    the server sent no value for ``name`` (the list is exhausted).

    ``name`` may also be a tuple of names a module has used over time.
    """
    names = (name,) if isinstance(name, str) else name
    node = doc.find('continue')
    if node is not None and any(node.has_attr(key) for key in names):
        return dict(node.attrs)
    legacy = doc.find('query-continue')
    if legacy is not None:
        for child in legacy.find_all(True):
            for key in names:
                if child.has_attr(key):
                    return {key: child[key]}
    return None

def tokens_from(doc):
    """Return a dict of token kind -> token from a response."""
    result = {}
    node = doc.find('tokens')
    if node is not None:
        for key, value in node.attrs.items():
            if key.endswith('token'):
                result[key[:-len('token')]] = value
    # older servers hand out tokens as page attributes
    page = doc.find('page')
    if page is not None:
        for key in ('edittoken', 'movetoken', 'deletetoken'):
            if page.has_attr(key):
                result.setdefault('csrf', page[key])
    return result

def _flag(node, name):
    return node is not None and node.has_attr(name)

def _restriction_level(restrictions, exists=True):
    """Map an action -> group dict onto a Protection level.

    ``exists`` is None when it is unknown whether the page exists. Upload
    restrictions only show as UPLOAD when nothing else is restricted;
    they stay available in the dict for upload checks.
    """
    if exists is False or (exists is None and 'create' in restrictions):
        return Protection.CREATE if 'create' in restrictions \
            else Protection.NONE
    edit = restrictions.get('edit')
    move = restrictions.get('move')
    if edit and edit != 'autoconfirmed':
        return Protection.FULL
    if edit:
        if move and move != 'autoconfirmed':
            return Protection.SEMI_AND_MOVE
        return Protection.SEMI
    if move:
        return Protection.MOVE
    if 'upload' in restrictions:
        return Protection.UPLOAD
    return Protection.NONE

def restrictions_from(page):
    """Return (restrictions, cascade) for a <page> element.

    ``restrictions`` maps an action to the group it is restricted to;
    protection inherited through a cascade only sets the flag.
    """
    restrictions = {}
    cascade = False
    for node in page.find_all('pr'):
        if node.has_attr('source') or node.has_attr('cascade'):
            cascade = True
        if not node.has_attr('source'):
            restrictions[node.get('type')] = node.get('level')
    return restrictions, cascade

def protection_from(page):
    """Return (Protection, cascade) for a <page> element."""
    restrictions, cascade = restrictions_from(page)
    exists = not page.has_attr('missing')
    return _restriction_level(restrictions, exists), cascade

def page_info_from(doc, title, kind='csrf'):
    """Build a PageInfo from a prop=info response carrying tokens."""
    page = doc.find('page')
    if page is None:
        return PageInfo(title, token=tokens_from(doc).get(kind))
    restrictions, cascade = restrictions_from(page)
    protection = _restriction_level(restrictions,
                                    not page.has_attr('missing'))
    exists = not page.has_attr('missing') and not page.has_attr('invalid')
    return PageInfo(
        page.get('title', title),
        exists=exists,
        protection=protection,
        cascade=cascade,
        restrictions=restrictions,
        token=tokens_from(doc).get(kind),
        lastrevid=to_int(page.get('lastrevid')) if exists else None,
        size=to_int(page.get('length')) if exists else None,
        touched=parse_timestamp(page.get('touched')),
        displaytitle=page.get('displaytitle'),
    )

def revision_from(node, title=None):
    """Build a Revision from a <rev> or <item> element.

    Redacted summaries and users are None. ``title`` is used when the
    element itself does not carry one (page histories).
    """
    if _flag(node, 'commenthidden'):
        summary = None
    else:
        summary = node.get('comment')
    user = None if _flag(node, 'userhidden') else node.get('user')
    size = node.get('newlen')
    if size is None:
        size = node.get('size')
    return Revision(
        to_int(node.get('revid')),
        parse_timestamp(node.get('timestamp')),
        node.get('title', title),
        summary,
        user,
        minor=_flag(node, 'minor'),
        bot=_flag(node, 'bot'),
        size=to_int(size),
        rcid=to_int(node.get('rcid')),
        rollbacktoken=node.get('rollbacktoken'),
        parentid=to_int(node.get('parentid')),
    )

def file_version_from(node, title):
    """Build a FileVersion from an imageinfo <ii> element of ``title``."""
    return FileVersion(
        title,
        parse_timestamp(node.get('timestamp')),
        None if _flag(node, 'userhidden') else node.get('user'),
        None if _flag(node, 'commenthidden') else node.get('comment'),
        to_int(node.get('size')),
        node.get('sha1'),
        node.get('url'),
    )

def _params_text(node):
    """Text of the legacy <param> children of a log item."""
    param = node.find('param')
    return param.get_text() if param is not None else None

def _move_details(node):
    params = node.find('params')
    if _flag(params, 'target_title'):
        return MoveDetails(params['target_title'])
    legacy = node.find('move')
    if _flag(legacy, 'new_title'):
        return MoveDetails(legacy['new_title'])
    return None

def _rename_details(node):
    params = node.find('params')
    if _flag(params, 'newuser'):
        return RenameDetails(params['newuser'])
    text = _params_text(node)
    return RenameDetails(text) if text else None

def _block_details(node, action):
    if action == 'unblock':
        return None
    params = node.find('params')
    if params is None:
        params = node.find('block')
    if params is None or not (params.has_attr('duration')
                              or params.has_attr('expiry')):
        return None
    flags = [flag.strip() for flag in params.get('flags', '').split(',')]
    return BlockDetails(
        'anononly' in flags,
        'nocreate' in flags,
        'noautoblock' in flags,
        'noemail' in flags,
        'nousertalk' in flags,
        params.get('duration', params.get('expiry')),
    )

def _rights_details(node):
    newgroups = node.find('newgroups')
    if newgroups is not None:
        return RightsDetails(tuple(g.get_text() for g in newgroups.find_all('g')))
    legacy = node.find('rights')
    if _flag(legacy, 'new'):
        return RightsDetails(tuple(g for g in re.split(r'[,\s]+', legacy['new'])
                                   if g))
    return None

def _protection_details(node, action):
    if action == 'unprotect':
        return None
    params = node.find('params')
    if action == 'move_prot':
        if _flag(params, 'oldtitle_title'):
            return ProtectionDetails(None, params['oldtitle_title'])
        return ProtectionDetails(None, _params_text(node))
    restrictions = {}
    description = None
    if params is not None:
        description = params.get('description')
        for li in params.find_all(['li', '_v']):
            restrictions[li.get('type')] = li.get('level')
    if not restrictions:
        if description is None:
            description = _params_text(node)
        restrictions = dict(_RESTRICTION.findall(description or ''))
    if not restrictions:
        return ProtectionDetails(None, description)
    return ProtectionDetails(_restriction_level(restrictions, None),
                             description)

def log_entry_from(node):
    """Build a LogEntry from a logevents <item> element.

    Redacted actions, reasons, performers and targets are None. The
    shape of ``details`` is chosen by the log type before anything else
    in the element is looked at.
    """
    logtype = node.get('type')
    action = None if _flag(node, 'actionhidden') else node.get('action')
    if _flag(node, 'commenthidden'):
        reason = None
    elif logtype == 'newusers':
        reason = node.get('comment', '')
    else:
        reason = node.get('comment')
    performer = None if _flag(node, 'userhidden') else node.get('user')
    target = None if _flag(node, 'actionhidden') else node.get('title')

    if logtype == 'move':
        details = _move_details(node)
    elif logtype == 'renameuser':
        details = _rename_details(node)
    elif logtype == 'block':
        details = _block_details(node, action)
    elif logtype == 'rights':
        details = _rights_details(node)
    elif logtype == 'protect':
        details = _protection_details(node, action)
    else:
        details = None

    return LogEntry(logtype, action, reason, performer, target,
                    parse_timestamp(node.get('timestamp')), details)

def block_from(node):
    """Build a block LogEntry from a list=blocks <block> element.

    Autoblocks carry no user name; their target is '#' + block ID.
    """
    target = node.get('user')
    if target is None:
        target = '#' + node.get('id', '')
    flags = [flag for flag in ('anononly', 'nocreate', 'autoblock',
                               'noemail', 'allowusertalk')
             if node.has_attr(flag)]
    details = BlockDetails(
        'anononly' in flags,
        'nocreate' in flags,
        'autoblock' not in flags,
        'noemail' in flags,
        'allowusertalk' not in flags,
        node.get('expiry'),
    )
    return LogEntry('block', 'block', node.get('reason'), node.get('by'),
                    target, parse_timestamp(node.get('timestamp')), details)

def user_from(wiki, node):
    """Build a User from a <user> or <userinfo> element, or None if the
    user is missing or invalid.
    """
    if node is None or node.has_attr('missing') or node.has_attr('invalid'):
        return None
    rights = node.find('rights')
    groups = node.find('groups')
    return User(
        wiki,
        node.get('name'),
        rights=frozenset(r.get_text() for r in rights.find_all('r'))
        if rights is not None else frozenset(),
        groups=frozenset(g.get_text() for g in groups.find_all('g'))
        if groups is not None else frozenset(),
        editcount=to_int(node.get('editcount')),
        blocked=node.has_attr('blockedby') or node.has_attr('blockid'),
        emailable=node.has_attr('emailable'),
    )
