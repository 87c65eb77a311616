"""
mw_bot_client.pager - turns continued list queries into one stream.

The server answers list queries a page at a time and says where to
resume in a <continue> element. ``generate`` keeps asking until the
server stops sending that element or enough items have been produced.
Items come out in the order the server sent them; nothing is sorted or
de-duplicated.
"""
import logging
from .excs import ValidationError
from .codec import continue_params

__all__ = [
    'DEFAULT_LIMIT',
    'validate_quantity',
    'generate',
]

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 500

def validate_quantity(quantity):
    """Check a requested number of items: None (no limit) or an int >= 1."""
    if quantity is None:
        return
    if isinstance(quantity, bool) or not isinstance(quantity, int) \
            or quantity < 1:
        raise ValidationError('quantity must be a positive integer or None, '
                              'not {!r}'.format(quantity))

def generate(request, params, tag, cont, build, quantity=None,
             limit=DEFAULT_LIMIT, limitkey=None):
    """Generate records from a continued list query.

    ``request`` is called with a dict of parameters and returns a parsed
    response. Every ``tag`` element of a response is passed to ``build``;
    it returns a record, or None to skip the element. ``cont`` names the
    continuation parameter of the module and ``limitkey`` its limit
    parameter.

    ``quantity`` is checked here, before anything is requested, so a bad
    value fails at the call site rather than on first iteration.
    """
    validate_quantity(quantity)
    params = dict(params)
    params.setdefault('continue', '')
    if limitkey is not None:
        # the server only serves whole pages; extra items are dropped below
        params[limitkey] = limit if quantity is None else min(limit, quantity)
    return _generate(request, params, tag, cont, build, quantity)

def _generate(request, params, tag, cont, build, quantity):
    count = 0
    while 1:
        doc = request(params)
        for node in doc.find_all(tag):
            item = build(node)
            if item is None:
                continue
            yield item
            count += 1
            if quantity is not None and count >= quantity:
                return
        following = continue_params(doc, cont)
        if following is None:
            return
        logger.debug('Continuing %s with %s', cont, following)
        params.update(following)
