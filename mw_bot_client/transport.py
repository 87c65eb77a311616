"""
mw_bot_client.transport - the HTTP layer.

A Transport only moves text: it sends the cookie set it is given, can
harvest the cookies a response sets, and hands back the response body
without looking at it.
"""
import logging
from http.cookiejar import DefaultCookiePolicy
import requests
from .codec import encode_params

__all__ = [
    'CONNECT_TIMEOUT',
    'READ_TIMEOUT',
    'Transport',
]

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT = 30 # seconds
READ_TIMEOUT = 180 # seconds, large responses are slow

class _BlockAll(DefaultCookiePolicy):
    """Keep requests from storing cookies; the session owns them."""
    def set_ok(self, cookie, request):
        return False

class Transport(object):
    """GET/POST against a single API endpoint."""
    def __init__(self, api_url, user_agent, zipped=True, session=None):
        self.api_url = api_url
        self.user_agent = user_agent
        self.zipped = zipped
        self._session = session if session is not None else requests.session()
        self._session.cookies.set_policy(_BlockAll())

    def __repr__(self):
        return '<Transport {url}>'.format(url=self.api_url)

    def _headers(self):
        return {
            'User-Agent': self.user_agent,
            'Accept-Encoding': 'gzip' if self.zipped else 'identity',
        }

    @staticmethod
    def _harvest(response, harvest):
        if harvest is not None:
            harvest.update(requests.utils.dict_from_cookiejar(response.cookies))

    def get(self, params, cookies=None, harvest=None):
        """Issue a GET and return the response text.

        ``cookies`` is the dict of cookies to send; if ``harvest`` is a
        dict, cookies set by the response are stored in it.
        """
        params = encode_params(params)
        logger.debug('GET %s %s', self.api_url, params)
        response = self._session.get(self.api_url, params=params,
                                     headers=self._headers(),
                                     cookies=dict(cookies or {}),
                                     timeout=(CONNECT_TIMEOUT, READ_TIMEOUT))
        response.raise_for_status()
        self._harvest(response, harvest)
        return response.text

    def post(self, params, cookies=None, files=None, harvest=None):
        """Issue a POST and return the response text.

        With ``files`` the body is multipart and file parts are sent as
        raw bytes; otherwise it is url-encoded.
        """
        params = encode_params(params)
        logger.debug('POST %s action=%s', self.api_url, params.get('action'))
        response = self._session.post(self.api_url, data=params, files=files,
                                      headers=self._headers(),
                                      cookies=dict(cookies or {}),
                                      timeout=(CONNECT_TIMEOUT, READ_TIMEOUT))
        response.raise_for_status()
        self._harvest(response, harvest)
        return response.text

    def close(self):
        """Close the underlying connection pool."""
        self._session.close()
