import os.path as path
import threading
from functools import partial, wraps
import http.server as httpserver
import socketserver as sockserver

import requests

from tests.const import LOCALHOST

XML_DIR = path.join(path.dirname(path.realpath(__file__)), "xml")


class SimpleMock(dict):
    """Case insensitive dict to mock HTTP response."""
    def __init__(self, *args, **kwargs):
        super(SimpleMock, self).__init__(*args, **kwargs)
        for k in list(self.keys()):
            v = super(SimpleMock, self).pop(k)
            self.__setitem__(k, v)

    def __setitem__(self, key, value):
        super(SimpleMock, self).__setitem__(str(key).lower(), value)

    def __getitem__(self, key):
        if key.lower() not in self:
            return None
        return super(SimpleMock, self).__getitem__(key.lower())

    def __setattr__(self, key, value):
        self.__setitem__(key, value)

    def __getattr__(self, key):
        return self.__getitem__(key)


class SimpleMockRequest(SimpleMock):
    """Case insensitive dict interface for an aiohttp Request object."""
    def update(self, request, body=None):
        self.clear()
        attributes = [
            "method",
            "host",
            "path",
            "path_qs",
            "query",
        ]
        self.headers = SimpleMock(request.headers)
        self.url = str(request.url)  # match requests interface
        self.url_object = request.url
        self.body = body
        for attr in attributes:
            try:
                self[attr] = getattr(request, attr)
            except AttributeError:
                self[attr] = None


def async_test(f):
    """
    Decorator to create asyncio context for asyncio methods or functions.
    """
    @wraps(f)
    def g(*args, **kwargs):
        args[0].loop.run_until_complete(f(*args, **kwargs))
    return g


def make_response(content, status_code=200, url=None):
    """
    Build a real `requests.Response` holding `content`.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    resp = requests.Response()
    resp.status_code = status_code
    resp._content = content
    resp.url = url
    return resp


def serve_xml_dir():
    """
    Serve the files in tests/xml from a background thread. Returns the server
    and its base URL.
    """
    handler = partial(httpserver.SimpleHTTPRequestHandler, directory=XML_DIR)
    httpd = sockserver.TCPServer((LOCALHOST, 0), handler)
    thread = threading.Thread(target=httpd.serve_forever)
    thread.daemon = True
    thread.start()
    return httpd, "http://%s:%s" % (LOCALHOST, httpd.server_address[1])
