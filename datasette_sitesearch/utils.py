from datasette_sitesearch.config import ensure_wal_mode
import sqlite3
import threading
import types
from selectolax.parser import HTMLParser
from urllib.parse import urlparse

_local = threading.local()

def get_html_parser(text):
    # Discovery, title extraction and text cleaning all parse the same page
    # back to back on the same thread.
    if getattr(_local, 'last_html', None) == text:
        return _local.last_html_parser

    _local.last_html_parser = HTMLParser(text)
    _local.last_html = text
    return _local.last_html_parser

def connect(path):
    conn = sqlite3.connect(path, timeout=30, check_same_thread=False)
    conn.isolation_level = None
    ensure_wal_mode(conn)

    # See https://www.sqlite.org/pragma.html#pragma_synchronous; this is much faster,
    # at the expense of durability in the event of an unplanned shutdown.
    conn.execute('pragma synchronous = normal;')
    conn.execute('pragma foreign_keys = on;')
    return conn

class ConnectionFactory:
    """Hands out one connection per thread; sqlite3 connections must not be shared."""

    def __init__(self, path):
        self.path = path
        self._local = threading.local()
        self._lock = threading.Lock()
        self._conns = []

    def __call__(self):
        conn = getattr(self._local, 'conn', None)
        if conn is None:
            conn = connect(self.path)
            self._local.conn = conn
            with self._lock:
                self._conns.append(conn)

        return conn

    def close(self):
        with self._lock:
            conns = self._conns
            self._conns = []

        for conn in conns:
            conn.close()

        self._local = threading.local()

def normalize_site_url(url):
    url = url.strip()
    if not url.startswith('http://') and not url.startswith('https://'):
        url = 'https://' + url

    parsed = urlparse(url)
    return '{}://{}{}'.format(parsed.scheme.lower(), parsed.netloc.lower(), parsed.path).rstrip('/')

def normalize_url(url):
    """scheme + host + path; query and fragment dropped, no trailing slash except on the root."""
    parsed = urlparse(url)

    path = parsed.path or '/'
    if len(path) > 1:
        path = path.rstrip('/') or '/'

    return '{}://{}{}'.format(parsed.scheme.lower(), parsed.netloc.lower(), path)

def registrable_domain(host):
    if not host:
        return None

    parts = host.lower().split('.')
    if len(parts) > 2:
        return '.'.join(parts[-2:])

    return host.lower()

def page_path(site_url, url):
    parsed = urlparse(url)
    if parsed.hostname != urlparse(site_url).hostname:
        # Another host under the same registrable domain; keep it distinct
        # from a page with the same path on the site's own host.
        return normalize_url(url)

    return parsed.path or '/'

def page_url(site_url, path):
    if path.startswith('http://') or path.startswith('https://'):
        return path

    parsed = urlparse(site_url)
    return '{}://{}{}'.format(parsed.scheme, parsed.netloc, path)

def module_from_path(path, name):
    # Stolen from https://github.com/simonw/datasette/blob/013496862f4d4b441ab61255242b838b24287607/datasette/utils/__init__.py#L741
    # Adapted from http://sayspy.blogspot.com/2011/07/how-to-import-module-from-just-file.html
    mod = types.ModuleType(name)
    mod.__file__ = path
    with open(path, "r") as file:
        code = compile(file.read(), path, "exec", dont_inherit=True)
    exec(code, mod.__dict__)
    return mod
