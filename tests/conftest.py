import sys

# Keep third-party plugins out of the default plugin manager.
sys._called_from_test = True

# Datasette skips all entry-point plugins under that flag; load just this one.
from datasette.plugins import pm as datasette_pm
datasette_pm.load_setuptools_entrypoints("datasette", name="sitesearch")

import threading
import pytest
from datasette_sitesearch.config import default_config, install_schema
from datasette_sitesearch.errors import FetchError
from datasette_sitesearch.hookspecs import hookimpl
from datasette_sitesearch.lemmatizer import Lemmatizer
from datasette_sitesearch.plugin import make_plugin_manager
from datasette_sitesearch.utils import connect, normalize_url

STOPWORDS = frozenset(['a', 'and', 'in', 'is', 'of', 'the', 'to'])

class FakeMorphology:
    """English-ish morphology: drops a few function words and a plural 's'."""

    @hookimpl(tryfirst=True)
    def lemma_forms(self, word):
        if word in STOPWORDS:
            return []

        if len(word) > 3 and word.endswith('s'):
            return [word[:-1]]

        return [word]

class FakeWeb:
    """Serves pages from a dict of url -> html (or an int HTTP status)."""

    def __init__(self):
        self.pages = {}
        self.fetched = []
        self.request_headers = []
        # When set, fetches block until the event is set.
        self.gate = None
        self._lock = threading.Lock()

    def add(self, url, body):
        self.pages[normalize_url(url)] = body

    @hookimpl(tryfirst=True)
    def fetch_url(self, url, request_headers):
        with self._lock:
            self.fetched.append(url)
            self.request_headers.append(dict(request_headers))

        if self.gate is not None:
            self.gate.wait(10)

        body = self.pages.get(normalize_url(url))
        if body is None:
            return FetchError('http', url, status_code=404)

        if isinstance(body, int):
            return FetchError('http', url, status_code=body)

        if isinstance(body, Exception):
            return body

        return {
            'fetched_at': '2024-01-01 00:00:00',
            'url': url,
            'headers': [['content-type', 'text/html']],
            'status_code': 200,
            'text': body,
        }

def html(title, body, links=()):
    anchors = ''.join('<a href="{}">link</a>'.format(link) for link in links)
    return '<html><head><title>{}</title></head><body><p>{}</p>{}</body></html>'.format(title, body, anchors)

@pytest.fixture
def web():
    return FakeWeb()

@pytest.fixture
def pm(web):
    pm = make_plugin_manager(load_entrypoints=False)
    pm.register(FakeMorphology(), 'fake-morphology')
    pm.register(web, 'fake-web')
    return pm

@pytest.fixture
def hook(pm):
    return pm.hook

@pytest.fixture
def config(hook):
    config = default_config(hook)
    config['alphabet'] = 'a-z'
    config['workers'] = 4
    return config

@pytest.fixture
def lemmatizer(hook):
    return Lemmatizer(hook, alphabet='a-z')

@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / 'db.sqlite')
    conn = connect(path)
    install_schema(conn, 'test')
    conn.close()
    return path

@pytest.fixture
def conn(db_path):
    conn = connect(db_path)
    yield conn
    conn.close()
