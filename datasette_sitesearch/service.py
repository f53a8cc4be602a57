import threading
from urllib.parse import urlparse
from . import indexer, store
from .config import default_config
from .crawler import CrawlSession, fetch_page
from .errors import FetchError, IndexingError
from .lemmatizer import Lemmatizer, DEFAULT_ALPHABET
from .search import SearchEngine
from .snippets import SnippetCache
from .statistics import statistics
from .utils import ConnectionFactory, normalize_site_url, page_path

def seed_sites(hook, config):
    """[{'url', 'name'}] from every get_seed_sites plugin, normalized, first one wins per url."""
    rv = []
    seen = set()

    for sites in hook.get_seed_sites(config=config):
        for site in sites or []:
            url = normalize_site_url(site['url'])

            if url in seen:
                continue
            seen.add(url)

            rv.append({'url': url, 'name': site.get('name') or url})

    return rv

def prepare_sites(conn, sites):
    """Drops sites that are no longer configured and marks the rest INDEXING. Returns them with ids."""
    with conn:
        conn.execute('BEGIN IMMEDIATE TRANSACTION')

        deleted = store.delete_sites_not_in(conn, set(site['url'] for site in sites))
        if deleted:
            print('indexing: deleted {} site(s) no longer configured'.format(deleted))

        rv = []
        for site in sites:
            site_id = store.upsert_site(conn, site['url'], site['name'], store.INDEXING)
            rv.append(dict(site, id=site_id))

    return rv

class IndexingService:
    """Owns the crawl session of one database, and the lemmatizer and search engine reading from it."""

    def __init__(self, path, config=None, hook=None):
        if hook is None:
            from .plugin import pm
            hook = pm.hook

        if config is None:
            config = default_config(hook)

        self.path = path
        self.config = config
        self.hook = hook
        self.lemmatizer = Lemmatizer(hook, alphabet=config.get('alphabet', DEFAULT_ALPHABET))
        self.snippet_cache = SnippetCache()
        self.search_engine = SearchEngine(self.lemmatizer, config, self.snippet_cache)
        self.conn = ConnectionFactory(path)

        self._lock = threading.Lock()
        self._session = None
        self._thread = None

    def is_indexing(self):
        return self._thread is not None and self._thread.is_alive()

    def start_indexing(self):
        """Starts crawling every configured site in the background. False if a crawl is already running."""
        with self._lock:
            if self.is_indexing():
                return False

            session = CrawlSession(self.path, self.lemmatizer, self.config, self.hook)
            self._session = session
            self._thread = threading.Thread(target=self._run, args=(session,), name='sitesearch-indexing', daemon=True)
            self._thread.start()

        return True

    def _run(self, session):
        sites = prepare_sites(session.conn(), seed_sites(self.hook, self.config))

        if not sites:
            print('indexing: no sites configured')

        session.run(sites)

    def stop_indexing(self):
        """False if no crawl is running."""
        with self._lock:
            if not self.is_indexing():
                return False

            self._session.cancel(manual=True)

        return True

    def wait(self, timeout=None):
        """Blocks until the running crawl, if any, has finished. Returns False on timeout."""
        thread = self._thread
        if thread is None:
            return True

        thread.join(timeout)
        return not thread.is_alive()

    def find_site_for_url(self, url):
        parsed = urlparse(url)

        for site in seed_sites(self.hook, self.config):
            site_parsed = urlparse(site['url'])
            if site_parsed.scheme == parsed.scheme and site_parsed.netloc == parsed.netloc.lower():
                return site

        return None

    def index_single_page(self, url):
        """(Re-)index one page of a configured site.

        Returns True if the page is in the index afterwards; False if the url
        is outside every configured site, or the page could not be fetched
        or indexed.
        """
        url = url.strip()
        site = self.find_site_for_url(url)

        if site is None:
            print('indexing: {} is outside the configured sites'.format(url))
            return False

        conn = self.conn()
        existing = store.find_site_by_url(conn, site['url'])
        if existing:
            site_id = existing['id']
        else:
            with conn:
                site_id = store.upsert_site(conn, site['url'], site['name'], store.INDEXED)

        path = page_path(site['url'], url)
        response = fetch_page(self.hook, self.config, url, 0)

        if isinstance(response, FetchError):
            print('indexing: failed to fetch {}: {}'.format(url, response))

            # A page that is now gone shouldn't stay searchable.
            if response.kind == 'http' and indexer.delete_page(conn, site_id, path):
                print('indexing: removed {} from the index'.format(url))

            return False

        try:
            indexer.index_page(conn, self.lemmatizer, site_id, path, response['status_code'], response['text'])
        except IndexingError as e:
            print('indexing: {}'.format(e))
            with conn:
                store.update_site_status(conn, site_id, store.FAILED, str(e))
            return False

        with conn:
            store.touch_site(conn, site_id)

        print('indexing: indexed {}'.format(url))
        return True

    def search(self, query, site=None, offset=0, limit=None, conn=None):
        return self.search_engine.search(conn or self.conn(), query, site=site, offset=offset, limit=limit)

    def statistics(self, conn=None):
        return statistics(conn or self.conn(), indexing=self.is_indexing())
