"""Crawls configured sites into the lemma index.

A crawl session owns a thread pool, a visited set and a stop event. Each
page is a CrawlTask; a task spawns its children on the pool and counts as
done only once its own work and all of its children are done.
"""
import math
import threading
import time
import traceback
from concurrent.futures import ThreadPoolExecutor
from urllib.parse import urljoin
from . import indexer, store
from .errors import FetchError, IndexingError
from .utils import ConnectionFactory, normalize_url, page_path

STOPPED_BY_USER = 'Indexing stopped by user'

# Max canonicalization attempts per URL, so a broken plugin can't loop forever.
MAX_CANONICALIZE_ATTEMPTS = 10

def absolutize_url(base_url, new_url):
    try:
        return urljoin(base_url, new_url)
    except ValueError:
        return None

def fetch_page(hook, config, url, depth):
    """Returns a response dict, or a FetchError."""
    request_headers = {}
    rejected_reason = hook.before_fetch_url(config=config, url=url, depth=depth, request_headers=request_headers)

    if rejected_reason:
        return FetchError('rejected', url, message=str(rejected_reason))

    response = hook.fetch_url(url=url, request_headers=request_headers)

    if not response:
        return FetchError('network', url, message='no plugin fetched the url')

    if isinstance(response, Exception) and not isinstance(response, FetchError):
        return FetchError('network', url, message=repr(response))

    return response

def discover_urls(hook, config, site_url, from_url, from_depth, response):
    """{(url, depth)} of the links on a page that plugins accept."""
    urls = [new_url for urls in hook.discover_urls(config=config, url=from_url, response=response) for new_url in urls]

    # Normalize URLs into (url, depth) form
    urls = [new_url if isinstance(new_url, tuple) else (new_url, from_depth + 1) for new_url in urls]

    # Resolve relative paths
    urls = [(absolutize_url(from_url, new_url), new_depth) for (new_url, new_depth) in urls]
    urls = [x for x in urls if x[0]]

    # Reject non HTTP/HTTPS URLs
    urls = [x for x in urls if x[0].startswith('https:') or x[0].startswith('http:')]

    new_urls = set()
    for (to_url, to_url_depth) in urls:
        attempts = 0
        while attempts < MAX_CANONICALIZE_ATTEMPTS:
            attempts += 1
            results = hook.canonicalize_url(config=config, site_url=site_url, from_url=from_url, to_url=to_url, to_url_depth=to_url_depth)

            rewritten = False
            for x in results:
                if isinstance(x, str):
                    to_url = x
                    rewritten = True
                    break
                if isinstance(x, tuple):
                    to_url, to_url_depth = x
                    rewritten = True
                    break

            if rewritten:
                continue

            if False in results:
                # Someone rejected the URL; this wins.
                break

            new_urls.add((normalize_url(to_url), to_url_depth))
            break

    return new_urls

class CrawlSession:
    def __init__(self, path, lemmatizer, config, hook, workers=None, time_budget=None):
        self.lemmatizer = lemmatizer
        self.config = config
        self.hook = hook
        self.max_depth = config.get('max-depth', 3)
        self.time_budget = time_budget if time_budget is not None else config.get('time-budget')
        self.conn = ConnectionFactory(path)
        self.stopped_manually = False

        self._visited = set()
        self._visited_lock = threading.Lock()
        self._stop = threading.Event()
        self._timer = None
        self._executor = ThreadPoolExecutor(
            max_workers=workers or config.get('workers') or 4,
            thread_name_prefix='sitesearch-crawl'
        )

    @property
    def cancelled(self):
        return self._stop.is_set()

    def cancel(self, manual=False):
        if manual:
            self.stopped_manually = True

        if not self._stop.is_set():
            print('crawl: cancelling ({})'.format('stopped by user' if manual else 'time budget exhausted'))
        self._stop.set()

    def visit(self, url):
        """Marks a normalized URL as visited. Returns False if it already was."""
        with self._visited_lock:
            if url in self._visited:
                return False

            self._visited.add(url)
            return True

    def submit(self, task):
        self._executor.submit(task.run)

    def run(self, sites):
        """Crawls the sites until done or cancelled, then records each site's final status."""
        start = time.time()

        if self.time_budget:
            self._timer = threading.Timer(self.time_budget, self.cancel)
            self._timer.daemon = True
            self._timer.start()

        try:
            roots = [crawl_site(self, site, self.max_depth) for site in sites]
            for root in roots:
                root.done.wait()

            conn = self.conn()
            for site in sites:
                finish_site(conn, site, self.stopped_manually)
        finally:
            if self._timer:
                self._timer.cancel()
            self._executor.shutdown(wait=True)
            self.conn.close()

        print('crawl: finished {} site(s), {} url(s) in {} ms'.format(len(sites), len(self._visited), math.ceil(1000 * (time.time() - start))))

class CrawlTask:
    def __init__(self, session, site, url, depth, parent=None):
        self.session = session
        self.site = site
        self.url = url
        self.depth = depth
        self.parent = parent
        self.done = threading.Event()

        # Own work plus unfinished children.
        self._pending = 1
        self._lock = threading.Lock()

    def spawn(self, url, depth):
        child = CrawlTask(self.session, self.site, url, depth, parent=self)

        with self._lock:
            self._pending += 1

        try:
            self.session.submit(child)
        except RuntimeError as e:
            print('crawl: unable to schedule {}: {}'.format(url, e))
            child._finish_one()

    def _finish_one(self):
        with self._lock:
            self._pending -= 1
            finished = self._pending == 0

        if finished:
            self.done.set()
            if self.parent:
                self.parent._finish_one()

    def run(self):
        try:
            if not self.session.cancelled:
                self.process()
        except Exception:
            print('crawl: unexpected error on {}\n{}'.format(self.url, traceback.format_exc()))
        finally:
            self._finish_one()

    def process(self):
        session = self.session
        site = self.site
        conn = session.conn()

        start = time.time()
        response = fetch_page(session.hook, session.config, self.url, self.depth)

        if isinstance(response, FetchError):
            print('crawl: failed to fetch {} (kind={}, user-agent={!r}): {}'.format(self.url, response.kind, session.config.get('user-agent'), response))

            if self.depth == 0:
                with conn:
                    store.update_site_status(conn, site['id'], store.FAILED, str(response))
            return

        try:
            indexer.index_page(conn, session.lemmatizer, site['id'], page_path(site['url'], self.url), response['status_code'], response['text'])
        except IndexingError as e:
            print('crawl: {}'.format(e))
            with conn:
                store.update_site_status(conn, site['id'], store.FAILED, str(e))
        else:
            with conn:
                store.touch_site(conn, site['id'])

        print('crawl: indexed {} depth={} in {} ms'.format(self.url, self.depth, math.ceil(1000 * (time.time() - start))))

        if self.depth >= session.max_depth:
            return

        base_url = response.get('url') or self.url
        for url, depth in sorted(discover_urls(session.hook, session.config, site['url'], base_url, self.depth, response)):
            if session.cancelled:
                break

            if session.visit(url):
                self.spawn(url, depth)

def crawl_site(session, site, max_depth):
    """Schedules the crawl of a site's root page. Returns the root task; wait on its `done` event."""
    print('crawl: starting {} ({}) max_depth={}'.format(site['url'], site['name'], max_depth))

    root = CrawlTask(session, site, site['url'], 0)
    session.visit(normalize_url(site['url']))

    try:
        session.submit(root)
    except RuntimeError as e:
        print('crawl: unable to schedule {}: {}'.format(site['url'], e))
        root._finish_one()

    return root

def finish_site(conn, site, stopped_manually):
    current = store.find_site_by_id(conn, site['id'])

    if current is None:
        # Removed from the configuration mid-crawl.
        return

    if current['status'] == store.FAILED:
        print('crawl: {} FAILED: {}'.format(site['url'], current['last_error']))
        return

    with conn:
        if stopped_manually:
            store.update_site_status(conn, site['id'], store.FAILED, STOPPED_BY_USER)
            print('crawl: {} FAILED: {}'.format(site['url'], STOPPED_BY_USER))
        else:
            store.update_site_status(conn, site['id'], store.INDEXED)
            print('crawl: {} INDEXED'.format(site['url']))
