import math
import sqlite3
import time
from . import store
from .lemmatizer import page_title
from .snippets import SnippetCache, generate_snippet, DEFAULT_BUDGET
from .utils import normalize_site_url, page_url

DEFAULT_FREQUENCY_THRESHOLD = 75
DEFAULT_PAGE_SIZE = 20

def empty_response(error=None):
    if error:
        print('search: empty result: {}'.format(error))

    return {
        'result': True,
        'total_results': 0,
        'items': [],
        'current_page': 0,
        'total_pages': 0,
        'error': error,
    }

def paginate(items, offset, limit):
    total = len(items)
    offset = max(0, offset)

    return {
        'result': True,
        'total_results': total,
        'items': items[offset:offset + limit],
        'current_page': offset // limit + 1,
        'total_pages': math.ceil(total / limit),
        'error': None,
    }

def filter_by_frequency(frequencies, total_pages, threshold):
    """Lemmas sorted rarest first, minus those on more than threshold% of pages."""
    rv = []
    for lemma, frequency in sorted(frequencies.items(), key=lambda x: (x[1], x[0])):
        percentage = 100.0 * frequency / total_pages
        if percentage > threshold:
            print('search: lemma {!r} is on {:.2f}% of pages, over the {}% threshold; ignoring it'.format(lemma, percentage, threshold))
            continue

        rv.append(lemma)

    return rv

def candidate_pages(conn, lemmas, site_id=None):
    """Pages that have an index row for every lemma, starting from the rarest."""
    pages = None

    for lemma in lemmas:
        lemma_pages = store.page_ids_for_lemma(conn, lemma, site_id)
        pages = lemma_pages if pages is None else pages & lemma_pages

        if not pages:
            return set()

    return pages or set()

def rank_pages(conn, page_ids, lemmas):
    """[(page_id, relative relevance)], most relevant first; ties by page id."""
    absolute = store.page_ranks(conn, page_ids, lemmas)

    if not absolute:
        return []

    max_relevance = max(absolute.values())
    ranked = sorted(absolute.items(), key=lambda x: x[0])
    ranked.sort(key=lambda x: x[1], reverse=True)

    return [(page_id, relevance / max_relevance) for page_id, relevance in ranked]

class SearchEngine:
    def __init__(self, lemmatizer, config=None, snippet_cache=None):
        config = config or {}
        self.lemmatizer = lemmatizer
        self.frequency_threshold = config.get('frequency-threshold', DEFAULT_FREQUENCY_THRESHOLD)
        self.page_size = config.get('page-size', DEFAULT_PAGE_SIZE)
        self.snippet_length = config.get('snippet-length', DEFAULT_BUDGET)
        self.snippet_cache = snippet_cache if snippet_cache is not None else SnippetCache()

    def snippet(self, content, query_lemmas):
        return self.snippet_cache.get(
            content,
            query_lemmas,
            lambda: generate_snippet(self.lemmatizer, content, query_lemmas, self.snippet_length)
        )

    def search(self, conn, query, site=None, offset=0, limit=None):
        start = time.time()
        try:
            return self._search(conn, query, site, offset, limit)
        except sqlite3.Error as e:
            return empty_response('search failed: {}'.format(e))
        finally:
            print('search: query={!r} site={!r} took {} ms'.format(query, site, math.ceil(1000 * (time.time() - start))))

    def _search(self, conn, query, site, offset, limit):
        if not limit or limit <= 0:
            limit = self.page_size

        query_lemmas = self.lemmatizer.unique_lemmas(query or '')
        if not query_lemmas:
            return empty_response('No valid lemmas found in query')

        site_id = None
        if site:
            site_row = store.find_site_by_url(conn, normalize_site_url(site))
            if not site_row:
                return empty_response('Site not found: {}'.format(site))
            site_id = site_row['id']

        total_pages = store.count_pages(conn, site_id)
        if not total_pages:
            return empty_response('No pages have been indexed')

        frequencies = store.lemma_frequencies(conn, query_lemmas, site_id)
        missing = query_lemmas - set(frequencies)
        if missing:
            return empty_response('No pages found containing: {}'.format(', '.join(sorted(missing))))

        lemmas = filter_by_frequency(frequencies, total_pages, self.frequency_threshold)
        if not lemmas:
            return empty_response('All query words are too common to search for')

        pages = candidate_pages(conn, lemmas, site_id)
        if not pages:
            return empty_response('No pages found')

        if site_id is not None:
            site_ids = store.site_ids_for_pages(conn, pages)
            pages = set(page_id for page_id in pages if site_ids.get(page_id) == site_id)

        items = []
        seen_snippets = set()
        sites = {}

        for page_id, relevance in rank_pages(conn, pages, lemmas):
            page = store.find_page_by_id(conn, page_id)
            if not page:
                continue

            snippet = self.snippet(page['content'], query_lemmas)
            if not snippet or snippet in seen_snippets:
                continue
            seen_snippets.add(snippet)

            if page['site_id'] not in sites:
                sites[page['site_id']] = store.find_site_by_id(conn, page['site_id'])
            site_row = sites[page['site_id']]

            items.append({
                'site': site_row['url'],
                'site_name': site_row['name'],
                'uri': page['path'],
                'url': page_url(site_row['url'], page['path']),
                'title': page_title(page['content']),
                'snippet': snippet,
                'relevance': relevance,
            })

        if not items:
            return empty_response('No pages found')

        return paginate(items, offset, limit)
