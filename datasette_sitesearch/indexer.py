"""Maintains the lemma index for pages.

Every public function here runs as one write transaction per page: either
the page, its index rows and the lemma frequencies all change together, or
nothing changes.
"""
import sqlite3
from . import store
from .errors import IndexingError

def _reverse_index(conn, page):
    for (index_id, lemma_id, rank) in store.index_rows_for_page(conn, page['id']):
        store.delete_index_row(conn, index_id)
        store.decrement_lemma(conn, lemma_id)

    store.delete_page_row(conn, page['id'])

def _index(conn, site_id, path, code, html, lemma_counts):
    existing = store.find_page(conn, site_id, path)
    if existing:
        _reverse_index(conn, existing)

    page_id = store.insert_page(conn, site_id, path, code, html)

    for lemma, count in lemma_counts.items():
        lemma_id = store.ensure_lemma(conn, site_id, lemma)

        # frequency counts pages, so it only moves when the page gains a new index row.
        if store.insert_index(conn, page_id, lemma_id, count):
            store.increment_lemma(conn, lemma_id)

    return page_id

def index_page(conn, lemmatizer, site_id, path, code, html):
    """(Re-)index a page. Returns the new page id."""
    # Lemmatize before taking the write lock.
    lemma_counts = lemmatizer.count_lemmas(lemmatizer.clean_to_text(html))

    try:
        with conn:
            conn.execute('BEGIN IMMEDIATE TRANSACTION')
            return _index(conn, site_id, path, code, html, lemma_counts)
    except sqlite3.Error as e:
        raise IndexingError('failed to index {}: {}'.format(path, e)) from e

def delete_page(conn, site_id, path):
    """Remove a page and its contribution to the lemma index. Returns False if there was no such page."""
    try:
        with conn:
            conn.execute('BEGIN IMMEDIATE TRANSACTION')
            page = store.find_page(conn, site_id, path)

            if not page:
                return False

            _reverse_index(conn, page)
            return True
    except sqlite3.Error as e:
        raise IndexingError('failed to delete {}: {}'.format(path, e)) from e
