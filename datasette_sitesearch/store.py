from more_itertools import batched

SITE_COLUMNS = ['id', 'url', 'name', 'status', 'status_time', 'last_error']
PAGE_COLUMNS = ['id', 'site_id', 'path', 'code', 'content']

INDEXING = 'INDEXING'
INDEXED = 'INDEXED'
FAILED = 'FAILED'

BATCH_SIZE = 100

def _site(row):
    if not row:
        return None

    return dict(zip(SITE_COLUMNS, row))

def _page(row):
    if not row:
        return None

    return dict(zip(PAGE_COLUMNS, row))

def placeholders(values):
    return ','.join(['?'] * len(values))

# Sites

def find_site_by_id(conn, site_id):
    return _site(conn.execute('SELECT {} FROM dss_site WHERE id = ?'.format(', '.join(SITE_COLUMNS)), [site_id]).fetchone())

def find_site_by_url(conn, url):
    return _site(conn.execute('SELECT {} FROM dss_site WHERE url = ?'.format(', '.join(SITE_COLUMNS)), [url]).fetchone())

def all_sites(conn):
    rows = conn.execute('SELECT {} FROM dss_site ORDER BY id'.format(', '.join(SITE_COLUMNS))).fetchall()
    return [_site(row) for row in rows]

def upsert_site(conn, url, name, status):
    """Create the site, or reset name/status/last_error on an existing one. Returns the id."""
    conn.execute(
        "INSERT INTO dss_site(url, name, status) VALUES (?, ?, ?) ON CONFLICT(url) DO UPDATE SET name = excluded.name, status = excluded.status, status_time = strftime('%Y-%m-%d %H:%M:%f'), last_error = NULL",
        [url, name, status]
    )
    site_id, = conn.execute('SELECT id FROM dss_site WHERE url = ?', [url]).fetchone()
    return site_id

def update_site_status(conn, site_id, status, last_error=None):
    conn.execute(
        "UPDATE dss_site SET status = ?, status_time = strftime('%Y-%m-%d %H:%M:%f'), last_error = ? WHERE id = ?",
        [status, last_error, site_id]
    )

def touch_site(conn, site_id):
    conn.execute("UPDATE dss_site SET status_time = strftime('%Y-%m-%d %H:%M:%f') WHERE id = ?", [site_id])

def delete_site(conn, site_id):
    # Cascades to pages, lemmas and index rows.
    conn.execute('DELETE FROM dss_site WHERE id = ?', [site_id])

def delete_sites_not_in(conn, urls):
    deleted = 0
    for site in all_sites(conn):
        if site['url'] not in urls:
            delete_site(conn, site['id'])
            deleted += 1

    return deleted

# Pages

def find_page(conn, site_id, path):
    return _page(conn.execute('SELECT {} FROM dss_page WHERE site_id = ? AND path = ?'.format(', '.join(PAGE_COLUMNS)), [site_id, path]).fetchone())

def find_page_by_id(conn, page_id):
    return _page(conn.execute('SELECT {} FROM dss_page WHERE id = ?'.format(', '.join(PAGE_COLUMNS)), [page_id]).fetchone())

def insert_page(conn, site_id, path, code, content):
    cur = conn.execute('INSERT INTO dss_page(site_id, path, code, content) VALUES (?, ?, ?, ?)', [site_id, path, code, content])
    return cur.lastrowid

def delete_page_row(conn, page_id):
    conn.execute('DELETE FROM dss_page WHERE id = ?', [page_id])

def count_pages(conn, site_id=None):
    if site_id is None:
        count, = conn.execute('SELECT COUNT(*) FROM dss_page').fetchone()
    else:
        count, = conn.execute('SELECT COUNT(*) FROM dss_page WHERE site_id = ?', [site_id]).fetchone()

    return count

def page_ids_for_lemma(conn, lemma, site_id=None):
    stmt = 'SELECT dss_index.page_id FROM dss_index JOIN dss_lemma ON dss_lemma.id = dss_index.lemma_id WHERE dss_lemma.lemma = ?'
    args = [lemma]
    if site_id is not None:
        stmt += ' AND dss_lemma.site_id = ?'
        args.append(site_id)

    return set(page_id for (page_id, ) in conn.execute(stmt, args).fetchall())

def site_ids_for_pages(conn, page_ids):
    rv = {}
    for batch in batched(list(page_ids), BATCH_SIZE):
        for page_id, site_id in conn.execute('SELECT id, site_id FROM dss_page WHERE id IN ({})'.format(placeholders(batch)), batch):
            rv[page_id] = site_id

    return rv

# Lemmas

def find_lemma(conn, site_id, lemma):
    row = conn.execute('SELECT id, frequency FROM dss_lemma WHERE site_id = ? AND lemma = ?', [site_id, lemma]).fetchone()
    if not row:
        return None

    lemma_id, frequency = row
    return {'id': lemma_id, 'site_id': site_id, 'lemma': lemma, 'frequency': frequency}

def ensure_lemma(conn, site_id, lemma):
    """Returns the id of the site's lemma row, creating it with frequency 0 if absent."""
    conn.execute('INSERT INTO dss_lemma(site_id, lemma, frequency) VALUES (?, ?, 0) ON CONFLICT(site_id, lemma) DO NOTHING', [site_id, lemma])
    lemma_id, = conn.execute('SELECT id FROM dss_lemma WHERE site_id = ? AND lemma = ?', [site_id, lemma]).fetchone()
    return lemma_id

def increment_lemma(conn, lemma_id):
    conn.execute('UPDATE dss_lemma SET frequency = frequency + 1 WHERE id = ?', [lemma_id])

def decrement_lemma(conn, lemma_id):
    """Decrement the frequency, deleting the row once it reaches zero."""
    conn.execute('UPDATE dss_lemma SET frequency = frequency - 1 WHERE id = ?', [lemma_id])
    conn.execute('DELETE FROM dss_lemma WHERE id = ? AND frequency <= 0', [lemma_id])

def lemma_frequencies(conn, lemmas, site_id=None):
    """{lemma: frequency summed across sites} for the lemmas that exist."""
    lemmas = list(lemmas)
    if not lemmas:
        return {}

    stmt = 'SELECT lemma, SUM(frequency) FROM dss_lemma WHERE lemma IN ({})'.format(placeholders(lemmas))
    args = list(lemmas)
    if site_id is not None:
        stmt += ' AND site_id = ?'
        args.append(site_id)
    stmt += ' GROUP BY lemma'

    return dict(conn.execute(stmt, args).fetchall())

def count_lemmas(conn, site_id=None):
    if site_id is None:
        count, = conn.execute('SELECT COUNT(*) FROM dss_lemma').fetchone()
    else:
        count, = conn.execute('SELECT COUNT(*) FROM dss_lemma WHERE site_id = ?', [site_id]).fetchone()

    return count

def count_distinct_pages_for_lemma(conn, lemma_id):
    count, = conn.execute('SELECT COUNT(DISTINCT page_id) FROM dss_index WHERE lemma_id = ?', [lemma_id]).fetchone()
    return count

# Index rows

def insert_index(conn, page_id, lemma_id, rank):
    """Returns True if a row was inserted, False if the pair was already indexed."""
    cur = conn.execute('INSERT INTO dss_index(page_id, lemma_id, rank) VALUES (?, ?, ?) ON CONFLICT(page_id, lemma_id) DO NOTHING', [page_id, lemma_id, float(rank)])
    return cur.rowcount == 1

def index_rows_for_page(conn, page_id):
    return conn.execute('SELECT id, lemma_id, rank FROM dss_index WHERE page_id = ?', [page_id]).fetchall()

def delete_index_row(conn, index_id):
    conn.execute('DELETE FROM dss_index WHERE id = ?', [index_id])

def page_ranks(conn, page_ids, lemmas):
    """{page_id: sum of rank over the given lemmas}"""
    lemmas = list(lemmas)
    rv = {}
    for batch in batched(list(page_ids), BATCH_SIZE):
        stmt = 'SELECT dss_index.page_id, SUM(dss_index.rank) FROM dss_index JOIN dss_lemma ON dss_lemma.id = dss_index.lemma_id WHERE dss_index.page_id IN ({}) AND dss_lemma.lemma IN ({}) GROUP BY dss_index.page_id'.format(placeholders(batch), placeholders(lemmas))
        for page_id, rank in conn.execute(stmt, list(batch) + lemmas):
            rv[page_id] = rank

    return rv
