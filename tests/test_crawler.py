from datasette_sitesearch import store
from datasette_sitesearch.crawler import CrawlSession, STOPPED_BY_USER, discover_urls, fetch_page
from datasette_sitesearch.errors import FetchError
from datasette_sitesearch.service import prepare_sites
from conftest import html

SITE = 'https://example.com'

def add_site(web):
    web.add(SITE, html('Home', 'welcome cats', ['/a', '/b', 'https://other.com/x', '/c.pdf', '/a#comments', 'mailto:me@example.com', 'https://blog.example.com/post']))
    web.add(SITE + '/a', html('A', 'cats and dogs', ['/', '/b', '/a/deep']))
    web.add(SITE + '/b', html('B', 'dogs bark', ['/a', '/b/']))
    web.add(SITE + '/a/deep', html('Deep', 'deep cats', ['/a/deeper']))
    web.add(SITE + '/a/deeper', html('Deeper', 'deeper cats', ['/a/deepest']))
    web.add(SITE + '/a/deepest', html('Deepest', 'deepest cats'))
    web.add('https://blog.example.com/post', html('Post', 'blog cats'))
    web.add('https://other.com/x', html('Other', 'other cats'))

def crawl(conn, db_path, lemmatizer, config, hook, cancel=None):
    sites = prepare_sites(conn, [{'url': SITE, 'name': 'Example'}])
    session = CrawlSession(db_path, lemmatizer, config, hook)

    if cancel is not None:
        session.cancel(manual=cancel)

    session.run(sites)
    return store.find_site_by_url(conn, SITE)

def paths(conn):
    return sorted(path for (path, ) in conn.execute('SELECT path FROM dss_page').fetchall())

def test_crawl(conn, db_path, web, lemmatizer, config, hook):
    add_site(web)
    config['max-depth'] = 2

    site = crawl(conn, db_path, lemmatizer, config, hook)

    assert site['status'] == store.INDEXED
    assert site['last_error'] is None

    assert paths(conn) == ['/', '/a', '/a/deep', '/b', 'https://blog.example.com/post']

    # Every page is fetched once, and nothing outside the domain is fetched.
    fetched = [u.rstrip('/') for u in web.fetched]
    assert sorted(fetched) == sorted(set(fetched))
    assert 'https://other.com/x' not in fetched
    assert SITE + '/c.pdf' not in fetched
    assert SITE + '/a/deeper' not in fetched

def test_crawl_depth(conn, db_path, web, lemmatizer, config, hook):
    add_site(web)

    config['max-depth'] = 0
    crawl(conn, db_path, lemmatizer, config, hook)
    assert paths(conn) == ['/']

    config['max-depth'] = 3
    crawl(conn, db_path, lemmatizer, config, hook)
    assert '/a/deeper' in paths(conn)
    assert '/a/deepest' not in paths(conn)

def test_fetch_failure_abandons_branch(conn, db_path, web, lemmatizer, config, hook):
    add_site(web)
    web.add(SITE + '/a', 500)

    site = crawl(conn, db_path, lemmatizer, config, hook)

    assert site['status'] == store.INDEXED
    assert '/a' not in paths(conn)
    assert '/a/deep' not in paths(conn)
    assert '/b' in paths(conn)

def test_root_failure_fails_site(conn, db_path, web, lemmatizer, config, hook):
    site = crawl(conn, db_path, lemmatizer, config, hook)

    assert site['status'] == store.FAILED
    assert '404' in site['last_error']
    assert paths(conn) == []

def test_manual_stop(conn, db_path, web, lemmatizer, config, hook):
    add_site(web)

    site = crawl(conn, db_path, lemmatizer, config, hook, cancel=True)

    assert site['status'] == store.FAILED
    assert site['last_error'] == STOPPED_BY_USER
    assert web.fetched == []

def test_time_budget_expiry(conn, db_path, web, lemmatizer, config, hook):
    add_site(web)

    site = crawl(conn, db_path, lemmatizer, config, hook, cancel=False)

    assert site['status'] == store.INDEXED
    assert web.fetched == []

def test_visited_set_is_per_session(conn, db_path, web, lemmatizer, config, hook):
    add_site(web)
    config['max-depth'] = 1

    crawl(conn, db_path, lemmatizer, config, hook)
    first = len(web.fetched)
    crawl(conn, db_path, lemmatizer, config, hook)

    assert len(web.fetched) == 2 * first

def test_request_identity(web, config, hook):
    web.add(SITE, html('Home', 'cats'))

    response = fetch_page(hook, config, SITE, 0)

    assert response['status_code'] == 200
    assert web.request_headers[0]['User-Agent'].startswith('datasette-sitesearch/')
    assert web.request_headers[0]['Referer'] == 'https://www.google.com'

def test_fetch_page_failure(web, config, hook):
    response = fetch_page(hook, config, SITE + '/missing', 0)

    assert isinstance(response, FetchError)
    assert response.kind == 'http'
    assert response.status_code == 404

def test_discover_urls(config, hook):
    response = {'text': html('Home', 'cats', ['/a/', 'b?page=2', 'https://EXAMPLE.com/c', '//other.com/', '/d.JPG', '#top'])}

    urls = discover_urls(hook, config, SITE, SITE + '/news/', 0, response)

    assert urls == {
        (SITE + '/a', 1),
        (SITE + '/news/b', 1),
        (SITE + '/c', 1),
    }
