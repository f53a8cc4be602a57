from datasette_sitesearch.plugins.discover_html_links import config_default_value, discover_urls

PAGE = '<html><body><a href="/a">a</a><a href=" /b ">b</a><a>no href</a><link rel="next" href="/page/2"></body></html>'

def test_discover_html_links():
    response = {'text': PAGE}

    assert discover_urls({}, 'https://example.com/', response) == []
    assert sorted(discover_urls(config_default_value(), 'https://example.com/', response)) == ['/a', '/b']

    config = {'discover-html-links': [{'selector': 'link[rel=next]'}]}
    assert discover_urls(config, 'https://example.com/', response) == ['/page/2']

def test_url_regex():
    response = {'text': PAGE}
    config = {
        'discover-html-links': [
            {'selector': 'a'},
            {'selector': 'link[rel=next]', 'url-regex': '/news/'},
        ]
    }

    assert sorted(discover_urls(config, 'https://example.com/', response)) == ['/a', '/b']
    assert sorted(discover_urls(config, 'https://example.com/news/', response)) == ['/a', '/b', '/page/2']
