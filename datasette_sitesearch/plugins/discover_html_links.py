from ..hookspecs import hookimpl
from ..utils import get_html_parser
import re

DISCOVER_HTML_LINKS = 'discover-html-links'

_re = {}

def discover(response, url, options):
    # Only scan for links if url-regex is absent, or matches url
    if 'url-regex' in options:
        regex = options['url-regex']
        if regex in _re:
            compiled = _re[regex]
        else:
            compiled = re.compile(regex)
            _re[regex] = compiled

        if not compiled.search(url):
            return []

    parsed = get_html_parser(response['text'])
    attribute = options.get('attribute', 'href')

    rv = []
    for node in parsed.css(options.get('selector', 'a')):
        needle = node.attributes.get(attribute)

        if needle and needle.strip():
            rv.append(needle.strip())

    return rv

@hookimpl
def discover_urls(config, url, response):
    if not DISCOVER_HTML_LINKS in config:
        return []

    rv = []

    for source in config[DISCOVER_HTML_LINKS]:
        rv.extend(discover(response, url, source))

    return list(set(rv))

@hookimpl
def config_default_value():
    return {
        DISCOVER_HTML_LINKS: [{
            'selector': 'a',
            'attribute': 'href',
        }]
    }
