from pluggy import HookimplMarker
from pluggy import HookspecMarker

hookspec = HookspecMarker("datasette_sitesearch")
hookimpl = HookimplMarker("datasette_sitesearch")

@hookspec
def config_default_value():
    """Returns a dict of config keys and their default values."""

@hookspec
def get_seed_sites(config):
    """Get list of {'url': ..., 'name': ...} sites to crawl."""

@hookspec(firstresult=True)
def before_fetch_url(config, url, depth, request_headers):
    """Reject a URL, or modify its request headers."""

@hookspec(firstresult=True)
def fetch_url(url, request_headers):
    """Fetch a URL live from an origin server. Returns a response dict or a FetchError."""

@hookspec()
def discover_urls(config, url, response):
    """Discover new URLs to crawl."""

@hookspec()
def canonicalize_url(config, site_url, from_url, to_url, to_url_depth):
    """Canonicalize a discovered URL, possibly rejecting it."""

@hookspec(firstresult=True)
def lemma_forms(word):
    """Returns the lemmas of a lowercase word; an empty list for function words."""
