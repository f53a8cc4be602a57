from ..hookspecs import hookimpl
from ..utils import registrable_domain
from urllib.parse import urlparse

@hookimpl
def canonicalize_url(site_url, to_url):
    site_domain = registrable_domain(urlparse(site_url).hostname)
    to_domain = registrable_domain(urlparse(to_url).hostname)

    # Links without a host resolve against the page they came from.
    if to_domain is None:
        return

    return site_domain == to_domain
