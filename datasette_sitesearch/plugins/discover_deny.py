from ..hookspecs import hookimpl
from urllib.parse import urlparse

DISCOVER_DENY_EXTENSIONS = 'discover-deny-extensions'

@hookimpl
def canonicalize_url(config, to_url):
    parsed = urlparse(to_url)

    if parsed.scheme not in ('http', 'https'):
        return False

    if parsed.fragment or to_url.endswith('#'):
        return False

    path = parsed.path.lower()
    for extension in config.get(DISCOVER_DENY_EXTENSIONS) or []:
        if path.endswith('.' + extension.lower().lstrip('.')):
            return False

@hookimpl
def config_default_value():
    return {
        # Binary, document and media files
        DISCOVER_DENY_EXTENSIONS: ['pdf', 'jpg', 'png', 'zip', 'docx', 'xlsx', 'gif', 'mp4', 'mp3', 'php', 'jpeg'],
    }
