from ..hookspecs import hookimpl

USER_AGENT = 'user-agent'
REFERRER = 'referrer'

@hookimpl
def before_fetch_url(config, request_headers):
    if config.get(USER_AGENT):
        request_headers['User-Agent'] = config[USER_AGENT]

    if config.get(REFERRER):
        request_headers['Referer'] = config[REFERRER]

@hookimpl
def config_default_value():
    from .. import __version__
    return {
        USER_AGENT: 'datasette-sitesearch/{}'.format(__version__),
        REFERRER: 'https://www.google.com',
    }
