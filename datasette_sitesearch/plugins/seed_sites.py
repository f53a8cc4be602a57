from ..hookspecs import hookimpl

SITES = 'sites'

@hookimpl
def get_seed_sites(config):
    if not SITES in config:
        return []

    rv = []
    for site in config[SITES]:
        if isinstance(site, str):
            site = {'url': site}

        if not site.get('url'):
            continue

        rv.append({'url': site['url'], 'name': site.get('name') or site['url']})

    return rv

@hookimpl
def config_default_value():
    return {SITES: []}
