from ..hookspecs import hookimpl

MAX_DEPTH = 'max-depth'

@hookimpl
def canonicalize_url(config, to_url_depth):
    if MAX_DEPTH in config:
        max_depth = config[MAX_DEPTH]

        if to_url_depth > max_depth:
            return False

@hookimpl
def config_default_value():
    return {MAX_DEPTH: 3}
