import datasette
import glob
import os
import re
from .config import enabled_databases, ensure_schema
from .plugin import pm
from .routes import get_routes
from .utils import module_from_path

__version__ = "0.1"

@datasette.hookimpl
def startup(datasette):
    async def inner():
        dbs = enabled_databases(datasette)
        for db_name in dbs:
            await ensure_schema(datasette.databases[db_name])

        if dbs:
            # TODO: this isn't a documented surface area, so it's a bit skeezy to be using it
            if datasette.plugins_dir:
                for filepath in glob.glob(os.path.join(datasette.plugins_dir, "*.py")):
                    if not os.path.isfile(filepath):
                        continue
                    mod = module_from_path(filepath, name=os.path.basename(filepath))
                    try:
                        pm.register(mod)
                    except ValueError:
                        # Plugin already registered
                        pass

    return inner

@datasette.hookimpl
def skip_csrf(datasette, scope):
    # The JSON API is called by scripts, not by forms on our pages.
    return scope['type'] == 'http' and re.search('^/[^/]+/-/sitesearch/api/', scope['path']) is not None

@datasette.hookimpl
def register_routes(datasette):
    return get_routes(datasette)
