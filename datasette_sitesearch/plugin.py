import importlib
import pluggy
import sys
from . import hookspecs

DEFAULT_PLUGINS = (
    "datasette_sitesearch.plugins.fetch_url",
    "datasette_sitesearch.plugins.crawl_identity",
    "datasette_sitesearch.plugins.discover_html_links",
    "datasette_sitesearch.plugins.discover_same_domain",
    "datasette_sitesearch.plugins.discover_deny",
    "datasette_sitesearch.plugins.max_depth",
    "datasette_sitesearch.plugins.seed_sites",
    "datasette_sitesearch.plugins.morphology_ru",
    "datasette_sitesearch.plugins.defaults",
)

def make_plugin_manager(load_entrypoints=True):
    pm = pluggy.PluginManager("datasette_sitesearch")
    pm.add_hookspecs(hookspecs)

    if load_entrypoints:
        pm.load_setuptools_entrypoints("datasette_sitesearch")

    # Load default plugins
    for plugin in DEFAULT_PLUGINS:
        mod = importlib.import_module(plugin)
        pm.register(mod, plugin)

    return pm

# Only load third-party plugins if not running tests
pm = make_plugin_manager(load_entrypoints=not hasattr(sys, "_called_from_test"))
