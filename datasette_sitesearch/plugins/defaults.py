from ..hookspecs import hookimpl
import os

TIME_BUDGET = 'time-budget'
WORKERS = 'workers'
FREQUENCY_THRESHOLD = 'frequency-threshold'
PAGE_SIZE = 'page-size'
SNIPPET_LENGTH = 'snippet-length'

@hookimpl
def config_default_value():
    return {
        # Seconds before a crawl cancels itself.
        TIME_BUDGET: 15,
        WORKERS: max(4, os.cpu_count() or 1),
        # Lemmas found on more than this percentage of pages are ignored by search.
        FREQUENCY_THRESHOLD: 75,
        PAGE_SIZE: 20,
        SNIPPET_LENGTH: 160,
    }
