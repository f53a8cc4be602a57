import asyncio
import threading
from datasette import Response
from .config import enabled_databases, get_config
from .errors import SiteSearchError
from .service import IndexingService

INDEXING_ALREADY_RUNNING = 'Indexing is already running'
INDEXING_NOT_RUNNING = 'Indexing is not running'
PAGE_OUTSIDE_CONFIGURED_SITES = 'This page is outside the sites listed in the configuration'
EMPTY_QUERY = 'Query must not be empty'
PAGE_UNAVAILABLE = 'Page unavailable: it could not be fetched or indexed'

_services = {}
_services_lock = threading.Lock()

def get_service(datasette, db_name):
    with _services_lock:
        service = _services.get(db_name)

        if service is None:
            db = datasette.databases[db_name]
            service = IndexingService(db.path, get_config(datasette, db_name))
            _services[db_name] = service

    return service

def failure(message, status=400):
    return Response.json({'result': False, 'error': message}, status=status)

def int_arg(request, name, default):
    value = request.args.get(name)
    if value is None or not value.strip():
        return default

    return int(value)

async def sitesearch_statistics(datasette, request):
    if request.method != 'GET':
        return Response('Unexpected method', status=405)

    db_name = request.url_vars['db']
    service = get_service(datasette, db_name)

    rv = await datasette.databases[db_name].execute_fn(lambda conn: service.statistics(conn))
    return Response.json(rv)

async def sitesearch_start_indexing(datasette, request):
    if request.method != 'GET':
        return Response('Unexpected method', status=405)

    if not get_service(datasette, request.url_vars['db']).start_indexing():
        return failure(INDEXING_ALREADY_RUNNING)

    return Response.json({'result': True})

async def sitesearch_stop_indexing(datasette, request):
    if request.method != 'GET':
        return Response('Unexpected method', status=405)

    if not get_service(datasette, request.url_vars['db']).stop_indexing():
        return failure(INDEXING_NOT_RUNNING)

    return Response.json({'result': True})

async def sitesearch_index_page(datasette, request):
    if request.method != 'POST':
        return Response('Unexpected method', status=405)

    form = await request.post_vars()
    url = form.get('url') or ''
    if not url.strip():
        return failure(PAGE_OUTSIDE_CONFIGURED_SITES)

    service = get_service(datasette, request.url_vars['db'])
    if service.find_site_for_url(url.strip()) is None:
        return failure(PAGE_OUTSIDE_CONFIGURED_SITES)

    try:
        indexed = await asyncio.get_running_loop().run_in_executor(None, service.index_single_page, url)
    except SiteSearchError as e:
        return failure(str(e))

    if not indexed:
        return failure(PAGE_UNAVAILABLE)

    return Response.json({'result': True})

async def sitesearch_search(datasette, request):
    if request.method != 'GET':
        return Response('Unexpected method', status=405)

    query = request.args.get('query') or ''
    if not query.strip():
        return failure(EMPTY_QUERY)

    try:
        offset = int_arg(request, 'offset', 0)
        limit = int_arg(request, 'limit', None)
    except ValueError:
        return failure('offset and limit must be integers')

    site = request.args.get('site') or None

    db_name = request.url_vars['db']
    service = get_service(datasette, db_name)

    rv = await datasette.databases[db_name].execute_fn(
        lambda conn: service.search(query, site=site, offset=offset, limit=limit, conn=conn)
    )
    return Response.json(rv)

def get_routes(datasette):
    routes = []

    for db in enabled_databases(datasette):
        routes.append((r"^/(?P<db>{})/-/sitesearch/api/statistics$".format(db), sitesearch_statistics))
        routes.append((r"^/(?P<db>{})/-/sitesearch/api/startIndexing$".format(db), sitesearch_start_indexing))
        routes.append((r"^/(?P<db>{})/-/sitesearch/api/stopIndexing$".format(db), sitesearch_stop_indexing))
        routes.append((r"^/(?P<db>{})/-/sitesearch/api/indexPage$".format(db), sitesearch_index_page))
        routes.append((r"^/(?P<db>{})/-/sitesearch/api/search$".format(db), sitesearch_search))

    return routes
