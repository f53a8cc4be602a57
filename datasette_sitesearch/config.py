from .schema import current_schema_version, schema
from .errors import SiteSearchError

_plugin_name = 'datasette-sitesearch'

_enabled_databases = None

def enabled_databases(datasette, empty_if_not_initialized=False):
    global _enabled_databases

    if not _enabled_databases is None:
        return _enabled_databases

    if empty_if_not_initialized:
        return []

    rv = []

    for db_name in datasette.databases:
        local_config = datasette.plugin_config(_plugin_name, db_name)

        if local_config is None:
            continue

        rv.append(db_name)

    _enabled_databases = rv
    return _enabled_databases

def default_config(hook=None):
    if hook is None:
        from .plugin import pm
        hook = pm.hook

    rv = {}
    for defaults in hook.config_default_value():
        if defaults:
            rv.update(defaults)

    return rv

def get_config(datasette, db_name, hook=None):
    """Plugin defaults, overridden by the database-level plugin configuration."""
    config = default_config(hook)
    config.update(datasette.plugin_config(_plugin_name, db_name) or {})
    return config

def ensure_wal_mode(conn):
    old_level = conn.isolation_level
    try:
        conn.isolation_level = None
        mode, = conn.execute('PRAGMA journal_mode=WAL').fetchone()
        if mode != 'wal':
            raise SiteSearchError('unable to set PRAGMA journal_mode=WAL on connection, got {}'.format(mode))
    finally:
        conn.isolation_level = old_level

def install_schema(conn, name=''):
    ensure_wal_mode(conn)

    v, = conn.execute('PRAGMA user_version').fetchone()

    if not v:
        print('Installing datasette-sitesearch schema into db {}'.format(name))
        conn.executescript(schema)
    elif v != current_schema_version:
        raise SiteSearchError('unsupported schema version in db {}: {} -- you may need to give datasette-sitesearch its own database'.format(name, v))

async def get_db_version(db):
    results = await db.execute('pragma user_version')
    for row in results:
        return row['user_version']

async def ensure_schema(db):
    def ensure_schema_internal(conn):
        install_schema(conn, db.name)

    await db.execute_write_fn(ensure_schema_internal, block=True)
    version = await get_db_version(db)

    if version != current_schema_version:
        raise SiteSearchError('unable to ensure schema in database {} (version={}; desired={}); please check that the database is mutable and not the _memory database'.format(db.name, version, current_schema_version))
