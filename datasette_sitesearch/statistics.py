from . import store

def statistics(conn, indexing=False):
    sites = store.all_sites(conn)

    detailed = []
    for site in sites:
        detailed.append({
            'url': site['url'],
            'name': site['name'],
            'status': site['status'],
            'status_time': site['status_time'],
            'error': site['last_error'],
            'pages': store.count_pages(conn, site['id']),
            'lemmas': store.count_lemmas(conn, site['id']),
        })

    return {
        'result': True,
        'statistics': {
            'total': {
                'sites': len(sites),
                'pages': store.count_pages(conn),
                'lemmas': store.count_lemmas(conn),
                'indexing': indexing,
            },
            'detailed': detailed,
        }
    }
