from ..hookspecs import hookimpl
from ..errors import FetchError
from datetime import datetime
import httpx

timeout = httpx.Timeout(5.0, read=20.0)
client = httpx.Client(timeout=timeout, follow_redirects=True)

HTML_CONTENT_TYPES = ('text/html', 'application/xhtml+xml')

def classify(url, e):
    if isinstance(e, httpx.TimeoutException):
        return FetchError('timeout', url, message=str(e))

    if isinstance(e, httpx.ConnectError):
        message = str(e)
        lowered = message.lower()
        if 'name or service not known' in lowered or 'nodename nor servname' in lowered or 'name resolution' in lowered or 'getaddrinfo' in lowered:
            return FetchError('dns', url, message=message)

        return FetchError('connection-refused', url, message=message)

    return FetchError('network', url, message=repr(e))

@hookimpl(trylast=True)
def fetch_url(url, request_headers):
    fetched_at = datetime.utcnow().isoformat(sep=' ')
    try:
        response = client.get(url, headers=request_headers)
    except httpx.HTTPError as e:
        return classify(url, e)

    if response.status_code < 200 or response.status_code > 299:
        return FetchError('http', url, status_code=response.status_code)

    content_type = response.headers.get('content-type', 'text/html').split(';')[0].strip().lower()
    if content_type not in HTML_CONTENT_TYPES:
        return FetchError('content-type', url, message=content_type)

    headers = []
    for k, v in response.headers.items():
        headers.append([k, v])

    return {
        'fetched_at': fetched_at,
        'url': str(response.url),
        'headers': headers,
        'status_code': response.status_code,
        'text': response.text,
    }
