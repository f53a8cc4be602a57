class SiteSearchError(Exception):
    pass

class FetchError(SiteSearchError):
    """A page could not be fetched.

    kind is one of: timeout, dns, connection-refused, network, http,
    content-type, rejected
    """

    def __init__(self, kind, url, status_code=None, message=None):
        self.kind = kind
        self.url = url
        self.status_code = status_code

        if message is None:
            message = kind if status_code is None else '{} {}'.format(kind, status_code)

        super().__init__('{}: {}'.format(url, message))

class IndexingError(SiteSearchError):
    pass
