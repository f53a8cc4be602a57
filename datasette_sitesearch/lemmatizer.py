import re
import threading
from selectolax.parser import HTMLParser
from .utils import get_html_parser

DEFAULT_ALPHABET = 'а-яё'

# Word -> lemma cache; cleared whole once it grows past this.
MAX_CACHE_SIZE = 30000

STRIPPED_TAGS = ['script', 'style', 'noscript', 'template']

def clean_to_text(html):
    """Visible text of an HTML document."""
    if not html:
        return ''

    # get_html_parser caches trees per document; stripping nodes needs a
    # private copy.
    parser = HTMLParser(html)
    parser.strip_tags(STRIPPED_TAGS)

    root = parser.root
    if root is None:
        return ''

    return root.text(separator=' ')

def page_title(html):
    if not html:
        return ''

    title = get_html_parser(html).css_first('title')
    if title is None:
        return ''

    return title.text().strip()

class Lemmatizer:
    def __init__(self, hook=None, alphabet=DEFAULT_ALPHABET):
        if hook is None:
            from .plugin import pm
            hook = pm.hook

        self.hook = hook
        self.non_alphabet = re.compile('[^{}\\s]'.format(alphabet), re.IGNORECASE)
        self._cache = {}
        self._lock = threading.Lock()

    def preprocess(self, text):
        return self.non_alphabet.sub('', text).lower()

    def _forms(self, word):
        with self._lock:
            if word in self._cache:
                return self._cache[word]

        try:
            forms = frozenset(self.hook.lemma_forms(word=word) or [])
        except Exception as e:
            print('lemmatizer: skipping token {!r}: {!r}'.format(word, e))
            return frozenset()

        with self._lock:
            if len(self._cache) >= MAX_CACHE_SIZE:
                self._cache.clear()
            self._cache[word] = forms

        return forms

    def lemmas_of(self, token):
        """Lemmas of a single token; empty for function words and unrecognized tokens."""
        return self.unique_lemmas(token)

    def count_lemmas(self, text):
        rv = {}

        for word in self.preprocess(text).split():
            for lemma in self._forms(word):
                rv[lemma] = rv.get(lemma, 0) + 1

        return rv

    def unique_lemmas(self, text):
        rv = set()

        for word in self.preprocess(text).split():
            rv.update(self._forms(word))

        return rv

    clean_to_text = staticmethod(clean_to_text)
