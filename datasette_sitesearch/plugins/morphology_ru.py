from ..hookspecs import hookimpl
import threading

ALPHABET = 'alphabet'

# Conjunctions, interjections, prepositions, particles and pronouns
EXCLUDED_POS = frozenset(['CONJ', 'INTJ', 'PREP', 'PRCL', 'NPRO'])

_analyzer = None
_lock = threading.Lock()

def get_analyzer():
    global _analyzer

    # Loading the dictionaries takes a while; only pay for it when lemmas are needed.
    with _lock:
        if _analyzer is None:
            import pymorphy3
            _analyzer = pymorphy3.MorphAnalyzer()

    return _analyzer

@hookimpl(trylast=True)
def lemma_forms(word):
    parses = get_analyzer().parse(word)

    if not parses:
        return []

    for p in parses:
        if p.tag.POS in EXCLUDED_POS:
            return []

    rv = []
    for p in parses:
        if p.normal_form not in rv:
            rv.append(p.normal_form)

    return rv

@hookimpl
def config_default_value():
    return {ALPHABET: 'а-яё'}
