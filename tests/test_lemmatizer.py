from datasette_sitesearch.hookspecs import hookimpl
from datasette_sitesearch.lemmatizer import Lemmatizer, clean_to_text, page_title
from datasette_sitesearch.plugin import make_plugin_manager

def test_clean_to_text():
    html = '<html><head><title>T</title><style>p { color: red }</style></head><body><script>var x = 1;</script><p>Hello <b>world</b></p><noscript>enable js</noscript></body></html>'
    text = clean_to_text(html)

    assert text.split() == ['T', 'Hello', 'world']
    assert clean_to_text('') == ''

def test_page_title():
    assert page_title('<html><head><title> Cats &amp; dogs </title></head></html>') == 'Cats & dogs'
    assert page_title('<p>no title</p>') == ''

def test_count_lemmas(lemmatizer):
    counts = lemmatizer.count_lemmas('The cats and the dog; cat, CAT! 42 dogs')

    assert counts == {'cat': 3, 'dog': 2}

def test_unique_lemmas(lemmatizer):
    assert lemmatizer.unique_lemmas('Cats in the hats') == {'cat', 'hat'}
    assert lemmatizer.unique_lemmas('and the of') == set()
    assert lemmatizer.unique_lemmas('') == set()

def test_lemmas_of(lemmatizer):
    assert lemmatizer.lemmas_of('Dogs') == {'dog'}
    assert lemmatizer.lemmas_of('the') == set()
    assert lemmatizer.lemmas_of('1999') == set()

class Broken:
    @hookimpl(tryfirst=True)
    def lemma_forms(self, word):
        if word == 'boom':
            raise ValueError('no analysis')

        return [word]

def test_failing_token_is_skipped():
    pm = make_plugin_manager(load_entrypoints=False)
    pm.register(Broken())
    lemmatizer = Lemmatizer(pm.hook, alphabet='a-z')

    assert lemmatizer.count_lemmas('fine boom fine') == {'fine': 2}

def test_russian_morphology():
    pm = make_plugin_manager(load_entrypoints=False)
    lemmatizer = Lemmatizer(pm.hook)

    assert lemmatizer.lemmas_of('леопарда') == {'леопард'}
    assert lemmatizer.lemmas_of('и') == set()
    assert lemmatizer.lemmas_of('leopard') == set()

    counts = lemmatizer.count_lemmas('Повторное появление леопарда в Осетии позволяет предположить, что леопард постоянно обитает в некоторых районах Северного Кавказа.')
    assert counts['леопард'] == 2
    assert 'в' not in counts
    assert 'что' not in counts
