from datasette_sitesearch.snippets import SnippetCache, generate_snippet, rarest_combination

def plain(snippet):
    return snippet.replace('<b>', '').replace('</b>', '').replace('...', '').strip()

def test_no_match(lemmatizer):
    assert generate_snippet(lemmatizer, '<p>the quick brown fox</p>', {'hound'}) == ''
    assert generate_snippet(lemmatizer, '', {'fox'}) == ''
    assert generate_snippet(lemmatizer, '<p>fox</p>', set()) == ''

def test_short_text(lemmatizer):
    assert generate_snippet(lemmatizer, '<p>the quick brown fox</p>', {'fox'}) == 'the quick brown <b>fox</b>'

def test_inflected_words_are_highlighted(lemmatizer):
    assert generate_snippet(lemmatizer, '<p>two cats sat</p>', {'cat'}) == 'two <b>cats</b> sat'

def test_escapes_text(lemmatizer):
    assert generate_snippet(lemmatizer, '<p>&lt;b&gt; fox &amp; hound</p>', {'fox'}) == '&lt;b&gt; <b>fox</b> &amp; hound'

def test_window_respects_budget(lemmatizer):
    html = '<p>{} fox {}</p>'.format('filler ' * 100, 'filler ' * 100)
    snippet = generate_snippet(lemmatizer, html, {'fox'}, budget=160)

    assert snippet.startswith('...')
    assert snippet.endswith('...')
    assert '<b>fox</b>' in snippet
    assert len(plain(snippet)) <= 160
    # Padded with context on both sides.
    assert plain(snippet).split().count('filler') == 22

def test_single_window_covers_nearby_matches(lemmatizer):
    html = '<p>{} cat dog {}</p>'.format('filler ' * 50, 'filler ' * 50)
    snippet = generate_snippet(lemmatizer, html, {'cat', 'dog'})

    assert '<b>cat</b> <b>dog</b>' in snippet
    assert snippet.count('...') == 2

def test_distant_matches_get_two_windows(lemmatizer):
    html = '<p>cat {}dog</p>'.format('filler ' * 100)
    snippet = generate_snippet(lemmatizer, html, {'cat', 'dog'}, budget=40)

    assert snippet == '<b>cat</b> filler filler ... filler filler <b>dog</b>'

def test_rarest_combination():
    a = frozenset(['a'])
    b = frozenset(['b'])

    assert rarest_combination({0: a, 5: a, 9: b}) == b
    # Ties go to the combination seen first.
    assert rarest_combination({3: b, 7: a}) == b

def test_snippet_cache():
    cache = SnippetCache(max_size=2)
    calls = []

    def generate():
        calls.append(1)
        return 'snippet'

    assert cache.get('<p>page</p>', {'cat'}, generate) == 'snippet'
    assert cache.get('<p>page</p>', {'cat'}, generate) == 'snippet'
    assert len(calls) == 1

    cache.get('<p>page</p>', {'dog'}, generate)
    assert len(calls) == 2
    assert len(cache) == 2

    # Over the ceiling the cache starts again from empty.
    cache.get('<p>other</p>', {'cat'}, generate)
    assert len(cache) == 1

def test_many_matches(lemmatizer):
    html = '<p>{} dog {}</p>'.format('cat filler ' * 2000, 'cat filler ' * 2000)
    snippet = generate_snippet(lemmatizer, html, {'cat', 'dog'}, budget=40)

    assert '<b>dog</b>' in snippet
    assert '<b>cat</b>' in snippet
    assert len(plain(snippet)) <= 40
