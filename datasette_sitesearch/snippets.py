"""Short excerpts of a page around the query words it contains.

Every word of the page text is tagged with the set of query lemmas it
matches (its "combination"). The excerpt is anchored on the combination
that occurs least often, grown outwards until it covers as many different
combinations as fit in the character budget, then padded with context.
"""
import bisect
import hashlib
import threading
from markupsafe import Markup, escape
from .lemmatizer import clean_to_text

DEFAULT_BUDGET = 160
ELLIPSIS = '...'

def find_matches(lemmatizer, words, query_lemmas):
    """{word position: frozenset of query lemmas matched at that position}"""
    rv = {}
    for i, word in enumerate(words):
        matched = lemmatizer.lemmas_of(word) & query_lemmas
        if matched:
            rv[i] = frozenset(matched)

    return rv

def rarest_combination(matches):
    counts = {}
    first_seen = {}
    for position in sorted(matches):
        combination = matches[position]
        counts[combination] = counts.get(combination, 0) + 1
        first_seen.setdefault(combination, position)

    return min(counts, key=lambda c: (counts[c], first_seen[c]))

def _grow(words, matches, start, end, length, budget, wanted=None):
    """Widen [start, end] one word at a time, left then right.

    Stops when neither side fits in the budget, or once `wanted`
    combinations are covered.
    """
    seen = set(matches[i] for i in range(start, end + 1) if i in matches)

    while wanted is None or len(seen) < wanted:
        grew = False

        if start > 0 and length + 1 + len(words[start - 1]) <= budget:
            start -= 1
            length += 1 + len(words[start])
            grew = True
            if start in matches:
                seen.add(matches[start])

        if wanted is not None and len(seen) >= wanted:
            break

        if end < len(words) - 1 and length + 1 + len(words[end + 1]) <= budget:
            end += 1
            length += 1 + len(words[end])
            grew = True
            if end in matches:
                seen.add(matches[end])

        if not grew:
            break

    return start, end, length, len(seen)

def _window(words, matches, center, budget):
    start, end, length, _ = _grow(words, matches, center, center, len(words[center]), budget)
    return start, end

def select_windows(words, matches, budget):
    combinations = set(matches.values())
    rarest = rarest_combination(matches)
    anchors = [i for i in sorted(matches) if matches[i] == rarest]

    best = None
    for anchor in anchors:
        start, end, length, covered = _grow(words, matches, anchor, anchor, len(words[anchor]), budget, wanted=len(combinations))
        key = (-covered, length, start)
        if best is None or key < best[0]:
            best = (key, start, end, length, covered)

    _, start, end, length, covered = best

    if covered == 1 and len(combinations) > 1:
        # The rarest evidence is too far from anything else to share a
        # window; show it next to the nearest other match instead.
        others = [i for i in sorted(matches) if matches[i] != rarest]
        pairs = []
        for anchor in anchors:
            j = bisect.bisect_left(others, anchor)
            for position in others[max(0, j - 1):j + 1]:
                pairs.append((abs(position - anchor), min(position, anchor), max(position, anchor)))

        _, left, right = min(pairs)
        half = max(1, budget // 2)
        first = _window(words, matches, left, half)
        second = _window(words, matches, right, half)

        if first[1] + 1 >= second[0]:
            return [(first[0], max(first[1], second[1]))]

        return [first, second]

    start, end, _, _ = _grow(words, matches, start, end, length, budget)
    return [(start, end)]

def render(words, matches, windows):
    out = []
    previous_end = -1

    for start, end in windows:
        if start > previous_end + 1:
            out.append(ELLIPSIS)

        for i in range(start, end + 1):
            if i in matches:
                out.append(str(Markup('<b>{}</b>').format(words[i])))
            else:
                out.append(str(escape(words[i])))

        previous_end = end

    if previous_end < len(words) - 1:
        out.append(ELLIPSIS)

    return ' '.join(out)

def generate_snippet(lemmatizer, html, query_lemmas, budget=DEFAULT_BUDGET):
    """HTML excerpt of the page with matched words in <b>; '' if nothing matches."""
    query_lemmas = frozenset(query_lemmas)
    words = clean_to_text(html).split()

    if not words or not query_lemmas:
        return ''

    matches = find_matches(lemmatizer, words, query_lemmas)

    if not matches:
        return ''

    return render(words, matches, select_windows(words, matches, budget))

class SnippetCache:
    def __init__(self, max_size=500):
        self.max_size = max_size
        self._entries = {}
        self._lock = threading.Lock()

    def key(self, content, query_lemmas):
        return (hashlib.sha1(content.encode('utf-8')).hexdigest(), frozenset(query_lemmas))

    def get(self, content, query_lemmas, generate):
        key = self.key(content, query_lemmas)

        with self._lock:
            if key in self._entries:
                return self._entries[key]

        snippet = generate()

        with self._lock:
            # Snippets are cheap to rebuild, so eviction is all-or-nothing.
            if len(self._entries) >= self.max_size:
                self._entries.clear()
            self._entries[key] = snippet

        return snippet

    def __len__(self):
        return len(self._entries)
