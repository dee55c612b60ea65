"""
slangdict/indexer.py

Inverted index over term definitions:

    token -> {term key, ...}

Tokens come from parser.tokenize() (lowercased, diacritics stripped, split on
non-alphanumerics, length >= 2). The index is only an accelerator: it narrows
the candidate set before the store runs its substring check, so a lookup may
return extra keys but must never miss one.

Persisted as a pickle of token -> sorted list of keys (see utils.write_index).
"""

import logging

from slangdict.parser import tokenize
from slangdict.utils import load_index, write_index

logger = logging.getLogger(__name__)


class InvertedIndex:
    """
    Mutable token -> set-of-keys mapping kept in step with a term map.

    Invariants (maintained by every method):
      - every bucket is non-empty (empty buckets are deleted)
      - a key sits in a bucket only while some definition of that term tokenizes
        to the bucket's token
    """

    def __init__(self, index: dict[str, set[str]] | None = None):
        self.index: dict[str, set[str]] = {}
        if index:
            for token, keys in index.items():
                if keys:
                    self.index[token] = set(keys)

    # maintenance ---------------------------------------------------------

    def add_term(self, term) -> None:
        """Add term.key to the bucket of every token of every definition."""
        if term is None:
            return
        for definition in term.definitions:
            for tok in tokenize(definition):
                self.index.setdefault(tok, set()).add(term.key)

    def remove_term(self, term) -> None:
        """Symmetric to add_term(); buckets that become empty are dropped."""
        if term is None:
            return
        for definition in term.definitions:
            for tok in tokenize(definition):
                bucket = self.index.get(tok)
                if bucket is None:
                    continue
                bucket.discard(term.key)
                if not bucket:
                    del self.index[tok]

    def update_term(self, old_term, new_term) -> None:
        """Unindex the old version, index the new one. Either may be None."""
        self.remove_term(old_term)
        self.add_term(new_term)

    def rebuild(self, terms) -> None:
        """Discard everything and recompute from an iterable of Terms."""
        self.index = {}
        count = 0
        for term in terms:
            self.add_term(term)
            count += 1
        logger.debug("Index rebuilt: %d terms, %d tokens", count, len(self.index))

    def clear(self) -> None:
        self.index = {}

    # lookup --------------------------------------------------------------

    def bucket(self, token: str) -> set[str]:
        """Copy of the keys indexed under `token` (empty set if none)."""
        return set(self.index.get(token, ()))

    def tokens(self):
        return self.index.keys()

    def intersect_candidates(self, tokens) -> set[str]:
        """
        Keys whose definitions contain every token.

        Empty `tokens` -> empty set. A missing bucket short-circuits to an empty
        set. Intersection starts from the smallest bucket, so the cost is bounded
        by that bucket rather than by the dictionary size.
        """
        return self._intersect([self.index.get(t) for t in tokens])

    def lookup_fragment(self, fragment) -> set[str]:
        """
        Keys that may contain `fragment` (a parser.Fragment).

        Closed on both sides -> exact bucket. Open on the left -> any token
        ending with it; open on the right -> any token starting with it; open on
        both -> any token containing it. Open fragments scan the vocabulary,
        which is still far smaller than scanning every definition.
        """
        tok, open_left, open_right = fragment
        if not open_left and not open_right:
            return set(self.index.get(tok, ()))

        if open_left and open_right:
            match = lambda t: tok in t
        elif open_left:
            match = lambda t: t.endswith(tok)
        else:
            match = lambda t: t.startswith(tok)

        out = set()
        for t, keys in self.index.items():
            if match(t):
                out |= keys
        return out

    def intersect_fragments(self, fragments) -> set[str]:
        """
        Same as intersect_candidates(), but each query token is looked up with
        lookup_fragment() so partial words at the query edges still match.
        """
        buckets = []
        for frag in fragments:
            b = self.lookup_fragment(frag)
            if not b:
                return set()
            buckets.append(b)
        return self._intersect(buckets)

    @staticmethod
    def _intersect(buckets) -> set[str]:
        if not buckets:
            return set()
        if any(not b for b in buckets):
            return set()
        ordered = sorted(buckets, key=len)
        result = set(ordered[0])
        for b in ordered[1:]:
            result &= b
            if not result:
                break
        return result

    # diagnostics ---------------------------------------------------------

    def problems(self, terms: dict) -> list[str]:
        """
        Describe every way this index disagrees with `terms` (key -> Term).
        An empty list means the index is exactly what rebuild(terms) would produce.
        """
        out = []
        expected = InvertedIndex()
        expected.rebuild(terms.values())
        for tok, keys in self.index.items():
            if not keys:
                out.append(f"empty bucket {tok!r}")
                continue
            extra = keys - expected.index.get(tok, set())
            for k in sorted(extra):
                if k not in terms:
                    out.append(f"{tok!r} -> unknown key {k!r}")
                else:
                    out.append(f"{tok!r} -> {k!r} has no definition with that token")
        for tok, keys in expected.index.items():
            missing = keys - self.index.get(tok, set())
            for k in sorted(missing):
                out.append(f"{tok!r} missing key {k!r}")
        return out

    def is_consistent_with(self, terms: dict) -> bool:
        return not self.problems(terms)

    # persistence ---------------------------------------------------------

    def to_mapping(self) -> dict[str, list[str]]:
        """Set -> sorted list projection used for persistence."""
        return {tok: sorted(keys) for tok, keys in self.index.items()}

    @classmethod
    def from_mapping(cls, mapping) -> "InvertedIndex":
        return cls({tok: set(keys) for tok, keys in mapping.items()})

    def save(self, path: str) -> None:
        write_index(self.index, path)

    @classmethod
    def load(cls, path: str):
        """
        Load a persisted index. Returns None if there is no file yet; that is the
        caller's cue to rebuild from the term map and save.
        """
        data = load_index(path)
        if data is None:
            return None
        return cls(data)

    def __len__(self):
        return len(self.index)

    def __contains__(self, token):
        return token in self.index

    def __eq__(self, other):
        if not isinstance(other, InvertedIndex):
            return NotImplemented
        return self.index == other.index
