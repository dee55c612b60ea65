"""
slangdict/lexicon.py

LexicalStore owns the term map and its definition index together:

    terms : key -> Term        (case-sensitive keys, insertion ordered)
    index : InvertedIndex      (token -> {key})
    snapshot : key -> Term     (deep copy taken by backup_original())

Every mutation of `terms` is paired with the matching index update in the same
call, so the index never disagrees with the map. Terms are copied on the way in
and on the way out; nothing outside the store can alias a stored definitions list.

The store is single-threaded by contract. Callers that share one across threads
(see dictionary.SlangDictionary) must serialize access themselves.
"""

import logging
import os
import pickle
import random

from slangdict.indexer import InvertedIndex
from slangdict.parser import normalize_for_substring_match, query_fragments, tokenize
from slangdict.term import Term

logger = logging.getLogger(__name__)


def _contains_substring(term: Term, needle: str) -> bool:
    """True if any definition, normalized, contains the normalized needle."""
    if not needle:
        return False
    return any(needle in normalize_for_substring_match(d) for d in term.definitions)


class LexicalStore:
    """
    In-memory slang dictionary with an inverted definition index.

    Typical usage:
        store = LexicalStore()
        store.add(Term("LOL", ["laugh out loud"]))
        store.backup_original()
        store.find_by_definition("laugh")   # -> [Term("LOL", [...])]
        store.reset_to_original()
    """

    def __init__(self, rng: random.Random | None = None):
        self.terms: dict[str, Term] = {}
        self.index = InvertedIndex()
        self.snapshot: dict[str, Term] | None = None
        self._rng = rng or random.Random()

    # lookup --------------------------------------------------------------

    def find_by_key(self, key: str | None) -> Term | None:
        """
        Exact key lookup, then one case-insensitive scan over the keys.
        Returns None when nothing matches.
        """
        if key is None:
            return None
        key = key.strip()
        if not key:
            return None
        term = self.terms.get(key)
        if term is None:
            lowered = key.lower()
            for k, t in self.terms.items():
                if k.lower() == lowered:
                    term = t
                    break
        return term.copy() if term is not None else None

    def find_by_definition(self, query: str | None) -> list[Term]:
        """
        Terms with at least one definition containing `query` as a substring,
        ignoring case and diacritics. Sorted by key.

        Queries with no indexable token (e.g. a single letter) scan every term.
        Otherwise the index supplies candidates, and the substring check decides.
        """
        if query is None or not query.strip():
            return []
        needle = normalize_for_substring_match(query).strip()

        if not tokenize(query):
            candidates = self.terms.keys()
        else:
            candidates = self.index.intersect_fragments(query_fragments(query))
            if not candidates:
                return []

        result = [self.terms[k] for k in candidates
                  if k in self.terms and _contains_substring(self.terms[k], needle)]
        result.sort(key=lambda t: t.key)
        return [t.copy() for t in result]

    def get_random(self) -> Term | None:
        """Uniform draw over current keys; every call draws again."""
        if not self.terms:
            return None
        key = self._rng.choice(list(self.terms))
        return self.terms[key].copy()

    def all_terms(self) -> list[Term]:
        return [t.copy() for t in self.terms.values()]

    def keys(self) -> list[str]:
        return list(self.terms)

    # mutation ------------------------------------------------------------

    def add(self, term: Term) -> None:
        """Upsert: an existing entry under the same key is unindexed and replaced."""
        term = term.copy()
        old = self.terms.get(term.key)
        self.index.update_term(old, term)
        self.terms[term.key] = term

    def edit(self, old_key: str, new_term: Term) -> bool:
        """
        Replace the term stored under `old_key` with `new_term`, stored under
        new_term.key. This is also how a key is renamed.
        Returns False (no change) if `old_key` is not present.
        """
        if old_key is None or new_term is None or old_key not in self.terms:
            return False
        old = self.terms.pop(old_key)
        self.index.remove_term(old)
        self.add(new_term)
        return True

    def delete(self, key: str | None) -> bool:
        if key is None:
            return False
        removed = self.terms.pop(key, None)
        if removed is None:
            return False
        self.index.remove_term(removed)
        return True

    def clear(self) -> None:
        self.terms.clear()
        self.index.clear()

    # snapshot / restore --------------------------------------------------

    @property
    def has_snapshot(self) -> bool:
        return self.snapshot is not None

    def backup_original(self) -> None:
        """Deep-copy the current term map into the snapshot slot (overwrites)."""
        self.snapshot = {k: t.copy() for k, t in self.terms.items()}
        logger.info("Snapshot taken: %d terms", len(self.snapshot))

    def reset_to_original(self) -> None:
        """
        Restore a fresh deep copy of the snapshot and rebuild the index from
        scratch. No-op when backup_original() was never called.
        """
        if self.snapshot is None:
            return
        self.terms = {k: t.copy() for k, t in self.snapshot.items()}
        self.index.rebuild(self.terms.values())
        logger.info("Reset to snapshot: %d terms", len(self.terms))

    # index persistence ---------------------------------------------------

    def build_index(self) -> None:
        self.index.rebuild(self.terms.values())

    def load_or_build_index(self, path: str, source_mtime: float | None = None) -> bool:
        """
        Use the persisted index at `path` if it is usable, else rebuild and save it.

        The persisted index is discarded when it is missing, unreadable, older
        than `source_mtime` (the term file it was built from), or mentions keys
        this store does not have.
        Returns True if the persisted index was used, False if it was rebuilt.
        """
        loaded = None
        try:
            loaded = InvertedIndex.load(path)
        except (OSError, pickle.UnpicklingError, EOFError, ValueError) as e:
            logger.warning("Ignoring unreadable index %s: %s", path, e)

        if loaded is not None and source_mtime is not None:
            try:
                if os.path.getmtime(path) < source_mtime:
                    logger.info("Index %s is older than the term file; rebuilding", path)
                    loaded = None
            except OSError:
                loaded = None

        if loaded is not None:
            known = self.terms.keys()
            if any(k not in known for keys in loaded.index.values() for k in keys):
                logger.info("Index %s references unknown terms; rebuilding", path)
                loaded = None

        if loaded is not None:
            self.index = loaded
            return True

        self.build_index()
        try:
            self.index.save(path)
        except OSError as e:
            logger.warning("Could not save index to %s: %s", path, e)
        return False

    # dunder --------------------------------------------------------------

    def __len__(self):
        return len(self.terms)

    def __contains__(self, key):
        return key in self.terms
