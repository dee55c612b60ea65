"""
slangdict/dictionary.py

SlangDictionary is the operation surface used by app.py, the scripts and the
tests. It wraps a LexicalStore, a SearchHistory and the on-disk files:

    - search by word / by definition (recorded in history)
    - add with an AddOption policy, edit (incl. rename), delete
    - random pick, backup/reset of the loaded baseline
    - history list / delete / clear

Expected conditions come back as values (AddResult, bool, None), never as
exceptions. Persistence is best-effort: a failed save is logged and the
in-memory change stands.
"""

import functools
import logging
import os
import threading
from enum import Enum

from slangdict.history import SearchHistory, SearchKind
from slangdict.lexicon import LexicalStore
from slangdict.parser import parse_definitions
from slangdict.paths import HISTORY_PATH, INDEX_PATH, SLANG_PATH
from slangdict.quiz import QuizMode, make_question
from slangdict.term import Term
from slangdict.termio import is_storable_key, load_terms, save_terms

logger = logging.getLogger(__name__)


class AddOption(str, Enum):
    OVERWRITE = "OVERWRITE"
    DUPLICATE = "DUPLICATE"
    CANCEL = "CANCEL"


class AddResult(str, Enum):
    ADDED = "ADDED"
    OVERWRITTEN = "OVERWRITTEN"
    DUPLICATED = "DUPLICATED"
    EXISTS = "EXISTS"       # key exists and no (or CANCEL) option was chosen
    FAILED = "FAILED"       # blank or unstorable word, or no definitions


def _locked(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


class SlangDictionary:
    """
    Caller-facing slang dictionary.

    All operations run under one re-entrant lock, so a threaded server can share
    a single instance: mutations, snapshot/restore and reads never interleave.

    Typical usage:
        d = SlangDictionary(term_path="data/slang.txt")
        d.load()
        d.backup()
        d.add("LOL", "laugh out loud")              # AddResult.ADDED
        d.add("LOL", "very funny", AddOption.OVERWRITE)
    """

    def __init__(self, store: LexicalStore | None = None, history: SearchHistory | None = None,
                 term_path: str | None = SLANG_PATH, index_path: str | None = INDEX_PATH,
                 history_path: str | None = HISTORY_PATH, autosave: bool = True,
                 clean_on_load: bool = False):
        self.store = store if store is not None else LexicalStore()
        self.history = history if history is not None else SearchHistory()
        self.term_path = term_path
        self.index_path = index_path
        self.history_path = history_path
        self.autosave = autosave
        self.clean_on_load = clean_on_load
        self._lock = threading.RLock()

    # lifecycle -----------------------------------------------------------

    @_locked
    def load(self) -> int:
        """
        Load terms from term_path, then the persisted index (rebuilt if missing
        or stale) and the history. A missing term file means an empty dictionary.
        The file is read as written unless clean_on_load is set, in which case
        each line goes through ftfy mojibake repair (for imported files).
        Returns the number of terms in the store.
        """
        source_mtime = None
        if self.term_path and os.path.exists(self.term_path):
            for key, defs in load_terms(self.term_path, clean=self.clean_on_load):
                self.store.add(Term(key, defs))
            source_mtime = os.path.getmtime(self.term_path)
        elif self.term_path:
            logger.warning("Term file %s not found; starting empty", self.term_path)

        # A usable persisted index replaces the one built while adding the terms
        # above; it is only checked for age and unknown keys, not for missing ones.
        if self.index_path:
            self.store.load_or_build_index(self.index_path, source_mtime=source_mtime)
        else:
            self.store.build_index()

        if self.history_path:
            try:
                max_entries = self.history.max_entries
                self.history = SearchHistory.load(self.history_path, max_entries=max_entries)
            except (OSError, ValueError, KeyError) as e:
                logger.warning("Could not load history from %s: %s", self.history_path, e)
        return len(self.store)

    @_locked
    def save(self) -> bool:
        """Write terms and index. Failures are logged; returns False on failure."""
        ok = True
        if self.term_path:
            try:
                save_terms(self.term_path, self.store.terms.values())
            except (OSError, ValueError) as e:
                logger.warning("Could not save terms to %s: %s", self.term_path, e)
                ok = False
        if self.index_path:
            try:
                self.store.index.save(self.index_path)
            except OSError as e:
                logger.warning("Could not save index to %s: %s", self.index_path, e)
                ok = False
        return ok

    def _persist(self):
        if self.autosave:
            self.save()

    def _persist_history(self):
        if not (self.autosave and self.history_path):
            return
        try:
            self.history.save(self.history_path)
        except OSError as e:
            logger.warning("Could not save history to %s: %s", self.history_path, e)

    # search --------------------------------------------------------------

    @_locked
    def search_by_word(self, word: str | None) -> Term | None:
        if word is None or not word.strip():
            return None
        term = self.store.find_by_key(word)
        self.history.record(word.strip(), SearchKind.BY_WORD, [term.key] if term else [])
        self._persist_history()
        return term

    @_locked
    def search_by_definition(self, query: str | None) -> list[Term]:
        if query is None or not query.strip():
            return []
        found = self.store.find_by_definition(query)
        self.history.record(query.strip(), SearchKind.BY_DEFINITION, [t.key for t in found])
        self._persist_history()
        return found

    @_locked
    def search(self, query: str | None) -> list[Term]:
        """Word match first, then definition matches not already listed."""
        results = []
        seen = set()
        by_word = self.search_by_word(query)
        if by_word is not None:
            results.append(by_word)
            seen.add(by_word.key)
        for t in self.search_by_definition(query):
            if t.key not in seen:
                results.append(t)
                seen.add(t.key)
        return results

    @_locked
    def all_terms(self) -> list[Term]:
        return self.store.all_terms()

    @_locked
    def random(self) -> Term | None:
        return self.store.get_random()

    # mutation ------------------------------------------------------------

    @_locked
    def add(self, word: str | None, definitions_raw: str | None,
            option: AddOption | None = None) -> AddResult:
        """
        Add a word. definitions_raw may hold several definitions separated by
        "|" or newlines.

        If the word exists (case-insensitive fallback applies) the option decides:
            OVERWRITE -> replace its definitions
            DUPLICATE -> append the new definitions it does not already have
            CANCEL / None -> nothing changes, AddResult.EXISTS
        """
        if word is None or not word.strip():
            return AddResult.FAILED
        defs = parse_definitions(definitions_raw)
        if not defs:
            return AddResult.FAILED
        if option is not None:
            option = AddOption(option)

        key = word.strip()
        if not is_storable_key(key):
            return AddResult.FAILED
        existing = self.store.find_by_key(key)
        if existing is None:
            self.store.add(Term(key, defs))
            self._persist()
            return AddResult.ADDED

        if option is AddOption.OVERWRITE:
            self.store.add(Term(existing.key, defs))
            self._persist()
            return AddResult.OVERWRITTEN

        if option is AddOption.DUPLICATE:
            merged = list(existing.definitions)
            for d in defs:
                if d not in merged:
                    merged.append(d)
            self.store.add(Term(existing.key, merged))
            self._persist()
            return AddResult.DUPLICATED

        return AddResult.EXISTS

    @_locked
    def edit(self, old_word: str | None, new_word: str | None, definitions_raw: str | None) -> bool:
        """
        Replace the definitions of `old_word` and optionally rename it to `new_word`.
        False if old_word is unknown, new_word is blank or cannot be stored in the
        term file, there are no definitions, or new_word already belongs to a
        different term.
        """
        if old_word is None or new_word is None or not new_word.strip():
            return False
        existing = self.store.find_by_key(old_word)
        if existing is None:
            return False
        defs = parse_definitions(definitions_raw)
        if not defs:
            return False

        new_key = new_word.strip()
        if not is_storable_key(new_key):
            return False
        if new_key != existing.key and new_key in self.store:
            return False
        ok = self.store.edit(existing.key, Term(new_key, defs))
        if ok:
            self._persist()
        return ok

    @_locked
    def delete(self, word: str | None) -> bool:
        if word is None or not word.strip():
            return False
        term = self.store.find_by_key(word)
        if term is None:
            return False
        ok = self.store.delete(term.key)
        if ok:
            self._persist()
        return ok

    # backup / reset ------------------------------------------------------

    @_locked
    def backup(self) -> None:
        self.store.backup_original()

    @_locked
    def reset(self) -> None:
        self.store.reset_to_original()
        self._persist()

    # quiz ----------------------------------------------------------------

    @_locked
    def quiz_question(self, mode: QuizMode, rng=None):
        return make_question(self.store, mode, rng=rng)

    @_locked
    def check_answer(self, key: str, mode: QuizMode, choice: str) -> bool:
        """Stateless check of a quiz answer for the term stored under `key`."""
        term = self.store.terms.get(key)
        if term is None:
            return False
        if QuizMode(mode) is QuizMode.WORD_TO_DEFINITION:
            return choice in term.definitions
        return choice == term.key

    # history -------------------------------------------------------------

    @_locked
    def get_history(self):
        return self.history.entries()

    @_locked
    def delete_history(self, index: int) -> bool:
        ok = self.history.delete_at(index)
        if ok:
            self._persist_history()
        return ok

    @_locked
    def clear_history(self) -> None:
        self.history.clear()
        self._persist_history()

    def __len__(self):
        with self._lock:
            return len(self.store)
