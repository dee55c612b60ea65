# slangdict/termio.py
"""
Reading and writing the term file in its line format:

    key`definition 1|definition 2|...

One record per line, UTF-8. Order of records is not significant; order of
definitions within a record is.
"""

import logging
import os

from slangdict.parser import Parser
from slangdict.paths import DEFINITION_DELIMITER, KEY_DELIMITER

logger = logging.getLogger(__name__)


def is_storable_key(key: str) -> bool:
    """False for keys the line format cannot hold (key delimiter or line break)."""
    return not (KEY_DELIMITER in key or "\n" in key or "\r" in key)


class TermWriter:
    """
    Writes terms to a file, one `key`defs line each.

    Keys containing the key delimiter or a line break, and definitions containing
    the definition delimiter or a line break, cannot be read back; the writer
    raises ValueError instead of writing a corrupt line.
    """
    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __init__(self, path: str):
        self.path = path
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        self._f = open(path, "w", encoding="utf-8", newline="\n")
        self.count = 0

    def write(self, key: str, definitions) -> None:
        if not is_storable_key(key):
            raise ValueError(f"key {key!r} cannot be stored in the term file")
        for d in definitions:
            if DEFINITION_DELIMITER in d or "\n" in d or "\r" in d:
                raise ValueError(f"definition {d!r} of {key!r} cannot be stored in the term file")
        self._f.write(f"{key}{KEY_DELIMITER}{DEFINITION_DELIMITER.join(definitions)}\n")
        self.count += 1

    def write_terms(self, terms) -> None:
        for term in terms:
            self.write(term.key, term.definitions)

    def close(self):
        if not self._f.closed:
            self._f.close()


class TermReader:
    """
    Sequentially reads a term file.

    Yields tuples: (key: str, definitions: list[str]); malformed lines are skipped.
    """
    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __init__(self, path: str, clean: bool = True):
        self.path = path
        self._parser = Parser(clean=clean)
        self._f = open(path, "r", encoding="utf-8", errors="replace")

    def __iter__(self):
        return self

    def __next__(self):
        for line in self._f:
            parsed = self._parser.parse_line(line)
            if parsed is not None:
                return parsed
        raise StopIteration

    def close(self):
        if not self._f.closed:
            self._f.close()


def save_terms(path: str, terms) -> int:
    """
    Write all terms to `path`. The data goes to a temporary sibling file first
    and replaces `path` only once it is complete.
    Returns the number of records written.
    """
    tmp = f"{path}.tmp"
    try:
        with TermWriter(tmp) as w:
            w.write_terms(terms)
            count = w.count
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise
    logger.info("Terms saved: %d to %s", count, path)
    return count


def load_terms(path: str, clean: bool = True) -> list[tuple[str, list[str]]]:
    with TermReader(path, clean=clean) as r:
        records = list(r)
    logger.info("Terms loaded: %d from %s", len(records), path)
    return records
