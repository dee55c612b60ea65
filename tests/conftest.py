import random

import pytest

from slangdict.dictionary import SlangDictionary
from slangdict.lexicon import LexicalStore
from slangdict.term import Term

SAMPLE = [
    ("LOL", ["laugh out loud", "lots of love"]),
    ("BRB", ["be right back"]),
    ("AFK", ["away from keyboard"]),
    ("GOAT", ["greatest of all time"]),
    ("Café", ["a place for café au lait"]),
    ("Salty", ["bitter or upset"]),
]


@pytest.fixture
def store():
    s = LexicalStore(rng=random.Random(7))
    for key, defs in SAMPLE:
        s.add(Term(key, defs))
    return s


@pytest.fixture
def dictionary(tmp_path):
    d = SlangDictionary(
        store=LexicalStore(rng=random.Random(7)),
        term_path=str(tmp_path / "slang.txt"),
        index_path=str(tmp_path / "def_index.pkl"),
        history_path=str(tmp_path / "history.json"),
    )
    for key, defs in SAMPLE:
        d.store.add(Term(key, defs))
    return d
