"""
slangdict/quiz.py

Multiple-choice quiz over a LexicalStore.

Two modes:
  - WORD_TO_DEFINITION: "What is the meaning of: <key>"  -> pick a definition
  - DEFINITION_TO_WORD: "Which slang means: <definition>" -> pick a key

A QuizSession runs a fixed number of rounds and counts correct answers; the
player wins with at least `pass_mark` correct. Timing is left to the caller.
"""

import random
from dataclasses import dataclass
from enum import Enum

from slangdict.lexicon import LexicalStore

DEFAULT_OPTIONS = 4
DEFAULT_ROUNDS = 4
DEFAULT_PASS_MARK = 3


class QuizMode(str, Enum):
    WORD_TO_DEFINITION = "WORD_TO_DEFINITION"
    DEFINITION_TO_WORD = "DEFINITION_TO_WORD"


@dataclass(frozen=True)
class QuizQuestion:
    mode: QuizMode
    key: str
    prompt: str
    options: tuple[str, ...]
    answer: str
    accepted: frozenset[str]

    def is_correct(self, choice: str) -> bool:
        return choice in self.accepted


def _option_for(term, mode: QuizMode) -> str:
    if mode is QuizMode.WORD_TO_DEFINITION:
        return term.definitions[0]
    return term.key


def make_question(store: LexicalStore, mode: QuizMode, rng: random.Random | None = None,
                  n_options: int = DEFAULT_OPTIONS) -> QuizQuestion | None:
    """
    Build one question from a random term that has at least one definition.

    Distractors come from other terms; if the dictionary is too small to supply
    n_options distinct options, the question has fewer. Returns None when no
    term has a definition.
    """
    rng = rng or random.Random()
    mode = QuizMode(mode)
    pool = [t for t in store.all_terms() if t.definitions]
    if not pool:
        return None

    rng.shuffle(pool)
    correct = pool[0]
    answer = _option_for(correct, mode)
    if mode is QuizMode.WORD_TO_DEFINITION:
        accepted = frozenset(correct.definitions)
        prompt = f"What is the meaning of: {correct.key}"
    else:
        shown = correct.definitions[0]
        accepted = frozenset(t.key for t in pool if shown in t.definitions)
        prompt = f"Which slang means: {shown}"

    options = [answer]
    for other in pool[1:]:
        if len(options) >= n_options:
            break
        opt = _option_for(other, mode)
        # a distractor that is also a right answer would make the question ambiguous
        if opt in options or opt in accepted:
            continue
        options.append(opt)
    rng.shuffle(options)

    return QuizQuestion(mode=mode, key=correct.key, prompt=prompt,
                        options=tuple(options), answer=answer, accepted=accepted)


class QuizSession:
    """
    A fixed-length quiz game.

    Usage:
        session = QuizSession(store, QuizMode.WORD_TO_DEFINITION)
        while not session.finished:
            q = session.next_question()
            session.answer(q.options[0])
        session.won
    """

    def __init__(self, store: LexicalStore, mode: QuizMode, rounds: int = DEFAULT_ROUNDS,
                 pass_mark: int = DEFAULT_PASS_MARK, rng: random.Random | None = None):
        self.store = store
        self.mode = QuizMode(mode)
        self.rounds = rounds
        self.pass_mark = pass_mark
        self.rng = rng or random.Random()
        self.asked = 0
        self.score = 0
        self.current: QuizQuestion | None = None

    @property
    def finished(self) -> bool:
        return self.asked >= self.rounds

    @property
    def won(self) -> bool:
        return self.finished and self.score >= self.pass_mark

    def next_question(self) -> QuizQuestion | None:
        """The open question (a new one if none is open). None when finished or empty."""
        if self.finished:
            return None
        if self.current is None:
            self.current = make_question(self.store, self.mode, rng=self.rng)
        return self.current

    def answer(self, choice: str) -> bool:
        if self.current is None:
            raise RuntimeError("no open question; call next_question() first")
        correct = self.current.is_correct(choice)
        if correct:
            self.score += 1
        self.asked += 1
        self.current = None
        return correct
