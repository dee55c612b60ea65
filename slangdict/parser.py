import re
import unicodedata
from typing import NamedTuple

from ftfy import TextFixerConfig, fix_text

from slangdict.paths import DEFINITION_DELIMITER, KEY_DELIMITER

# Tokens are runs of [a-z0-9] in the normalized text; everything else delimits.
TOKEN_RE = re.compile(r"[a-z0-9]+")
MIN_TOKEN_LEN = 2

# Split user-entered definitions on a literal "|" or a line break
DEFINITION_SPLIT_RE = re.compile(r"\r?\n|\|")

# Only repair real mojibake / control garbage. Everything that would rewrite
# clean text (quotes, ligatures, widths, entities, NFC) stays off so that a
# saved file loads back unchanged.
FTFY_CONFIG = TextFixerConfig(
    unescape_html=False,
    uncurl_quotes=False,
    fix_latin_ligatures=False,
    fix_character_width=False,
    normalization=None,
)


class Fragment(NamedTuple):
    """
    A query token plus whether it touches the start/end of the query.

    An open edge means the definition token it came from may continue past the
    fragment on that side ("augh" in the query "augh ou" can be the tail of
    "laugh"); a closed edge means the query itself has a delimiter there.
    """
    token: str
    open_left: bool
    open_right: bool


def strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.category(ch).startswith("M"))


def normalize_for_substring_match(text: str | None) -> str:
    """
    Diacritic-stripped, lowercased form of `text`, NOT tokenized.
    This is the form used by the final substring verification step.

    lower() runs per character: str.lower() on the whole string picks the Greek
    final sigma from context, and then a substring of the input would not
    always normalize to a substring of the output.
    """
    if not text:
        return ""
    return "".join(ch.lower() for ch in strip_diacritics(text))


def tokenize(text: str | None) -> list[str]:
    """
    Normalize and tokenize a raw text string.
    - NFD, drop combining marks, lowercase
    - split on any run of non [a-z0-9] characters
    - drop tokens shorter than MIN_TOKEN_LEN
    Return [] if nothing remains.
    """
    norm = normalize_for_substring_match(text)
    return [t for t in TOKEN_RE.findall(norm) if len(t) >= MIN_TOKEN_LEN]


def query_fragments(text: str | None) -> list[Fragment]:
    """
    Tokenize a search query, keeping edge information for each token.
    The tokens are exactly those of tokenize(text).
    """
    needle = normalize_for_substring_match(text).strip()
    fragments = []
    for m in TOKEN_RE.finditer(needle):
        tok = m.group()
        if len(tok) < MIN_TOKEN_LEN:
            continue
        fragments.append(Fragment(tok, m.start() == 0, m.end() == len(needle)))
    return fragments


def parse_definitions(raw: str | None) -> list[str]:
    """
    Split caller input into definitions: on "|" or newline, trimmed,
    empty pieces dropped, order preserved.
    """
    if raw is None:
        return []
    return [p.strip() for p in DEFINITION_SPLIT_RE.split(raw) if p.strip()]


def clean_text(text: str) -> str:
    """Fix mojibake (ftfy) without touching text that is already clean."""
    return fix_text(text, config=FTFY_CONFIG)


class Parser:
    """
    Parser for the line-based term file.

    Each line is expected to be:  <key>`<def1>|<def2>|...

    Methods:
        parse_line(line) -> (key, definitions) | None
        iter_terms(path, limit=None) -> yields (key, definitions)
    """

    def __init__(self, clean: bool = True):
        self.clean = clean

    def parse_line(self, line: str):
        """
        Parse a single record line.
        Returns:
            (key:str, definitions:list[str]) on success
            None if the line has no delimiter or the key is blank
        """
        line = line.rstrip("\r\n")
        if self.clean:
            line = clean_text(line)
        if KEY_DELIMITER not in line:
            return None
        key, _, rest = line.partition(KEY_DELIMITER)
        key = key.strip()
        if not key:
            return None
        defs = [d.strip() for d in rest.split(DEFINITION_DELIMITER) if d.strip()]
        return key, defs

    def iter_terms(self, path: str, limit: int | None = None):
        """
        Stream (key, definitions) from a term file, skipping malformed lines.

        Yields:
            (key:str, definitions:list[str])
        """
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            for i, line in enumerate(f):
                if limit is not None and i >= limit:
                    break
                parsed = self.parse_line(line)
                if parsed is None:
                    continue
                yield parsed
