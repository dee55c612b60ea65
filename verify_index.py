"""
verify_index.py

Purpose:
  Verify that the persisted definition index agrees with the term file, and
  diagnose the usual mismatches (index written before the term file was edited,
  index built by an older tokenizer). Optionally rewrite the index.

Run (from project root):
  python verify_index.py
  python verify_index.py --show-samples 15
  python verify_index.py --fix
"""

import argparse
import os
import sys

from slangdict.indexer import InvertedIndex
from slangdict.paths import INDEX_PATH, SLANG_PATH
from slangdict.term import Term
from slangdict.termio import load_terms


def summarize_set_diff(a: set, b: set, label_a: str, label_b: str, show: int = 10):
    """
    Print a concise summary of set membership differences.
    """
    only_a = sorted(a - b)
    only_b = sorted(b - a)
    print(f"\n=== Membership Diff: {label_a} vs {label_b} ===")
    print(f"Total {label_a}: {len(a)}")
    print(f"Total {label_b}: {len(b)}")
    print(f"Only in {label_a}: {len(only_a)}")
    print(f"Only in {label_b}: {len(only_b)}")
    if only_a[:show]:
        print(f"  Sample only-in-{label_a} (up to {show}): {only_a[:show]}")
    if only_b[:show]:
        print(f"  Sample only-in-{label_b} (up to {show}): {only_b[:show]}")


def main(terms_path: str, index_path: str, show_samples: int, fix: bool) -> int:
    print("=== Loading artifacts ===")
    print(f"SLANG_PATH = {terms_path}")
    print(f"INDEX_PATH = {index_path}")

    if not os.path.exists(terms_path):
        raise FileNotFoundError(f"Term file not found at {terms_path}")

    terms = {}
    for key, defs in load_terms(terms_path, clean=False):
        terms[key] = Term(key, defs)

    stored = InvertedIndex.load(index_path)
    if stored is None:
        print(f"\nNo index at {index_path}.")
        stored = InvertedIndex()

    fresh = InvertedIndex()
    fresh.rebuild(terms.values())

    print("\n=== Basic Stats ===")
    print(f"Terms in file:              {len(terms):,}")
    print(f"Tokens in stored index:     {len(stored):,}")
    print(f"Tokens in rebuilt index:    {len(fresh):,}")

    summarize_set_diff(set(stored.tokens()), set(fresh.tokens()), "stored-tokens", "rebuilt-tokens", show_samples)

    keys_in_index = set()
    for keys in stored.index.values():
        keys_in_index |= keys
    summarize_set_diff(keys_in_index, set(terms), "index-keys", "file-keys", show_samples)

    problems = stored.problems(terms)
    print(f"\nBucket problems: {len(problems)}")
    for p in problems[:show_samples]:
        print(f"    {p}")

    if os.path.exists(index_path) and os.path.getmtime(index_path) < os.path.getmtime(terms_path):
        print("\nIndex file is older than the term file.")

    if problems and fix:
        fresh.save(index_path)
        print(f"\nRewrote {index_path} from {terms_path}.")
    elif problems:
        print("\nRun with --fix to rebuild the index from the term file.")
    print("\nDone.")
    return 1 if problems and not fix else 0


if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--terms", default=SLANG_PATH, help="term file")
    ap.add_argument("--index", default=INDEX_PATH, help="persisted index")
    ap.add_argument("--show-samples", type=int, default=10, help="How many samples to print in diffs")
    ap.add_argument("--fix", action="store_true", help="rewrite the index if it disagrees")
    args = ap.parse_args()
    sys.exit(main(args.terms, args.index, show_samples=args.show_samples, fix=args.fix))
