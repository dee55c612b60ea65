
"""
bench_search.py

Quick-and-dirty benchmark for definition search.
Compares the index path of LexicalStore.find_by_definition() against a plain
scan over every definition, and checks that both return the same terms.

By default, queries are sampled from definition words: whole tokens and
partial words (a slice out of a token), 1 or 2 tokens per query.
You can also pass a file with one query per line.

Run examples:
  python bench_search.py
  python bench_search.py --queries queries.txt --limit 20000
"""

import argparse
import random
import statistics
import time

from slangdict.lexicon import LexicalStore
from slangdict.parser import Parser, normalize_for_substring_match
from slangdict.paths import SLANG_PATH
from slangdict.term import Term


def load_queries(path):
    with open(path, "r", encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip()]


def sample_queries(store, n=100, terms_per_q=2):
    tokens = list(store.index.tokens())
    random.seed(1234)
    queries = []
    for _ in range(n):
        qs = random.sample(tokens, min(terms_per_q, len(tokens)))
        if random.random() < 0.3:
            # partial word: drop the first character of the first token
            qs[0] = qs[0][1:] or qs[0]
        queries.append(" ".join(qs))
    return queries


def scan(store, query):
    needle = normalize_for_substring_match(query).strip()
    return sorted(
        t.key for t in store.terms.values()
        if any(needle in normalize_for_substring_match(d) for d in t.definitions)
    )


def bench(fn, queries):
    times = []
    for q in queries:
        t0 = time.perf_counter()
        fn(q)
        times.append((time.perf_counter() - t0) * 1000)  # ms
    return {
        "n": len(times),
        "avg_ms": statistics.mean(times),
        "p50_ms": statistics.median(times),
        "p95_ms": statistics.quantiles(times, n=20)[18] if len(times) >= 20 else max(times),
        "max_ms": max(times),
    }


def report(label, stats):
    print(f"{label:<6} Queries={stats['n']}  "
          f"avg={stats['avg_ms']:.3f}ms  p50={stats['p50_ms']:.3f}ms  "
          f"p95={stats['p95_ms']:.3f}ms  max={stats['max_ms']:.3f}ms")


def main(args):
    store = LexicalStore()
    for key, defs in Parser().iter_terms(args.terms, limit=args.limit):
        store.add(Term(key, defs))
    print(f"Loaded {len(store)} terms, {len(store.index)} tokens")

    if args.queries:
        queries = load_queries(args.queries)
    else:
        queries = sample_queries(store, n=args.num_queries, terms_per_q=args.terms_per_query)
    if not queries:
        print("No queries.")
        return

    mismatches = [q for q in queries
                  if [t.key for t in store.find_by_definition(q)] != scan(store, q)]
    print(f"Index/scan mismatches: {len(mismatches)}")
    for q in mismatches[:10]:
        print(f"  {q!r}")

    report("index", bench(store.find_by_definition, queries))
    report("scan", bench(lambda q: scan(store, q), queries))


if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--terms", type=str, default=SLANG_PATH, help="term file")
    ap.add_argument("--limit", type=int, default=None, help="only load the first N lines")
    ap.add_argument("--queries", type=str, default=None, help="file with one query per line")
    ap.add_argument("--num-queries", type=int, default=200, help="number of sampled queries if --queries not provided")
    ap.add_argument("--terms-per-query", type=int, default=2, help="how many tokens per sampled query")
    args = ap.parse_args()
    main(args)
