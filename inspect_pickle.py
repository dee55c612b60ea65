import sys

from slangdict.indexer import InvertedIndex

# python inspect_pickle.py data/def_index.pkl
# python inspect_pickle.py data/def_index.pkl 5


def inspect_index(path, limit=10):
    """
    Loads and prints a summary of a persisted definition index.
    Args:
        path: str, path to the pickle file
        limit: int, how many buckets to print
    """
    print(f"\n[Inspecting {path}]")
    index = InvertedIndex.load(path)
    if index is None:
        print("No index file.")
        return

    sizes = sorted(((len(keys), tok) for tok, keys in index.index.items()), reverse=True)
    keys = set()
    for bucket in index.index.values():
        keys |= bucket
    print(f"Tokens: {len(index)}")
    print(f"Distinct terms: {len(keys)}")
    if sizes:
        print(f"Largest bucket: {sizes[0][1]!r} ({sizes[0][0]} terms)")
        print(f"Average bucket: {sum(n for n, _ in sizes) / len(sizes):.2f} terms")

    print("Largest buckets:")
    for n, tok in sizes[:limit]:
        sample = sorted(index.index[tok])[:5]
        print(f"  {tok!r}: {n} {sample}")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python inspect_pickle.py path/to/def_index.pkl [limit]")
        sys.exit(1)
    path = sys.argv[1]
    limit = int(sys.argv[2]) if len(sys.argv) > 2 else 10
    inspect_index(path, limit=limit)
