# slangdict/utils.py

import json
import logging
import os
import pickle

logger = logging.getLogger(__name__)


def _ensure_parent(path):
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def write_index(index, path):
    """
    Save an inverted index (token -> iterable of keys) to disk using pickle.
    Sets are projected to sorted lists so the file does not depend on set ordering.
    Args:
        index: dict[str, set[str]] | dict[str, list[str]]
        path: str, file path
    """
    data = {token: sorted(keys) for token, keys in index.items()}
    _ensure_parent(path)
    with open(path, "wb") as f:
        pickle.dump(data, f)
    logger.info("Index saved: %d tokens to %s", len(data), path)


def load_index(path):
    """
    Load an inverted index written by write_index().
    Args:
        path: str, file path
    Returns:
        index: dict[str, set[str]], or None if the file does not exist
    """
    if not os.path.exists(path):
        return None
    with open(path, "rb") as f:
        data = pickle.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain an index mapping (got {type(data).__name__})")
    index = {}
    for token, keys in data.items():
        if not isinstance(token, str) or not isinstance(keys, (list, set, tuple)) \
                or not all(isinstance(k, str) for k in keys):
            raise ValueError(f"{path} has a malformed bucket for {token!r}")
        index[token] = set(keys)
    logger.info("Index loaded: %d tokens from %s", len(index), path)
    return index


def write_json(obj, path):
    _ensure_parent(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, ensure_ascii=False, indent=2)


def load_json(path, default=None):
    """Load a JSON file, returning `default` when it does not exist."""
    if not os.path.exists(path):
        return default
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
