# slangdict/paths.py

import os

# --- Base data paths ---
DATA_DIR = os.getenv("SLANGDICT_DATA_DIR", "data")

# --- Term file: one `key`def1|def2 record per line ---
SLANG_PATH = os.getenv("SLANGDICT_SLANG_PATH", os.path.join(DATA_DIR, "slang.txt"))

# --- Persisted definition index (pickle, token -> [keys]) ---
INDEX_PATH = os.getenv("SLANGDICT_INDEX_PATH", os.path.join(DATA_DIR, "def_index.pkl"))

# --- Search history (json) ---
HISTORY_PATH = os.getenv("SLANGDICT_HISTORY_PATH", os.path.join(DATA_DIR, "history.json"))

# --- Term file delimiters ---
KEY_DELIMITER = "`"
DEFINITION_DELIMITER = "|"
