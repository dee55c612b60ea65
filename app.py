#!/usr/bin/env python3
"""
Flask JSON API for the slang dictionary.
"""

import argparse
import logging
import time

from flask import Flask, jsonify, request

from slangdict.dictionary import AddOption, AddResult, SlangDictionary
from slangdict.paths import HISTORY_PATH, INDEX_PATH, SLANG_PATH
from slangdict.quiz import QuizMode

logger = logging.getLogger(__name__)

SEARCH_MODES = ("word", "definition", "all")

ADD_STATUS = {
    AddResult.ADDED: 201,
    AddResult.OVERWRITTEN: 200,
    AddResult.DUPLICATED: 200,
    AddResult.EXISTS: 409,
    AddResult.FAILED: 400,
}


def term_json(term):
    return {"word": term.key, "definitions": list(term.definitions)}


def error(msg, status=400):
    return jsonify({"error": msg}), status


def definitions_arg(data):
    """Definitions may arrive as one "|"/newline separated string or as a list."""
    defs = data.get("definitions")
    if isinstance(defs, list):
        return "\n".join(str(d) for d in defs)
    return defs if isinstance(defs, str) else None


def create_app(dictionary: SlangDictionary) -> Flask:
    """Build the app around an already loaded SlangDictionary."""
    app = Flask(__name__)
    app.config["DICTIONARY"] = dictionary

    @app.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify({"status": "healthy", "terms": len(dictionary)})

    @app.route("/search", methods=["POST"])
    def search():
        """Handle search requests."""
        data = request.get_json(silent=True) or {}
        query = str(data.get("query") or "").strip()
        mode = str(data.get("mode") or "all").lower()

        if not query:
            return error("Empty query")
        if mode not in SEARCH_MODES:
            return error("Invalid mode. Must be one of: " + ", ".join(SEARCH_MODES))

        start_time = time.perf_counter()
        if mode == "word":
            hit = dictionary.search_by_word(query)
            results = [hit] if hit is not None else []
        elif mode == "definition":
            results = dictionary.search_by_definition(query)
        else:
            results = dictionary.search(query)
        search_time = (time.perf_counter() - start_time) * 1000  # ms

        return jsonify({
            "results": [term_json(t) for t in results],
            "searchTime": search_time,
            "totalResults": len(results),
            "query": query,
            "mode": mode,
        })

    @app.route("/terms", methods=["GET"])
    def list_terms():
        terms = sorted(dictionary.all_terms(), key=lambda t: t.key)
        return jsonify({"terms": [term_json(t) for t in terms], "total": len(terms)})

    @app.route("/terms", methods=["POST"])
    def add_term():
        data = request.get_json(silent=True) or {}
        option = data.get("option")
        if option is not None:
            try:
                option = AddOption(str(option).upper())
            except ValueError:
                return error(f"Invalid option {option!r}")
        word = data.get("word")
        if not isinstance(word, str):
            return error("word is required")
        result = dictionary.add(word, definitions_arg(data), option)
        return jsonify({"result": result.value}), ADD_STATUS[result]

    @app.route("/terms/<path:key>", methods=["PUT"])
    def edit_term(key):
        data = request.get_json(silent=True) or {}
        new_word = data.get("word") or key
        if not isinstance(new_word, str):
            return error("word must be a string")
        if not dictionary.edit(key, new_word, definitions_arg(data)):
            return error(f"Could not edit {key!r}", 404)
        return jsonify({"result": "EDITED", "word": new_word.strip()})

    @app.route("/terms/<path:key>", methods=["DELETE"])
    def delete_term(key):
        if not dictionary.delete(key):
            return error(f"{key!r} not found", 404)
        return jsonify({"result": "DELETED"})

    @app.route("/random")
    def random_term():
        term = dictionary.random()
        if term is None:
            return error("Dictionary is empty", 404)
        return jsonify(term_json(term))

    @app.route("/backup", methods=["POST"])
    def backup():
        dictionary.backup()
        return jsonify({"result": "BACKED_UP", "terms": len(dictionary)})

    @app.route("/reset", methods=["POST"])
    def reset():
        dictionary.reset()
        return jsonify({"result": "RESET", "terms": len(dictionary)})

    @app.route("/history", methods=["GET"])
    def history():
        entries = dictionary.get_history()
        return jsonify({"history": [
            {"query": e.query, "kind": e.kind.value, "results": list(e.result_keys)}
            for e in entries
        ]})

    @app.route("/history", methods=["DELETE"])
    def clear_history():
        dictionary.clear_history()
        return jsonify({"result": "CLEARED"})

    @app.route("/history/<int:index>", methods=["DELETE"])
    def delete_history(index):
        if not dictionary.delete_history(index):
            return error(f"No history entry at {index}", 404)
        return jsonify({"result": "DELETED"})

    @app.route("/quiz")
    def quiz():
        try:
            mode = QuizMode(request.args.get("mode", QuizMode.WORD_TO_DEFINITION.value).upper())
        except ValueError:
            return error("Invalid quiz mode")
        q = dictionary.quiz_question(mode)
        if q is None:
            return error("Dictionary is empty", 404)
        return jsonify({"mode": q.mode.value, "key": q.key, "prompt": q.prompt,
                        "options": list(q.options)})

    @app.route("/quiz/check", methods=["POST"])
    def quiz_check():
        data = request.get_json(silent=True) or {}
        try:
            mode = QuizMode(str(data.get("mode", "")).upper())
        except ValueError:
            return error("Invalid quiz mode")
        if data.get("key") is None or data.get("choice") is None:
            return error("key and choice are required")
        correct = dictionary.check_answer(str(data["key"]), mode, str(data["choice"]))
        return jsonify({"correct": correct})

    return app


def initialize_dictionary(term_path=SLANG_PATH, index_path=INDEX_PATH, history_path=HISTORY_PATH,
                          clean_on_load=False):
    """Load the dictionary and snapshot it as the reset baseline."""
    logger.info("Initializing slang dictionary...")
    dictionary = SlangDictionary(term_path=term_path, index_path=index_path,
                                 history_path=history_path, clean_on_load=clean_on_load)
    n = dictionary.load()
    dictionary.backup()
    logger.info("Slang dictionary initialized: %d terms", n)
    return dictionary


if __name__ == "__main__":
    ap = argparse.ArgumentParser()
    ap.add_argument("--terms", default=SLANG_PATH, help="term file")
    ap.add_argument("--index", default=INDEX_PATH, help="persisted definition index")
    ap.add_argument("--history", default=HISTORY_PATH, help="search history file")
    ap.add_argument("--clean", action="store_true", help="repair mojibake (ftfy) while loading the term file")
    ap.add_argument("--host", default="0.0.0.0")
    ap.add_argument("--port", type=int, default=5001)
    ap.add_argument("--debug", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = create_app(initialize_dictionary(args.terms, args.index, args.history, clean_on_load=args.clean))
    app.run(debug=args.debug, host=args.host, port=args.port)
