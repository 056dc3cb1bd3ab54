from __future__ import annotations
import os
from typing import Optional

from flask import Flask, Response, abort, jsonify, request, send_from_directory

from cityindex import config as CFG
from cityindex.search import MESSAGES, SearchClient

app = Flask(__name__)

_public_dir: Optional[str] = None
_client: Optional[SearchClient] = None


def configure(public_dir: str, artifacts_subdir: str = "cities") -> None:
    """Serve public_dir; search/detail API reads the artifacts in public_dir/artifacts_subdir."""
    global _public_dir, _client
    if _client is not None:
        _client.close()
    _public_dir = os.path.abspath(public_dir)
    _client = SearchClient(os.path.join(_public_dir, artifacts_subdir))


def _require_client() -> SearchClient:
    if _client is None:
        raise RuntimeError("Web app not configured. Call configure(public_dir) first.")
    return _client


# ---------- API ----------
@app.get("/health")
def health():
    return jsonify({"ok": True, "configured": _client is not None})


@app.get("/api/search")
def api_search():
    q = request.args.get("q", "", type=str)
    res = _require_client().search(q)
    return jsonify(res.to_dict())


@app.get("/api/cities/<slug>")
def api_city(slug: str):
    city = _require_client().city_by_slug(slug)
    if city is None:
        return jsonify({"error": MESSAGES["city_not_found"]}), 404
    return jsonify(city)


# ---------- static artifacts + SPA fallback ----------
def _index_html() -> Response:
    assert _public_dir is not None
    if not os.path.isfile(os.path.join(_public_dir, "index.html")):
        abort(404)
    return send_from_directory(_public_dir, "index.html")


@app.get("/")
@app.get("/<path:path>")
def static_files(path: str = ""):
    if _public_dir is None:
        abort(503)

    target = os.path.abspath(os.path.join(_public_dir, path))
    inside = target == _public_dir or target.startswith(_public_dir + os.sep)
    if not inside:
        abort(404)

    if os.path.isdir(target):
        if os.path.isfile(os.path.join(target, "index.html")):
            return send_from_directory(target, "index.html")
        return _index_html()

    if os.path.isfile(target):
        resp = send_from_directory(_public_dir, path)
        if path.endswith(".json"):
            resp.headers["Cache-Control"] = f"public, max-age={CFG.JSON_CACHE_MAX_AGE}"
        return resp

    # Unknown path: let the single-page app route it (e.g. /42-218-saint-etienne)
    return _index_html()
