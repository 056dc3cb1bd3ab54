from __future__ import annotations
import argparse, logging, os

from cityindex import config as CFG
from cityindex.engine import IndexBuilder
from cityweb.web import app, configure


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Serve the public site and its search artifacts")
    ap.add_argument("--dir", default="public", help="Public directory (artifacts in <dir>/cities)")
    ap.add_argument("--build", action="store_true", help="Rebuild artifacts from --input first")
    ap.add_argument("--input", default=CFG.INPUT_PATH)
    ap.add_argument("--schema", default=CFG.SCHEMA)
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=int(os.environ.get("PORT", 3000)))
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO)

    if args.build:
        IndexBuilder(schema=args.schema).build(args.input, os.path.join(args.dir, "cities"))

    configure(args.dir)
    app.run(host=args.host, port=args.port, debug=args.verbose)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
