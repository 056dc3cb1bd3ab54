from __future__ import annotations
import argparse, json, logging, sys

from . import config as CFG
from .engine import IndexBuilder
from .loader import SCHEMAS
from .models import SlugCollisionError
from .search import MESSAGES, SearchClient

log = logging.getLogger("cityindex")


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Municipality search index (build / query)")
    g = p.add_mutually_exclusive_group(required=True)
    g.add_argument("--build", action="store_true", help="Build the artifact set from --input")
    g.add_argument("--query", default=None, help="Search a built artifact set (needs --source)")
    g.add_argument("--slug", default=None, help="Print the full record for a slug (needs --source)")

    p.add_argument("--input", default=CFG.INPUT_PATH, help="JSON array of source records")
    p.add_argument("--out", default=CFG.OUTPUT_DIR, help="Output directory (replaced on build)")
    p.add_argument("--schema", choices=sorted(SCHEMAS), default=CFG.SCHEMA, help="Input shape")
    p.add_argument("--emit", choices=["partition", "per_key"], default=CFG.EMIT_MODE,
                   help="Search file layout to write (--build) or read (--query)")
    p.add_argument("--record-files", action="store_true", help="Also write <id>.json and <slug>.json")
    p.add_argument("--no-split-words", action="store_true", help="Index whole names only")
    p.add_argument("--min-ngram", type=int, default=CFG.MIN_NGRAM)
    p.add_argument("--max-ngram", type=int, default=CFG.MAX_NGRAM)
    p.add_argument("--cap", type=int, default=CFG.MAX_RESULTS_PER_KEY, help="Results kept per key")
    p.add_argument("--source", default=None, help="Artifact directory or base URL")
    p.add_argument("--json", action="store_true", help="Emit JSON")
    p.add_argument("--verbose", action="store_true")

    args = p.parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    if args.build:
        try:
            builder = IndexBuilder(
                schema=args.schema,
                min_ngram=args.min_ngram,
                max_ngram=args.max_ngram,
                split_words=not args.no_split_words,
                cap=args.cap,
                emit_mode=args.emit,
                record_files=args.record_files,
            )
            report = builder.build(args.input, args.out)
        except (OSError, ValueError) as exc:
            # SlugCollisionError is a ValueError
            kind = "slug collision" if isinstance(exc, SlugCollisionError) else "build failed"
            log.error("%s: %s", kind, exc)
            return 1
        print(f"⏺ {report.records} cities ({report.skipped} skipped)")
        print(f"⏺ {report.keys} index entries")
        print(f"⏺ {report.bytes_written / 1000:.1f} KB written in {report.files_written} files")
        print(f"⏺ {report.seconds * 1000:.1f} ms")
        print("\n✔ Done")
        return 0

    source = args.source or args.out
    client = SearchClient(source, layout=args.emit)
    try:
        if args.query is not None:
            res = client.search(args.query)
            if args.json:
                print(json.dumps(res.to_dict(), ensure_ascii=False, indent=2))
            elif res.status != "ok":
                print(res.message or "(no search performed)")
            else:
                print("#  Id       Code   Name")
                for i, h in enumerate(res.hits, 1):
                    print(f"{i:<2} {h.id:<8} {h.code:<6} {h.name}")
            return 0 if res.status != "error" else 1

        city = client.city_by_slug(args.slug)
        if city is None:
            print(MESSAGES["city_not_found"], file=sys.stderr)
            return 1
        print(json.dumps(city, ensure_ascii=False, indent=2))
        return 0
    finally:
        client.close()


if __name__ == "__main__":
    raise SystemExit(main())
