# cityindex/engine.py
from __future__ import annotations

import logging
import os
import time
from typing import Any, Iterable, Optional, Union

from . import config as CFG
from .models import BuildReport, Dataset, IndexSchema
from .loader import get_schema, load_dataset, load_records
from .DB.index import InvertedIndex
from .DB import storage

log = logging.getLogger(__name__)

_EMIT_MODES = ("partition", "per_key")


class IndexBuilder:
    """
    Offline build of the static artifact set:
      - load + project source entries (loader, per schema),
      - prefix n-gram index (InvertedIndex),
      - ranked partitions, full-record store, slug map (DB.storage).

    Public API (used by CLI/Flask/tests):
      * index(dataset):            in-memory index only, no I/O
      * build(source, out_dir):    full pass; the output directory is replaced
    """

    def __init__(
        self,
        *,
        schema: Union[str, IndexSchema, None] = None,
        min_ngram: Optional[int] = None,
        max_ngram: Optional[int] = None,
        split_words: Optional[bool] = None,
        cap: Optional[int] = None,
        emit_mode: Optional[str] = None,
        record_files: Optional[bool] = None,
    ) -> None:
        self.schema = schema if isinstance(schema, IndexSchema) else get_schema(schema)
        self.min_ngram = min_ngram
        self.max_ngram = max_ngram
        self.split_words = split_words
        self.cap = CFG.MAX_RESULTS_PER_KEY if cap is None else int(cap)
        self.emit_mode = (emit_mode or CFG.EMIT_MODE).lower()
        self.record_files = CFG.EMIT_RECORD_FILES if record_files is None else bool(record_files)

        if self.emit_mode not in _EMIT_MODES:
            raise ValueError(f"Unsupported emit mode: {emit_mode!r} (expected one of {_EMIT_MODES})")
        if self.cap < 1:
            raise ValueError("cap must be >= 1")

    # /* ~~~ Load source entries from a JSON file or an in-memory list ~~~ */
    def load(self, source: Union[str, Iterable[Any]]) -> Dataset:
        if isinstance(source, (str, os.PathLike)):
            return load_dataset(os.fspath(source), self.schema)
        return load_records(source, self.schema)

    # /* ~~~ Build the inverted index (no I/O) ~~~ */
    def index(self, dataset: Dataset) -> InvertedIndex:
        idx = InvertedIndex(self.min_ngram, self.max_ngram, self.split_words)
        idx.build(dataset.records)
        log.info("Indexed %d records into %d keys", len(dataset.records), len(idx))
        return idx

    # /* ~~~ Full build: load -> index -> validate slugs -> replace output dir ~~~ */
    def build(
        self,
        source: Union[str, Iterable[Any], None] = None,
        out_dir: Optional[str] = None,
        *,
        verbose: bool = False,
    ) -> BuildReport:
        if verbose:
            logging.basicConfig(level=logging.INFO)

        t0 = time.perf_counter()
        source = CFG.INPUT_PATH if source is None else source
        out_dir = out_dir or CFG.OUTPUT_DIR

        dataset = self.load(source)
        if dataset.skipped:
            log.warning("Skipped %d malformed or duplicate entries", dataset.skipped)

        idx = self.index(dataset)
        records = idx.records()

        # Fail before touching the previous output
        slug_map = storage.build_slug_map(records)
        parts = storage.build_partitions(idx, self.cap)

        log.info("Writing artifacts to %s (mode=%s)", out_dir, self.emit_mode)
        storage.reset_dir(out_dir)
        if self.emit_mode == "partition":
            files, size = storage.emit_partitions(out_dir, parts)
        else:
            files, size = storage.emit_per_key(out_dir, parts)
        rfiles, rsize = storage.emit_records(out_dir, records, slug_map,
                                             per_record_files=self.record_files)

        report = BuildReport(
            records=len(records),
            skipped=dataset.skipped,
            keys=len(idx),
            partitions={b: len(entries) for b, entries in parts.items()},
            files_written=files + rfiles,
            bytes_written=size + rsize,
            seconds=time.perf_counter() - t0,
        )
        log.info(
            "Build complete: records=%d skipped=%d keys=%d files=%d size=%.1f KB in %.1f ms",
            report.records, report.skipped, report.keys, report.files_written,
            report.bytes_written / 1000, report.seconds * 1000,
        )
        return report
