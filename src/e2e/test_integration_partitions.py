import json
from pathlib import Path

import pytest
from cityindex import config as CFG
from cityindex.engine import IndexBuilder


def _seed(tmp: Path) -> Path:
    entries = [
        {"__id": 42, "Libellé de la commune": "Saint-Étienne",
         "Code du département": "42", "Code de la commune": "218"},
        {"__id": 3, "Libellé de la commune": "Lyon",
         "Code du département": "69", "Code de la commune": "123"},
    ]
    # 25 "Sa..." names of growing length to overflow the per-key cap
    for i in range(25):
        entries.append({
            "__id": 100 + i,
            "Libellé de la commune": "Sa" + "x" * (25 - i),
            "Code du département": "01", "Code de la commune": str(i),
        })
    path = tmp / "elections.json"
    path.write_text(json.dumps(entries, ensure_ascii=False), encoding="utf-8")
    return path


def _load(p: Path):
    return json.loads(p.read_text(encoding="utf-8"))


@pytest.mark.e2e
def test_one_file_per_bucket(tmp_path: Path):
    out = tmp_path / "cities"
    report = IndexBuilder().build(str(_seed(tmp_path)), str(out))
    assert report.records == 27 and report.skipped == 0
    for b in CFG.BUCKETS:
        assert (out / f"search-{b}.json").exists()
    assert not (out / "search").exists()


@pytest.mark.e2e
def test_partition_correctness_and_cap(tmp_path: Path):
    out = tmp_path / "cities"
    IndexBuilder().build(str(_seed(tmp_path)), str(out))
    for b in CFG.BUCKETS:
        part = _load(out / f"search-{b}.json")
        for key, rows in part.items():
            if b == "0":
                assert key[0] not in "abcdefghijklmnopqrstuvwxyz"
            else:
                assert key[0] == b
            assert len(rows) <= 20
            assert len({r[0] for r in rows}) == len(rows)


@pytest.mark.e2e
def test_ranked_by_name_length(tmp_path: Path):
    out = tmp_path / "cities"
    IndexBuilder().build(str(_seed(tmp_path)), str(out))
    rows = _load(out / "search-s.json")["sa"]
    assert len(rows) == 20
    lengths = [len(r[1]) for r in rows]
    assert lengths == sorted(lengths)
    # the 5 longest "Saxxx..." names fell off
    assert 100 not in {r[0] for r in rows}


@pytest.mark.e2e
def test_saint_etienne_triples(tmp_path: Path):
    out = tmp_path / "cities"
    IndexBuilder().build(str(_seed(tmp_path)), str(out))
    s_part = _load(out / "search-s.json")
    name = "saint-etienne"
    for n in range(2, len(name) + 1):
        key = name[:n]
        if key == "sa":
            continue  # shared with the capped "Sax..." records; ranking covered above
        assert [42, "Saint-Étienne", "42"] in s_part[key]
    assert [42, "Saint-Étienne", "42"] in _load(out / "search-e.json")["etien"]
    assert [42, "Saint-Étienne", "42"] in _load(out / "search-0.json")["42"]


@pytest.mark.e2e
def test_rebuild_replaces_output(tmp_path: Path):
    out = tmp_path / "cities"
    out.mkdir()
    (out / "stale.json").write_text("{}", encoding="utf-8")
    IndexBuilder().build(str(_seed(tmp_path)), str(out))
    assert not (out / "stale.json").exists()


@pytest.mark.e2e
def test_per_key_layout(tmp_path: Path):
    out = tmp_path / "cities"
    report = IndexBuilder(emit_mode="per_key").build(str(_seed(tmp_path)), str(out))
    assert not (out / "search-s.json").exists()
    rows = _load(out / "search" / "lyo.json")
    assert rows == [[3, "Lyon", "69"]]
    assert report.files_written == report.keys + 2


@pytest.mark.e2e
def test_record_files(tmp_path: Path):
    out = tmp_path / "cities"
    IndexBuilder(record_files=True).build(str(_seed(tmp_path)), str(out))
    by_id = _load(out / "42.json")
    by_slug = _load(out / "42-218-saint-etienne.json")
    assert by_id == by_slug
    assert by_id["slug"] == "42-218-saint-etienne"


def test_bad_options():
    with pytest.raises(ValueError):
        IndexBuilder(emit_mode="zip")
    with pytest.raises(ValueError):
        IndexBuilder(cap=0)
    with pytest.raises(ValueError):
        IndexBuilder(schema="unknown")


@pytest.mark.e2e
def test_unremovable_output_dir_aborts_build(tmp_path: Path):
    real = tmp_path / "real"
    real.mkdir()
    (real / "stale.json").write_text("{}", encoding="utf-8")
    out = tmp_path / "cities"
    out.symlink_to(real, target_is_directory=True)

    with pytest.raises(OSError):
        IndexBuilder().build(str(_seed(tmp_path)), str(out))
    assert not (real / "search-s.json").exists()


def test_failed_write_leaves_no_temp_file(tmp_path: Path, monkeypatch):
    from cityindex.DB import storage

    def failing_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(storage.os, "replace", failing_replace)
    target = tmp_path / "slug-map.json"
    with pytest.raises(OSError):
        storage.write_json(str(target), {"69-123-lyon": 3})
    assert not target.exists()
    assert not (tmp_path / "slug-map.json.tmp").exists()
