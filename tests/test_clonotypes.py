"""Tests for clonotype records, identity keys and table loading."""

from __future__ import annotations

from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.clonotypes.config import MIXCR_COLUMNS
from src.clonotypes.keys import ALL_INTERSECTION_TYPES, KEY_SEPARATOR, generate_key, key_function
from src.clonotypes.loader import load_sample, load_samples, normalize_segment, to_count
from src.clonotypes.records import Clonotype, Sample


# ---------------------------------------------------------------------------
# Helper fixtures and utilities


def _clonotype(**overrides: object) -> Clonotype:
    fields = dict(count=10, freq=0.1, cdr3nt="TGTGCCAGC", cdr3aa="CAS", v="TRBV5-1", d="TRBD1", j="TRBJ2-7")
    fields.update(overrides)
    return Clonotype(**fields)  # type: ignore[arg-type]


VDJTOOLS_TABLE = (
    "count\tfreq\tcdr3nt\tcdr3aa\tv\td\tj\n"
    "6\t0.6\tTGTGCC\tCA\tTRBV5-1\tTRBD1\tTRBJ2-7\n"
    "3\t0.3\tTGTAGC\tCS\tTRBV6-2\t.\tTRBJ1-1\n"
    "1\t0.1\tTGTTTT\tCF\tTRBV7-9\t\tTRBJ2-1\n"
)


def _write_table(tmp_path: Path, name: str, payload: str) -> Path:
    path = tmp_path / name
    path.write_text(payload, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Records


def test_clonotype_rejects_bad_frequency() -> None:
    with pytest.raises(ValueError):
        _clonotype(freq=1.5)
    with pytest.raises(ValueError):
        _clonotype(freq=-0.1)
    with pytest.raises(ValueError):
        _clonotype(freq=float("nan"))


def test_clonotype_rejects_negative_count() -> None:
    with pytest.raises(ValueError):
        _clonotype(count=-1)


def test_sample_is_ordered_sequence() -> None:
    clonotypes = [_clonotype(cdr3aa="CA", freq=0.7, count=7), _clonotype(cdr3aa="CB", freq=0.3, count=3)]
    sample = Sample(clonotypes, sample_id="s1")

    assert len(sample) == 2
    assert sample.diversity == 2
    assert sample.total_count == 10
    assert sample.total_freq == pytest.approx(1.0)
    assert [clonotype.cdr3aa for clonotype in sample] == ["CA", "CB"]
    assert sample[1].cdr3aa == "CB"


def test_samples_compare_by_identity() -> None:
    clonotypes = [_clonotype()]
    first = Sample(clonotypes)
    second = Sample(clonotypes)
    assert first == first
    assert first != second


def test_sample_from_counts_derives_frequencies() -> None:
    sample = Sample.from_counts(
        [
            (3, "TGT", "C", "TRBV1", ".", "TRBJ1"),
            (1, "TGG", "W", "TRBV2", ".", "TRBJ1"),
        ],
        sample_id="counts",
    )
    assert [clonotype.freq for clonotype in sample] == pytest.approx([0.75, 0.25])
    assert sample.sample_id == "counts"


def test_sample_from_counts_handles_zero_total() -> None:
    sample = Sample.from_counts([(0, "TGT", "C", "TRBV1", ".", "TRBJ1")])
    assert sample[0].freq == 0.0


# ---------------------------------------------------------------------------
# Identity keys


def test_generate_key_per_intersection_type() -> None:
    clonotype = _clonotype()
    assert generate_key(clonotype, "nt") == "TGTGCCAGC"
    assert generate_key(clonotype, "aa") == "CAS"
    assert generate_key(clonotype, "aaV") == KEY_SEPARATOR.join(["CAS", "TRBV5-1"])
    assert generate_key(clonotype, "ntVJ") == KEY_SEPARATOR.join(["TGTGCCAGC", "TRBV5-1", "TRBJ2-7"])
    assert generate_key(clonotype, "strict") == KEY_SEPARATOR.join(
        ["TGTGCCAGC", "CAS", "TRBV5-1", "TRBD1", "TRBJ2-7"]
    )


def test_key_function_matches_generate_key() -> None:
    clonotype = _clonotype()
    for intersection_type in ALL_INTERSECTION_TYPES:
        assert key_function(intersection_type)(clonotype) == generate_key(clonotype, intersection_type)


def test_key_function_ignores_frequency() -> None:
    fn = key_function("aaVJ")
    assert fn(_clonotype(freq=0.1, count=1)) == fn(_clonotype(freq=0.9, count=90))


def test_unknown_intersection_type_rejected() -> None:
    with pytest.raises(ValueError):
        key_function("aaX")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        generate_key(_clonotype(), "")  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Loader


def test_normalize_segment_strips_alleles_and_scores() -> None:
    assert normalize_segment("TRBV5-1*00(1234),TRBV5-4*00(900)") == "TRBV5-1"
    assert normalize_segment("TRBJ2-7") == "TRBJ2-7"
    assert normalize_segment("") == "."
    assert normalize_segment(None) == "."
    assert normalize_segment(float("nan")) == "."


def test_to_count_accepts_float_strings() -> None:
    assert to_count("12") == 12
    assert to_count("12.0") == 12
    with pytest.raises(ValueError):
        to_count("abc")


def test_load_sample_reads_vdjtools_table(tmp_path: Path) -> None:
    path = _write_table(tmp_path, "donor1.txt", VDJTOOLS_TABLE)
    sample = load_sample(path)

    assert sample.sample_id == "donor1"
    assert sample.diversity == 3
    assert sample.total_count == 10
    first = sample[0]
    assert first.freq == pytest.approx(0.6)
    assert first.cdr3aa == "CA"
    assert first.v == "TRBV5-1"
    assert sample[2].d == "."


def test_load_sample_derives_freq_when_missing(tmp_path: Path) -> None:
    payload = (
        "cloneCount\tnSeqCDR3\taaSeqCDR3\tallVHitsWithScore\tallJHitsWithScore\n"
        "30\tTGTGCC\tCA\tTRBV5-1*00(1200)\tTRBJ2-7*00(300)\n"
        "10\tTGTAGC\tCS\tTRBV6-2*00(800)\tTRBJ1-1*00(250)\n"
    )
    path = _write_table(tmp_path, "mixcr.clones.txt", payload)
    sample = load_sample(path, MIXCR_COLUMNS, sample_id="mixcr")

    assert sample.sample_id == "mixcr"
    assert [clonotype.freq for clonotype in sample] == pytest.approx([0.75, 0.25])
    assert sample[0].v == "TRBV5-1"
    assert sample[0].j == "TRBJ2-7"
    assert sample[0].d == "."


def test_load_sample_rejects_missing_columns(tmp_path: Path) -> None:
    path = _write_table(tmp_path, "broken.txt", "count\tcdr3aa\n1\tCA\n")
    with pytest.raises(ValueError):
        load_sample(path)


def test_load_samples_keeps_order(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    first = _write_table(tmp_path, "b.txt", VDJTOOLS_TABLE)
    second = _write_table(tmp_path, "a.txt", VDJTOOLS_TABLE)
    samples = load_samples([first, second])

    assert [sample.sample_id for sample in samples] == ["b", "a"]
    assert "[samples] Loaded b" in capsys.readouterr().out
