from pathlib import Path
from typing import List, Optional

import typer

from src.clonotypes import load_samples
from src.clonotypes.config import MIXCR_COLUMNS, VDJTOOLS_COLUMNS
from src.clonotypes.keys import ALL_INTERSECTION_TYPES, KEY_FIELDS
from src.join import JoinConfig, build_joint_sample, joint_table, overlap_table

app = typer.Typer()

TABLE_FORMATS = {"vdjtools": VDJTOOLS_COLUMNS, "mixcr": MIXCR_COLUMNS}


@app.command()
def overlap(
    sample_paths: List[Path] = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="Tab-separated clonotype tables, one per sample.",
    ),
    intersection_type: str = typer.Option(
        "aaV",
        "--intersection-type",
        "-i",
        help="How clonotypes are matched: nt, ntV, ntVJ, aa, aaV, aaVJ or strict.",
        show_default=True,
    ),
    min_occurrences: int = typer.Option(
        1,
        "--min-occurrences",
        help="Keep joint clonotypes detected in at least this many samples.",
        show_default=True,
    ),
    table_format: str = typer.Option("vdjtools", "--format", help="Input layout: vdjtools or mixcr."),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        dir_okay=False,
        writable=True,
        help="Write the pairwise overlap table here instead of printing it.",
    ),
    joint_output: Optional[Path] = typer.Option(
        None,
        "--joint-output",
        dir_okay=False,
        writable=True,
        help="Also write the joint clonotype table to this path.",
    ),
) -> None:
    """
    Join clonotype samples and report pairwise overlap statistics.
    """
    if table_format not in TABLE_FORMATS:
        raise typer.BadParameter(f"Unknown format '{table_format}'. Expected one of: {', '.join(TABLE_FORMATS)}")

    config = JoinConfig(intersection_type=intersection_type, occurrence_threshold=min_occurrences)  # type: ignore[arg-type]
    try:
        config.validate()
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    try:
        samples = load_samples(sample_paths, TABLE_FORMATS[table_format])
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    print(f"[join] Joining {len(samples)} samples by '{intersection_type}' (min occurrences={min_occurrences}).")
    joint_sample = build_joint_sample(samples, config)
    print(
        f"[join] Kept {joint_sample.size()} joint clonotypes; "
        f"total mean frequency={joint_sample.total_mean_freq:.6g}."
    )

    overlaps = overlap_table(joint_sample)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        overlaps.to_csv(output, sep="\t", index=False)
        print(f"[join] Saved pairwise overlap ({len(overlaps)} pairs) → {output}")
    else:
        typer.echo(overlaps.to_csv(sep="\t", index=False), nl=False)

    if joint_output:
        joint_output.parent.mkdir(parents=True, exist_ok=True)
        joint_table(joint_sample).to_csv(joint_output, sep="\t", index=False)
        print(f"[join] Saved joint clonotype table → {joint_output}")


@app.command()
def types() -> None:
    """List the supported intersection types."""
    for name in ALL_INTERSECTION_TYPES:
        typer.echo(f"{name}\t{', '.join(KEY_FIELDS[name])}")


if __name__ == "__main__":
    app()
