#! /usr/bin/env python
# -*- coding: utf-8 -*-


"""Shared fixtures: a two-chromosome toy genome and a small narrowPeak file."""


from pathlib import Path
from typing import Dict, List

import pytest

CHROM_SEQUENCES: Dict[str, str] = {
    "chr1": "ACGT" * 500,  # 2000 bp
    "chr2": "GGCCAATT" * 200,  # 1600 bp
}

# chrom, chromStart, summit offset; the fourth record centres below zero
PEAKS: List[tuple] = [
    ("chr1", 1000, 30),
    ("chr1", 200, 50),
    ("chr1", 1500, 10),
    ("chr1", 10, 5),
    ("chr2", 300, 100),
    ("chr2", 900, 0),
]


def narrowpeak_line(chrom: str, chrom_start: int, summit_offset: int) -> str:
    """Render a full ten-column narrowPeak row."""
    chrom_end = chrom_start + 2 * summit_offset + 20
    return "\t".join(
        [
            chrom,
            str(chrom_start),
            str(chrom_end),
            f"peak_{chrom}_{chrom_start}",
            "1000",
            ".",
            "25.3",
            "-1",
            "4.2",
            str(summit_offset),
        ]
    )


def write_fasta(path: Path, sequences: Dict[str, str], width: int = 60) -> Path:
    with open(path, "w") as file:
        for chrom, sequence in sequences.items():
            file.write(f">{chrom}\n")
            for i in range(0, len(sequence), width):
                file.write(sequence[i : i + width] + "\n")
    return path


@pytest.fixture
def genome_fasta(tmp_path: Path) -> Path:
    return write_fasta(tmp_path / "toy.fa", CHROM_SEQUENCES)


@pytest.fixture
def genome_sizes(tmp_path: Path) -> Path:
    path = tmp_path / "toy.genome"
    path.write_text(
        "".join(f"{chrom}\t{len(seq)}\n" for chrom, seq in CHROM_SEQUENCES.items())
    )
    return path


@pytest.fixture
def peak_file(tmp_path: Path) -> Path:
    path = tmp_path / "peaks.narrowPeak"
    path.write_text("".join(narrowpeak_line(*peak) + "\n" for peak in PEAKS))
    return path


@pytest.fixture
def positive_bed(tmp_path: Path) -> Path:
    """Three chr1 and two chr2 windows of 100 bp."""
    path = tmp_path / "positive_100bp.bed"
    path.write_text(
        "chr1\t980\t1080\n"
        "chr1\t200\t300\n"
        "chr1\t1460\t1560\n"
        "chr2\t350\t450\n"
        "chr2\t850\t950\n"
    )
    return path
