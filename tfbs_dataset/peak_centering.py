#! /usr/bin/env python
# -*- coding: utf-8 -*-


"""Centre a fixed-width window on the summit of each called peak. Peaks are
read from narrowPeak files, where column 2 is the 0-based peak start and column
10 is the summit offset from that start. Windows that would begin before the
chromosome start are dropped, not clamped. No check is made against the
chromosome end; out-of-range windows are left to the sequence extractor."""


from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

import pandas as pd

from tfbs_dataset.utils.common import setup_logging
from tfbs_dataset.utils.constants import HEADER_PREFIXES
from tfbs_dataset.utils.constants import NARROWPEAK_MIN_COLUMNS
from tfbs_dataset.utils.constants import PEAK_CHROM_COLUMN
from tfbs_dataset.utils.constants import PEAK_START_COLUMN
from tfbs_dataset.utils.constants import PEAK_SUMMIT_COLUMN
from tfbs_dataset.utils.exceptions import MalformedRecordError

logger = setup_logging()


@dataclass(frozen=True)
class PeakRecord:
    """The fields of a narrowPeak row used for centring."""

    chrom: str
    chrom_start: int
    summit_offset: int

    @property
    def summit(self) -> int:
        return self.chrom_start + self.summit_offset


@dataclass(frozen=True)
class GenomicInterval:
    """Half-open interval [start, end) on a chromosome."""

    chrom: str
    start: int
    end: int

    @property
    def width(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "GenomicInterval") -> bool:
        """True if both intervals share at least one base."""
        return (
            self.chrom == other.chrom
            and self.start < other.end
            and other.start < self.end
        )

    def to_bed_fields(self) -> Tuple[str, int, int]:
        return self.chrom, self.start, self.end

    def __str__(self) -> str:
        return f"{self.chrom}:{self.start}-{self.end}"


def _is_header(line: str) -> bool:
    """Blank, comment, track and browser lines carry no record."""
    return not line.strip() or line.startswith(HEADER_PREFIXES)


def _parse_coordinate(value: str, field: str, line_number: int, line: str) -> int:
    """Parse a non-negative integer field or raise naming the line."""
    try:
        coordinate = int(value)
    except ValueError as error:
        raise MalformedRecordError(
            f"{field} is not an integer ('{value}')", line_number, line
        ) from error
    if coordinate < 0:
        raise MalformedRecordError(
            f"{field} is negative ('{value}')", line_number, line
        )
    return coordinate


def parse_peak_line(line: str, line_number: int) -> PeakRecord:
    """Parse one narrowPeak line into a PeakRecord.

    Raises:
        MalformedRecordError: if the line has fewer than ten columns, no
        chromosome, or a missing / non-integer / negative start or summit.
    """
    fields = line.rstrip("\r\n").split("\t")
    if len(fields) < NARROWPEAK_MIN_COLUMNS:
        raise MalformedRecordError(
            f"expected at least {NARROWPEAK_MIN_COLUMNS} tab-separated columns, "
            f"got {len(fields)}",
            line_number,
            line,
        )

    chrom = fields[PEAK_CHROM_COLUMN].strip()
    if not chrom:
        raise MalformedRecordError("empty chromosome name", line_number, line)

    return PeakRecord(
        chrom=chrom,
        chrom_start=_parse_coordinate(
            fields[PEAK_START_COLUMN], "chromStart", line_number, line
        ),
        summit_offset=_parse_coordinate(
            fields[PEAK_SUMMIT_COLUMN], "summit offset", line_number, line
        ),
    )


def read_peak_records(peak_file: Union[str, Path]) -> Iterator[PeakRecord]:
    """Yield a PeakRecord for every data line of a narrowPeak file."""
    with open(peak_file, "r") as file:
        for line_number, line in enumerate(file, 1):
            if _is_header(line):
                continue
            yield parse_peak_line(line, line_number)


def center_peak(record: PeakRecord, half_length: int) -> Optional[GenomicInterval]:
    """Return the window of 2 * half_length bases around the summit, or None
    if the window would start before base 0."""
    start = record.summit - half_length
    if start < 0:
        return None
    return GenomicInterval(record.chrom, start, record.summit + half_length)


def center_peaks(
    records: Iterable[PeakRecord], half_length: int
) -> Tuple[List[GenomicInterval], int]:
    """Centre every record, dropping windows that run off the chromosome
    start.

    Returns:
        The kept intervals in input order and the number of dropped records.
    """
    intervals: List[GenomicInterval] = []
    dropped = 0
    for record in records:
        interval = center_peak(record, half_length)
        if interval is None:
            dropped += 1
            logger.info(
                f"Dropping peak on {record.chrom} with summit {record.summit}: "
                f"window would start at {record.summit - half_length}"
            )
            continue
        intervals.append(interval)

    logger.info(
        f"Centred {len(intervals)} windows of {2 * half_length} bp, "
        f"dropped {dropped} peaks with summit < {half_length}"
    )
    return intervals, dropped


def write_intervals(
    intervals: Iterable[GenomicInterval], bed_file: Union[str, Path]
) -> int:
    """Write intervals as a BED3 file and return the number written."""
    count = 0
    with open(bed_file, "w") as file:
        for interval in intervals:
            chrom, start, end = interval.to_bed_fields()
            file.write(f"{chrom}\t{start}\t{end}\n")
            count += 1
    return count


def read_intervals(bed_file: Union[str, Path]) -> List[GenomicInterval]:
    """Read the first three columns of a BED file."""
    intervals = []
    with open(bed_file, "r") as file:
        for line_number, line in enumerate(file, 1):
            if _is_header(line):
                continue
            fields = line.rstrip("\r\n").split("\t")
            if len(fields) < 3:
                raise MalformedRecordError(
                    f"expected 3 tab-separated columns, got {len(fields)}",
                    line_number,
                    line,
                )
            start = _parse_coordinate(fields[1], "start", line_number, line)
            end = _parse_coordinate(fields[2], "end", line_number, line)
            if end <= start:
                raise MalformedRecordError(
                    "end must be greater than start", line_number, line
                )
            intervals.append(GenomicInterval(fields[0], start, end))
    return intervals


def interval_counts_by_chromosome(
    intervals: Iterable[GenomicInterval],
) -> Dict[str, int]:
    """Number of intervals on each chromosome, in order of first
    appearance."""
    frame = pd.DataFrame(
        [interval.to_bed_fields() for interval in intervals],
        columns=["chrom", "start", "end"],
    )
    counts = frame["chrom"].value_counts(sort=False)
    return {str(chrom): int(count) for chrom, count in counts.items()}
