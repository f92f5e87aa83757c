# Testing for sequence_extractor.py

"""Tests that one FASTA record is written per interval with a chrom:start-end
header and the reference slice as sequence, that out-of-range intervals fail
the faidx extraction, and that getfasta skips them with a warning."""

import logging
from unittest.mock import patch

from conftest import CHROM_SEQUENCES
from pybedtools.helpers import BEDToolsError  # type: ignore
import pytest

from tfbs_dataset.peak_centering import read_intervals
from tfbs_dataset.sequence_extractor import BedtoolsSequenceExtractor
from tfbs_dataset.sequence_extractor import count_fasta_records
from tfbs_dataset.sequence_extractor import FaidxSequenceExtractor
from tfbs_dataset.sequence_extractor import make_extractor
from tfbs_dataset.utils.exceptions import CollaboratorFailure


def read_fasta_records(path):
    """Return (header, sequence) pairs of a single-line FASTA."""
    lines = path.read_text().splitlines()
    return [(lines[i][1:], lines[i + 1]) for i in range(0, len(lines), 2)]


class TestFaidxSequenceExtractor:
    def test_one_record_per_interval(self, tmp_path, positive_bed, genome_fasta):
        output_fasta = tmp_path / "positive_100.fa"
        written = FaidxSequenceExtractor().extract(
            positive_bed, genome_fasta, output_fasta
        )
        intervals = read_intervals(positive_bed)
        records = read_fasta_records(output_fasta)

        assert written == len(intervals) == len(records)
        for interval, (header, sequence) in zip(intervals, records):
            assert header == f"{interval.chrom}:{interval.start}-{interval.end}"
            assert len(sequence) == interval.width
            assert sequence == CHROM_SEQUENCES[interval.chrom][interval.start : interval.end]

    def test_first_record(self, tmp_path, positive_bed, genome_fasta):
        output_fasta = tmp_path / "positive_100.fa"
        FaidxSequenceExtractor().extract(positive_bed, genome_fasta, output_fasta)
        assert read_fasta_records(output_fasta)[0] == ("chr1:980-1080", "ACGT" * 25)

    def test_empty_bed(self, tmp_path, genome_fasta):
        bed = tmp_path / "empty.bed"
        bed.write_text("")
        output_fasta = tmp_path / "empty.fa"
        assert FaidxSequenceExtractor().extract(bed, genome_fasta, output_fasta) == 0
        assert output_fasta.read_text() == ""

    @pytest.mark.parametrize(
        "bed_line",
        ["chr1\t1950\t2050\n", "chr9\t0\t100\n"],
        ids=["past-chrom-end", "unknown-chrom"],
    )
    def test_out_of_range_fails(self, tmp_path, genome_fasta, bed_line):
        bed = tmp_path / "bad.bed"
        bed.write_text(bed_line)
        output_fasta = tmp_path / "bad.fa"
        with pytest.raises(CollaboratorFailure):
            FaidxSequenceExtractor().extract(bed, genome_fasta, output_fasta)
        assert not output_fasta.exists()


class TestBedtoolsSequenceExtractor:
    @patch("tfbs_dataset.sequence_extractor.check_bedtools")
    @patch("tfbs_dataset.sequence_extractor.BedTool")
    def test_getfasta_arguments(
        self, mock_bedtool, mock_check, tmp_path, positive_bed, genome_fasta
    ):
        output_fasta = tmp_path / "positive_100.fa"
        mock_bedtool.return_value.sequence.side_effect = (
            lambda fi, fo: output_fasta.write_text(">chr1:980-1080\n" + "ACGT" * 25 + "\n")
        )

        written = BedtoolsSequenceExtractor().extract(
            positive_bed, genome_fasta, output_fasta
        )

        mock_bedtool.assert_called_once_with(str(positive_bed))
        mock_bedtool.return_value.sequence.assert_called_once_with(
            fi=str(genome_fasta), fo=str(output_fasta)
        )
        assert written == 1

    @patch("tfbs_dataset.sequence_extractor.check_bedtools")
    @patch("tfbs_dataset.sequence_extractor.BedTool")
    def test_tool_error_is_collaborator_failure(
        self, mock_bedtool, mock_check, tmp_path, positive_bed, genome_fasta
    ):
        mock_bedtool.return_value.sequence.side_effect = BEDToolsError(
            "getfasta", "Error: could not open index"
        )
        with pytest.raises(CollaboratorFailure):
            BedtoolsSequenceExtractor().extract(
                positive_bed, genome_fasta, tmp_path / "out.fa"
            )

    @patch("tfbs_dataset.sequence_extractor.check_bedtools")
    @patch("tfbs_dataset.sequence_extractor.BedTool")
    def test_skipped_feature_is_a_warning(
        self, mock_bedtool, mock_check, tmp_path, genome_fasta, caplog
    ):
        # getfasta writes the in-range record, then pybedtools raises on stderr
        bed = tmp_path / "windows.bed"
        bed.write_text("chr1\t980\t1080\nchr1\t1940\t2040\n")
        output_fasta = tmp_path / "windows.fa"
        stderr = (
            "Feature (chr1:1940-2040) beyond length of chr1 size (2000 bp).  "
            "Skipping.\n"
        )

        def getfasta(fi, fo):
            output_fasta.write_text(">chr1:980-1080\n" + "ACGT" * 25 + "\n")
            raise BEDToolsError("bedtools getfasta", stderr)

        mock_bedtool.return_value.sequence.side_effect = getfasta
        with caplog.at_level(logging.WARNING):
            written = BedtoolsSequenceExtractor().extract(
                bed, genome_fasta, output_fasta
            )

        assert written == 1
        assert "beyond length of chr1 size (2000 bp)" in caplog.text

    @pytest.mark.parametrize(
        "stderr",
        [
            "Error: could not open index\n",
            "Feature (chr1:1940-2040) beyond length of chr1 size (2000 bp).  "
            "Skipping.\nError: malformed BED entry at line 3\n",
        ],
        ids=["other-error", "skip-and-error"],
    )
    @patch("tfbs_dataset.sequence_extractor.check_bedtools")
    @patch("tfbs_dataset.sequence_extractor.BedTool")
    def test_other_stderr_fails(
        self, mock_bedtool, mock_check, tmp_path, positive_bed, genome_fasta, stderr
    ):
        output_fasta = tmp_path / "out.fa"

        def getfasta(fi, fo):
            output_fasta.write_text("")
            raise BEDToolsError("bedtools getfasta", stderr)

        mock_bedtool.return_value.sequence.side_effect = getfasta
        with pytest.raises(CollaboratorFailure) as excinfo:
            BedtoolsSequenceExtractor().extract(positive_bed, genome_fasta, output_fasta)
        assert excinfo.value.collaborator == "bedtools getfasta"

    @patch("tfbs_dataset.sequence_extractor.check_bedtools")
    @patch("tfbs_dataset.sequence_extractor.BedTool")
    def test_skip_without_output_fails(
        self, mock_bedtool, mock_check, tmp_path, positive_bed, genome_fasta
    ):
        mock_bedtool.return_value.sequence.side_effect = BEDToolsError(
            "bedtools getfasta",
            "Feature (chr1:1940-2040) beyond length of chr1 size (2000 bp).  Skipping.\n",
        )
        with pytest.raises(CollaboratorFailure):
            BedtoolsSequenceExtractor().extract(
                positive_bed, genome_fasta, tmp_path / "absent.fa"
            )


def test_count_fasta_records(tmp_path):
    path = tmp_path / "seqs.fa"
    path.write_text(">a\nACGT\n>b\nAC\nGT\n>c\n\n")
    assert count_fasta_records(path) == 3


@pytest.mark.parametrize(
    "name, expected",
    [("bedtools", BedtoolsSequenceExtractor), ("faidx", FaidxSequenceExtractor)],
)
def test_make_extractor(name, expected):
    assert isinstance(make_extractor(name), expected)


def test_make_extractor_unknown():
    with pytest.raises(ValueError):
        make_extractor("twobit")
