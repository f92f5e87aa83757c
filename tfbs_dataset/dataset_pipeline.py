#! /usr/bin/env python
# -*- coding: utf-8 -*-


"""Main script for building a labeled TFBS sequence dataset from called peaks:
summit-centred positive windows, matched random negative windows, and the
reference sequence of both."""


import argparse
from dataclasses import dataclass
from pathlib import Path
import sys
from typing import List, Optional

from tfbs_dataset.config_handlers import DatasetConfig
from tfbs_dataset.negative_sampler import make_sampler
from tfbs_dataset.negative_sampler import NegativeSampler
from tfbs_dataset.peak_centering import center_peaks
from tfbs_dataset.peak_centering import GenomicInterval
from tfbs_dataset.peak_centering import interval_counts_by_chromosome
from tfbs_dataset.peak_centering import read_peak_records
from tfbs_dataset.peak_centering import write_intervals
from tfbs_dataset.sequence_extractor import make_extractor
from tfbs_dataset.sequence_extractor import SequenceExtractor
from tfbs_dataset.utils.arg_parser import TFBSCLIParser
from tfbs_dataset.utils.common import check_file_exists
from tfbs_dataset.utils.common import dir_check_make
from tfbs_dataset.utils.common import setup_logging
from tfbs_dataset.utils.common import time_decorator
from tfbs_dataset.utils.constants import CLASS_LABELS
from tfbs_dataset.utils.exceptions import TFBSDatasetError

logger = setup_logging()


@dataclass
class DatasetArtifacts:
    """Paths and record counts produced by one pipeline run."""

    positive_bed: Path
    negative_bed: Path
    positive_fasta: Path
    negative_fasta: Path
    n_peaks: int = 0
    n_positive: int = 0
    n_dropped: int = 0
    n_negative: int = 0
    n_positive_sequences: int = 0
    n_negative_sequences: int = 0


class DatasetPipeline:
    """Class for running the dataset build end to end. Stages run strictly in
    order and the first exception aborts the run; outputs already written are
    left in place.

    Attributes:
        config (DatasetConfig): Dataset configuration
        sampler (NegativeSampler): Negative region sampler
        extractor (SequenceExtractor): Sequence extractor

    Methods:
    --------
    run: Run the entire pipeline

    Examples:
    --------
    # Build the dataset from a yaml config
    >>> tfbs-dataset --config configs/ctcf_gm12878.yaml

    # Override the window and use the native collaborators
    >>> tfbs-dataset \
        --config configs/ctcf_gm12878.yaml \
        --window_length 200 \
        --sampler native \
        --extractor faidx \
        --seed 42
    """

    def __init__(
        self,
        config: DatasetConfig,
        sampler: Optional[NegativeSampler] = None,
        extractor: Optional[SequenceExtractor] = None,
    ) -> None:
        self.config = config
        self.sampler = sampler or make_sampler(
            config.sampler, seed=config.seed, max_tries=config.max_tries
        )
        self.extractor = extractor or make_extractor(config.extractor)
        self.artifacts = DatasetArtifacts(
            positive_bed=config.positive_bed,
            negative_bed=config.negative_bed,
            positive_fasta=config.positive_fasta,
            negative_fasta=config.negative_fasta,
        )

    def _check_inputs(self) -> None:
        """Fail before any work if an input file is missing."""
        check_file_exists(self.config.input_peaks, "Peak file")
        check_file_exists(self.config.genome_sizes, "Chromosome size table")
        check_file_exists(self.config.genome_fasta, "Reference genome")

    @time_decorator(print_args=False, display_arg="positive windows")
    def create_positive_regions(self) -> List[GenomicInterval]:
        """Centre a window on every peak summit and write the positive BED."""
        logger.info(
            f"Creating centered {self.config.window_length} bp positive regions..."
        )
        records = list(read_peak_records(self.config.input_peaks))
        positives, dropped = center_peaks(records, self.config.half_length)
        write_intervals(positives, self.artifacts.positive_bed)

        self.artifacts.n_peaks = len(records)
        self.artifacts.n_positive = len(positives)
        self.artifacts.n_dropped = dropped
        logger.info(f"Positive regions written to {self.artifacts.positive_bed}")
        return positives

    @time_decorator(print_args=False, display_arg="negative windows")
    def create_negative_regions(self) -> List[GenomicInterval]:
        """Sample matched negatives and write the negative BED."""
        logger.info("Generating matched negative regions...")
        negatives = self.sampler.sample(
            positive_bed=self.artifacts.positive_bed,
            genome_sizes=self.config.genome_sizes,
            output_bed=self.artifacts.negative_bed,
        )
        self.artifacts.n_negative = len(negatives)
        logger.info(f"Negative regions written to {self.artifacts.negative_bed}")
        return negatives

    @time_decorator(print_args=False, display_arg="sequences")
    def extract_sequences(self) -> None:
        """Extract the reference sequence of both interval sets."""
        logger.info("Extracting positive sequences...")
        self.artifacts.n_positive_sequences = self.extractor.extract(
            self.artifacts.positive_bed,
            self.config.genome_fasta,
            self.artifacts.positive_fasta,
        )
        logger.info("Extracting negative sequences...")
        self.artifacts.n_negative_sequences = self.extractor.extract(
            self.artifacts.negative_bed,
            self.config.genome_fasta,
            self.artifacts.negative_fasta,
        )
        self._check_record_counts()

    def _check_record_counts(self) -> None:
        """Warn when the extractor skipped intervals, e.g. windows past a
        chromosome end."""
        for label, intervals, sequences in [
            ("positive", self.artifacts.n_positive, self.artifacts.n_positive_sequences),
            ("negative", self.artifacts.n_negative, self.artifacts.n_negative_sequences),
        ]:
            if intervals != sequences:
                logger.warning(
                    f"{label.capitalize()} FASTA has {sequences} records for "
                    f"{intervals} intervals"
                )

    def _report_distribution(
        self, positives: List[GenomicInterval], negatives: List[GenomicInterval]
    ) -> None:
        """Log positive and negative counts per chromosome."""
        positive_counts = interval_counts_by_chromosome(positives)
        negative_counts = interval_counts_by_chromosome(negatives)
        for chrom, count in positive_counts.items():
            logger.info(
                f"{chrom}: {count} positive / {negative_counts.get(chrom, 0)} negative"
            )

    def _report_completion(self) -> None:
        """Summarise the labeled artifacts."""
        logger.info("============================================")
        logger.info("Dataset preparation complete!")
        logger.info(
            f"Positive FASTA: {self.artifacts.positive_fasta} "
            f"(label = {CLASS_LABELS['positive']})"
        )
        logger.info(
            f"Negative FASTA: {self.artifacts.negative_fasta} "
            f"(label = {CLASS_LABELS['negative']})"
        )
        logger.info(f"Sequence length: {self.config.window_length} bp")
        logger.info("============================================")

    def run(self) -> DatasetArtifacts:
        """Run the entire pipeline."""
        self._check_inputs()
        dir_check_make(self.config.output_dir)

        positives = self.create_positive_regions()
        negatives = self.create_negative_regions()
        self.extract_sequences()

        self._report_distribution(positives, negatives)
        self._report_completion()
        return self.artifacts


def load_config(args: argparse.Namespace) -> DatasetConfig:
    """Build the config from a yaml plus CLI overrides, or from CLI flags
    alone."""
    overrides = {
        "input_peaks": args.input_peaks,
        "genome_sizes": args.genome_sizes,
        "genome_fasta": args.genome_fasta,
        "output_dir": args.output_dir,
        "output_prefix": args.output_prefix,
        "window_length": args.window_length,
        "sampler": args.sampler,
        "extractor": args.extractor,
        "seed": args.seed,
        "max_tries": args.max_tries,
    }
    if args.config:
        return DatasetConfig.from_yaml(args.config, **overrides)
    return DatasetConfig.from_dict(overrides)


def main(argv: Optional[List[str]] = None) -> None:
    """Build the positive and negative FASTA files, exiting with status 1 on
    the first failure."""
    args = TFBSCLIParser().parse_args(argv)
    run_logger = setup_logging(log_file=args.log_file)

    try:
        config = load_config(args)
        DatasetPipeline(config=config).run()
    except (TFBSDatasetError, OSError, ValueError) as error:
        run_logger.error(f"Dataset preparation aborted: {error}")
        sys.exit(1)


if __name__ == "__main__":
    main()
