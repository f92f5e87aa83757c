#! /usr/bin/env python
# -*- coding: utf-8 -*-


"""Argument parser for the TFBS dataset pipeline."""


import argparse
import sys
from typing import List, Optional

from tfbs_dataset.utils.constants import EXTRACTORS
from tfbs_dataset.utils.constants import SAMPLERS


class TFBSCLIParser:
    """Class for parsing command-line arguments for the dataset pipeline.
    Every flag left unset falls back to the yaml config.

    Methods:
    --------
    parse_args:
        Parse the command-line arguments and validate.

    Examples:
    --------
    >>> from tfbs_dataset.utils.arg_parser import TFBSCLIParser
    >>> parser = TFBSCLIParser()
    >>> args = parser.parse_args(["--config", "configs/ctcf_gm12878.yaml"])
    """

    REQUIRED_WITHOUT_CONFIG = ["input_peaks", "genome_sizes", "genome_fasta"]

    def __init__(self):
        """Initialize the argument parser."""
        self.parser = argparse.ArgumentParser(
            description="Build positive and negative TFBS sequence sets from called peaks"
        )
        self._add_base_arguments()

    def parse_args(self, argv: Optional[List[str]] = None) -> argparse.Namespace:
        """Parse the command-line arguments and validate."""
        args = self.parser.parse_args(argv)
        self._validate_args(args)
        return args

    def _add_base_arguments(self) -> None:
        """Add base arguments to the parser."""
        self.add_configuration_arguments()
        self.add_dataset_arguments()

    def add_configuration_arguments(self) -> None:
        """Add input, output and logging arguments to the parser."""
        self.parser.add_argument(
            "--config",
            type=str,
            help="Path to dataset YAML file",
        )
        self.parser.add_argument(
            "--input_peaks", type=str, help="narrowPeak file of called peaks"
        )
        self.parser.add_argument(
            "--genome_sizes", type=str, help="Chromosome size table"
        )
        self.parser.add_argument(
            "--genome_fasta", type=str, help="Reference genome FASTA"
        )
        self.parser.add_argument("--output_dir", type=str)
        self.parser.add_argument(
            "--output_prefix",
            type=str,
            help="Naming root prepended to every artifact",
        )
        self.parser.add_argument(
            "--log_file",
            type=str,
            default=None,
            help="Also write log messages to this file",
        )

    def add_dataset_arguments(self) -> None:
        """Add arguments that control the windows and the collaborators."""
        self.parser.add_argument(
            "--window_length",
            type=int,
            help="Total width of each summit-centred region (default: 100)",
        )
        self.parser.add_argument("--sampler", type=str, choices=list(SAMPLERS))
        self.parser.add_argument("--extractor", type=str, choices=list(EXTRACTORS))
        self.parser.add_argument(
            "--seed", type=int, help="random seed for negative sampling"
        )
        self.parser.add_argument(
            "--max_tries",
            type=int,
            help="placement attempts per negative region (default: 1000)",
        )

    @classmethod
    def _validate_args(cls, args: argparse.Namespace) -> None:
        """Helper function to validate CLI arguments that have dependencies."""
        if args.config is None:
            missing = [
                arg for arg in cls.REQUIRED_WITHOUT_CONFIG if getattr(args, arg) is None
            ]
            if missing:
                print(
                    "Error: without --config, "
                    + ", ".join(f"--{arg}" for arg in missing)
                    + " must be set"
                )
                sys.exit(1)

        if args.window_length is not None and args.window_length <= 0:
            print("Error: --window_length must be a positive integer")
            sys.exit(1)
