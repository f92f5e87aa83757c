#! /usr/bin/env python
# -*- coding: utf-8 -*-


"""Sample negative regions matched to a set of positive windows. For every
positive interval one negative interval of the same width is placed uniformly
at random on the same chromosome, inside the chromosome bounds, without
overlapping any positive interval or any other negative interval."""


from abc import ABC
from abc import abstractmethod
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Union

from intervaltree import IntervalTree  # type: ignore
import numpy as np
from pybedtools import BedTool  # type: ignore
from pybedtools.helpers import BEDToolsError  # type: ignore

from tfbs_dataset.peak_centering import GenomicInterval
from tfbs_dataset.peak_centering import interval_counts_by_chromosome
from tfbs_dataset.peak_centering import read_intervals
from tfbs_dataset.peak_centering import write_intervals
from tfbs_dataset.utils.common import check_bedtools
from tfbs_dataset.utils.common import setup_logging
from tfbs_dataset.utils.constants import DEFAULT_MAX_TRIES
from tfbs_dataset.utils.exceptions import CollaboratorFailure
from tfbs_dataset.utils.exceptions import MalformedRecordError

logger = setup_logging()


def read_chromosome_sizes(genome_file: Union[str, Path]) -> Dict[str, int]:
    """Load a `name<TAB>size` genome file as used by bedtools -g."""
    sizes = {}
    with open(genome_file, "r") as file:
        for line_number, line in enumerate(file, 1):
            if not line.strip() or line.startswith("#"):
                continue
            fields = line.split()
            if len(fields) < 2:
                raise MalformedRecordError(
                    "expected chromosome name and size", line_number, line
                )
            try:
                size = int(fields[1])
            except ValueError as error:
                raise MalformedRecordError(
                    f"chromosome size is not an integer ('{fields[1]}')",
                    line_number,
                    line,
                ) from error
            if size <= 0:
                raise MalformedRecordError(
                    "chromosome size must be positive", line_number, line
                )
            sizes[fields[0]] = size
    return sizes


class NegativeSampler(ABC):
    """Capability that turns a positive BED file into a matched negative BED
    file."""

    name = "negative sampler"

    def __init__(
        self, seed: Optional[int] = None, max_tries: int = DEFAULT_MAX_TRIES
    ) -> None:
        self.seed = seed
        self.max_tries = max_tries

    @abstractmethod
    def sample(
        self,
        positive_bed: Union[str, Path],
        genome_sizes: Union[str, Path],
        output_bed: Union[str, Path],
    ) -> List[GenomicInterval]:
        """Write the negative intervals to output_bed and return them.

        Raises:
            CollaboratorFailure: if any positive interval cannot be matched.
        """


class BedtoolsShuffleSampler(NegativeSampler):
    """Negative sampling by `bedtools shuffle`.

    Positives are shuffled within their own chromosome (-chrom), away from
    every positive (-excl) and from each other (-noOverlapping).

    Examples:
    --------
    >>> sampler = BedtoolsShuffleSampler(seed=42)
    >>> negatives = sampler.sample("positive_100bp.bed", "hg19.genome", "negative_100bp.bed")
    """

    name = "bedtools shuffle"

    def sample(
        self,
        positive_bed: Union[str, Path],
        genome_sizes: Union[str, Path],
        output_bed: Union[str, Path],
    ) -> List[GenomicInterval]:
        check_bedtools(self.name)
        shuffle_args = {
            "g": str(genome_sizes),
            "chrom": True,
            "excl": str(positive_bed),
            "noOverlapping": True,
            "maxTries": self.max_tries,
        }
        if self.seed is not None:
            shuffle_args["seed"] = self.seed

        try:
            BedTool(str(positive_bed)).shuffle(**shuffle_args).saveas(
                str(output_bed)
            )
        except BEDToolsError as error:
            raise CollaboratorFailure(self.name, str(error)) from error

        # shuffle skips entries it cannot place instead of failing
        negatives = read_intervals(output_bed)
        expected = len(read_intervals(positive_bed))
        if len(negatives) != expected:
            raise CollaboratorFailure(
                self.name,
                f"placed {len(negatives)} of {expected} intervals within "
                f"{self.max_tries} tries",
            )
        logger.info(f"Shuffled {len(negatives)} negative regions into {output_bed}")
        return negatives


class RandomIntervalSampler(NegativeSampler):
    """Native negative sampling with rejection of overlapping draws.

    Starts are drawn uniformly from [0, chromosome size - width] with a seeded
    numpy generator. Positives and accepted negatives are held in one interval
    tree per chromosome for overlap tests.
    """

    name = "random interval sampler"

    def sample(
        self,
        positive_bed: Union[str, Path],
        genome_sizes: Union[str, Path],
        output_bed: Union[str, Path],
    ) -> List[GenomicInterval]:
        positives = read_intervals(positive_bed)
        negatives = self.sample_intervals(
            positives, read_chromosome_sizes(genome_sizes)
        )
        write_intervals(negatives, output_bed)
        logger.info(
            f"Sampled {len(negatives)} negative regions over "
            f"{len(interval_counts_by_chromosome(negatives))} chromosomes"
        )
        return negatives

    def sample_intervals(
        self, positives: List[GenomicInterval], chrom_sizes: Dict[str, int]
    ) -> List[GenomicInterval]:
        """Place one negative interval per positive interval, in input
        order."""
        rng = np.random.default_rng(self.seed)
        occupied: Dict[str, IntervalTree] = defaultdict(IntervalTree)
        for positive in positives:
            occupied[positive.chrom].addi(positive.start, positive.end)

        negatives = []
        for positive in positives:
            negative = self._place(positive, chrom_sizes, occupied[positive.chrom], rng)
            occupied[negative.chrom].addi(negative.start, negative.end)
            negatives.append(negative)
        return negatives

    def _place(
        self,
        positive: GenomicInterval,
        chrom_sizes: Dict[str, int],
        occupied: IntervalTree,
        rng: np.random.Generator,
    ) -> GenomicInterval:
        """Draw starts until one lands on free sequence."""
        chrom_size = chrom_sizes.get(positive.chrom)
        if chrom_size is None:
            raise CollaboratorFailure(
                self.name, f"chromosome {positive.chrom} is not in the genome file"
            )
        if positive.width > chrom_size:
            raise CollaboratorFailure(
                self.name,
                f"{positive} is wider than {positive.chrom} ({chrom_size} bp)",
            )

        for _ in range(self.max_tries):
            start = int(rng.integers(0, chrom_size - positive.width + 1))
            end = start + positive.width
            if not occupied.overlaps(start, end):
                return GenomicInterval(positive.chrom, start, end)

        raise CollaboratorFailure(
            self.name,
            f"no free placement for {positive} after {self.max_tries} tries",
        )


def make_sampler(
    name: str, seed: Optional[int] = None, max_tries: int = DEFAULT_MAX_TRIES
) -> NegativeSampler:
    """Return the sampler registered under name."""
    samplers = {"bedtools": BedtoolsShuffleSampler, "native": RandomIntervalSampler}
    if name not in samplers:
        raise ValueError(f"Unknown sampler '{name}', choose from {list(samplers)}")
    return samplers[name](seed=seed, max_tries=max_tries)
