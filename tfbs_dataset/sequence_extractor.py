#! /usr/bin/env python
# -*- coding: utf-8 -*-


"""Extract reference sequence for each interval of a BED file into FASTA.
Headers name the source interval as chrom:start-end and each sequence is
written on a single line."""


from abc import ABC
from abc import abstractmethod
from pathlib import Path
from typing import List, Union

from pybedtools import BedTool  # type: ignore
from pybedtools.helpers import BEDToolsError  # type: ignore
from pyfaidx import Fasta  # type: ignore

from tfbs_dataset.peak_centering import read_intervals
from tfbs_dataset.utils.common import check_bedtools
from tfbs_dataset.utils.common import setup_logging
from tfbs_dataset.utils.exceptions import CollaboratorFailure

logger = setup_logging()


def count_fasta_records(fasta_file: Union[str, Path]) -> int:
    """Count the header lines of a FASTA file."""
    with open(fasta_file, "r") as file:
        return sum(1 for line in file if line.startswith(">"))


class SequenceExtractor(ABC):
    """Capability that writes one FASTA record per BED interval."""

    name = "sequence extractor"

    @abstractmethod
    def extract(
        self,
        bed_file: Union[str, Path],
        genome_fasta: Union[str, Path],
        output_fasta: Union[str, Path],
    ) -> int:
        """Write the FASTA and return the number of records written."""


def _skipped_features(stderr: str) -> List[str]:
    """Return the getfasta "Skipping." lines of a stderr message, or an empty
    list if anything else was reported. pybedtools raises on these lines even
    though getfasta has written every other record."""
    lines = [line.strip() for line in stderr.splitlines() if line.strip()]
    skipped = [line for line in lines if line.endswith("Skipping.")]
    others = [
        line
        for line in lines
        if line not in skipped and not line.startswith(("WARNING", "index file"))
    ]
    if others:
        return []
    return skipped


class BedtoolsSequenceExtractor(SequenceExtractor):
    """Extraction by `bedtools getfasta`. Intervals outside a chromosome are
    skipped by bedtools with a "Skipping." message, which is logged as a
    warning, so the record count can fall short of the interval count. Any
    other bedtools error fails the extraction."""

    name = "bedtools getfasta"

    def extract(
        self,
        bed_file: Union[str, Path],
        genome_fasta: Union[str, Path],
        output_fasta: Union[str, Path],
    ) -> int:
        check_bedtools(self.name)
        try:
            BedTool(str(bed_file)).sequence(fi=str(genome_fasta), fo=str(output_fasta))
        except BEDToolsError as error:
            skipped = _skipped_features(error.msg)
            if not skipped or not Path(output_fasta).exists():
                raise CollaboratorFailure(self.name, str(error)) from error
            for message in skipped:
                logger.warning(f"bedtools getfasta: {message}")

        written = count_fasta_records(output_fasta)
        logger.info(f"Wrote {written} sequences to {output_fasta}")
        return written


class FaidxSequenceExtractor(SequenceExtractor):
    """Extraction through an indexed FASTA with pyfaidx. Soft-masked bases keep
    their case. An interval on an unknown chromosome or past the chromosome
    end fails the whole extraction."""

    name = "faidx extractor"

    def extract(
        self,
        bed_file: Union[str, Path],
        genome_fasta: Union[str, Path],
        output_fasta: Union[str, Path],
    ) -> int:
        intervals = read_intervals(bed_file)
        records = []
        with Fasta(str(genome_fasta), one_based_attributes=False) as genome:
            for interval in intervals:
                if interval.chrom not in genome.keys():
                    raise CollaboratorFailure(
                        self.name,
                        f"chromosome {interval.chrom} is not in {genome_fasta}",
                    )
                chrom_length = len(genome[interval.chrom])
                if interval.end > chrom_length:
                    raise CollaboratorFailure(
                        self.name,
                        f"{interval} runs past the end of {interval.chrom} "
                        f"({chrom_length} bp)",
                    )
                sequence = genome[interval.chrom][interval.start : interval.end].seq
                records.append(f">{interval}\n{sequence}\n")

        with open(output_fasta, "w") as file:
            file.writelines(records)
        logger.info(f"Wrote {len(records)} sequences to {output_fasta}")
        return len(records)


def make_extractor(name: str) -> SequenceExtractor:
    """Return the extractor registered under name."""
    extractors = {"bedtools": BedtoolsSequenceExtractor, "faidx": FaidxSequenceExtractor}
    if name not in extractors:
        raise ValueError(
            f"Unknown extractor '{name}', choose from {list(extractors)}"
        )
    return extractors[name]()
