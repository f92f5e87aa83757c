#! /usr/bin/env python
# -*- coding: utf-8 -*-


"""Constants for TFBS dataset preparation modules."""


from typing import Dict, Tuple

# narrowPeak column indices (0-based)
PEAK_CHROM_COLUMN = 0
PEAK_START_COLUMN = 1
PEAK_SUMMIT_COLUMN = 9
NARROWPEAK_MIN_COLUMNS = 10

# lines that carry no peak record
HEADER_PREFIXES: Tuple[str, ...] = ("#", "track", "browser")

# integer constants
DEFAULT_WINDOW_LENGTH = 100
DEFAULT_MAX_TRIES = 1000

# collaborator implementations
SAMPLERS: Tuple[str, ...] = ("bedtools", "native")
EXTRACTORS: Tuple[str, ...] = ("bedtools", "faidx")

# class labels carried by artifact identity
CLASS_LABELS: Dict[str, int] = {"positive": 1, "negative": 0}
