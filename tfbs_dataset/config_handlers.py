#! /usr/bin/env python
# -*- coding: utf-8 -*-


"""Class to handle stored configuration for a TFBS dataset run."""


from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml  # type: ignore

from tfbs_dataset.utils.constants import DEFAULT_MAX_TRIES
from tfbs_dataset.utils.constants import DEFAULT_WINDOW_LENGTH
from tfbs_dataset.utils.constants import EXTRACTORS
from tfbs_dataset.utils.constants import SAMPLERS


def load_yaml(yaml_file: Union[str, Path]) -> Dict[str, Any]:
    """Load a YAML file and return the contents as a dictionary."""
    with open(yaml_file, "r") as stream:
        return yaml.safe_load(stream) or {}


@dataclass
class DatasetConfig:
    """Class representing the configuration for a dataset run. Replaces the
    fixed constants of a one-off run with values passed into the pipeline.

    Arguments:
        input_peaks: narrowPeak file with called peaks.
        genome_sizes: two-column chromosome size table.
        genome_fasta: reference genome sequence.
        output_dir: directory receiving all artifacts.
        output_prefix: naming root for artifacts.
        window_length: total width of each centred region.
        sampler: negative sampler implementation (`bedtools` or `native`).
        extractor: sequence extractor implementation (`bedtools` or `faidx`).
        seed: optional random seed for negative sampling.
        max_tries: placement attempts per negative interval.

    Methods
    --------
    from_yaml(yaml_file: Path, **overrides) -> DatasetConfig:
        Loads the configuration YAML, applies CLI overrides, resolves paths and
        validates values.

    Examples:
    --------
    >>> from tfbs_dataset.config_handlers import DatasetConfig
    >>> config = DatasetConfig.from_yaml("configs/ctcf_gm12878.yaml")
    >>> config.half_length
    50
    """

    input_peaks: Path
    genome_sizes: Path
    genome_fasta: Path
    output_dir: Path = Path(".")
    output_prefix: str = ""
    window_length: int = DEFAULT_WINDOW_LENGTH
    sampler: str = "bedtools"
    extractor: str = "bedtools"
    seed: Optional[int] = None
    max_tries: int = DEFAULT_MAX_TRIES

    def __post_init__(self) -> None:
        """Coerce paths and validate values."""
        self.input_peaks = Path(self.input_peaks)
        self.genome_sizes = Path(self.genome_sizes)
        self.genome_fasta = Path(self.genome_fasta)
        self.output_dir = Path(self.output_dir)
        self.output_prefix = self.output_prefix or ""
        self.window_length = self.validate_window_length(self.window_length)
        self.sampler = self._validate_choice("sampler", self.sampler, SAMPLERS)
        self.extractor = self._validate_choice(
            "extractor", self.extractor, EXTRACTORS
        )
        if not isinstance(self.max_tries, int) or self.max_tries <= 0:
            raise ValueError(
                f"max_tries must be a positive integer, got '{self.max_tries}'."
            )

    @classmethod
    def from_yaml(
        cls, yaml_file: Union[str, Path], **overrides: Any
    ) -> "DatasetConfig":
        """Load the configuration from a yaml and set all configs. Overrides
        that are None are ignored so unset CLI flags keep the yaml values."""
        params = load_yaml(yaml_file)

        # relative paths in the yaml are relative to the yaml itself
        cls._resolve_paths(params=params, base_dir=Path(yaml_file).parent)
        params.update(cls._drop_unset(overrides))
        return cls(**params)

    @classmethod
    def from_dict(cls, params: Dict[str, Any]) -> "DatasetConfig":
        """Build the configuration without a yaml, e.g. from CLI flags only."""
        return cls(**cls._drop_unset(params))

    @staticmethod
    def validate_window_length(value: Any) -> int:
        """Check that the window is a positive even integer, so that the
        emitted width is exactly 2 * half_length."""
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            raise ValueError(
                f"window_length must be a positive integer, got '{value}'."
            )
        if value % 2:
            raise ValueError(f"window_length must be even, got '{value}'.")
        return value

    @staticmethod
    def _validate_choice(name: str, value: str, choices: tuple) -> str:
        if value not in choices:
            raise ValueError(f"{name} must be one of {choices}, got '{value}'.")
        return value

    @staticmethod
    def _drop_unset(params: Dict[str, Any]) -> Dict[str, Any]:
        return {key: value for key, value in params.items() if value is not None}

    @staticmethod
    def _resolve_paths(params: Dict[str, Any], base_dir: Path) -> None:
        """Resolve path-valued params against the yaml directory."""
        for key in ["input_peaks", "genome_sizes", "genome_fasta", "output_dir"]:
            if key in params:
                path = Path(params[key]).expanduser()
                if not path.is_absolute():
                    path = base_dir / path
                params[key] = path.resolve()

    @property
    def half_length(self) -> int:
        """Distance from the summit to either edge of a window."""
        return self.window_length // 2

    def _artifact(self, name: str) -> Path:
        prefix = f"{self.output_prefix}_" if self.output_prefix else ""
        return self.output_dir / f"{prefix}{name}"

    @property
    def positive_bed(self) -> Path:
        return self._artifact(f"positive_{self.window_length}bp.bed")

    @property
    def negative_bed(self) -> Path:
        return self._artifact(f"negative_{self.window_length}bp.bed")

    @property
    def positive_fasta(self) -> Path:
        return self._artifact(f"positive_{self.window_length}.fa")

    @property
    def negative_fasta(self) -> Path:
        return self._artifact(f"negative_{self.window_length}.fa")
