#! /usr/bin/env python
# -*- coding: utf-8 -*-


"""Exceptions raised while building a TFBS dataset. Every failure is terminal
for a run."""


class TFBSDatasetError(Exception):
    """Base class for dataset preparation failures."""


class MalformedRecordError(TFBSDatasetError, ValueError):
    """A record in a tabular input file is missing or has non-numeric
    required fields.

    Attributes:
        line_number: 1-based line number of the offending record.
        line: The raw line content.
    """

    def __init__(self, message: str, line_number: int, line: str) -> None:
        self.line_number = line_number
        self.line = line
        super().__init__(f"Line {line_number}: {message} -> {line!r}")


class CollaboratorFailure(TFBSDatasetError, RuntimeError):
    """The negative sampler or the sequence extractor could not fulfil its
    contract."""

    def __init__(self, collaborator: str, message: str) -> None:
        self.collaborator = collaborator
        super().__init__(f"{collaborator} failed: {message}")
