"""Build labeled positive and negative TFBS sequence sets from called peaks."""

__version__ = "0.1.0"
