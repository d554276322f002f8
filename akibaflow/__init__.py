"""Command line client for the AkibaFlow personal finance API."""

__version__ = "0.1.0"
