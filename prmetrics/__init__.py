"""Effectiveness metrics for AI code reviewer comments on GitHub pull requests."""

import logging

__version__ = "0.1.0"

# Library logging stays silent until the CLI configures a log file
logging.getLogger(__name__).addHandler(logging.NullHandler())
