"""Dependency changelog assembly.

Correlates a dependency's published releases with its source repository's
tags and produces an ordered list of upgrade steps, each linking to the
host's compare view between two releases.
"""

__version__ = "0.1.0"
