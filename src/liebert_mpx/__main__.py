"""Entry point for running liebert_mpx as a module

Usage:
  python -m liebert_mpx receptacles
  liebert-mpx receptacles    # same, through the pyproject.toml entry point
"""

from .liebert_mpx import main

if __name__ == "__main__":
    raise SystemExit(main())
