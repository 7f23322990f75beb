"""Command-line entry points for castgraph."""
