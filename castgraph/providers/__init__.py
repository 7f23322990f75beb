"""Concrete implementations of the castgraph provider interfaces."""
