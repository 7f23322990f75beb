"""Allow ``python -m castgraph.cli`` execution."""

from castgraph.cli.universe import main

main()
