"""Allow ``python -m docpipe.cli`` execution."""

from docpipe.cli.ingest import main

main()
