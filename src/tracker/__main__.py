"""Entry point for ``python -m tracker``."""

from tracker import cli


cli.main()
