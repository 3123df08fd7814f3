"""Allow ``python -m streamchat``."""

from .cli.app import main

main()
