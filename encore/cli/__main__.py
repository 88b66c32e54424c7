"""Allow ``python -m encore.cli`` execution."""

from encore.cli.lookup import main

main()
