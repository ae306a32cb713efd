"""Allow ``python -m coderun``."""

from coderun.cli import main

main()
