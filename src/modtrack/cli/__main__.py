"""Allow ``python -m modtrack.cli``."""

from modtrack.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
