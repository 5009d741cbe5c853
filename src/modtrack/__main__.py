"""Allow ``python -m modtrack``."""

from modtrack.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
