"""Run the card sync from a source checkout: ``python -m scripts.sync_cards sync ...``."""

import sys

from cardsync.cli import main

if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
