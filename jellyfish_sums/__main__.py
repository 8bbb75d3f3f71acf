from __future__ import annotations

import logging

from .app import run


def main() -> int:
    """Entry point for running the quiz from the command line."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
