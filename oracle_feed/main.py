"""Entry point for ``python -m oracle_feed.main``."""
from .cli import main

if __name__ == "__main__":
    main()
