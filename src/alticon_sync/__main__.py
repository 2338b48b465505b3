"""
`python -m alticon_sync` entrypoint.

This is mainly for convenience; the installed console script `alticon-sync` calls
the same `alticon_sync.cli:main`.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
