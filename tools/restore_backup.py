#!/usr/bin/env -S uv run
"""Restore a PostgreSQL backup file into a database of a running Docker container.

..important:: The target database is dropped and recreated.
"""

from __future__ import annotations

import sys

import pgcontainer


def main(argv=None):
    return pgcontainer.restore_main(argv)


if __name__ == "__main__":
    sys.exit(main())
