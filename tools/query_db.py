#!/usr/bin/env -S uv run
"""Run an SQL statement in a database of an auto-detected PostgreSQL container."""

from __future__ import annotations

import sys

import pgcontainer


def main(argv=None):
    return pgcontainer.query_main(argv)


if __name__ == "__main__":
    sys.exit(main())
