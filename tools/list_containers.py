#!/usr/bin/env -S uv run
"""List running PostgreSQL containers and their databases."""

from __future__ import annotations

import sys

import pgcontainer


def main(argv=None):
    return pgcontainer.list_containers_main(argv)


if __name__ == "__main__":
    sys.exit(main())
