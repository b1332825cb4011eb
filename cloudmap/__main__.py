"""Entry point for `python -m cloudmap`.

Usage:
    python -m cloudmap show i-0abc123
    python -m cloudmap sync ec2
"""

from __future__ import annotations

from cloudmap.cli import cli

cli(prog_name="cloudmap")
