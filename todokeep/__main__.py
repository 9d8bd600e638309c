#!/usr/bin/env python3
"""
todokeep - Main entry point
"""
from todokeep.cli import cli


def main():
    """Main entry point for the todokeep package."""
    cli(prog_name="todokeep")


if __name__ == "__main__":
    main()
