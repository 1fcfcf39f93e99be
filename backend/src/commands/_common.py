"""Shared helpers for the command line entry points."""

import argparse


def non_negative_int(value: str) -> int:
    """argparse type for hour/day counts."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a whole number, got '{value}'")
    if number < 0:
        raise argparse.ArgumentTypeError(f"expected zero or more, got {number}")
    return number
