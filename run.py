#!/usr/bin/env python3
"""Watch terminal output and emit contextual suggestions.

Usage:
    python run.py [--config config.yaml] [--debug] [--trace] [--verbose] [command ...]
    some-command | python run.py
"""
from termsense.main import run

if __name__ == "__main__":
    run()
