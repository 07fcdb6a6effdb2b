#!/usr/bin/env python3
"""
seqc entry point.

Usage: python seqc.py input.rs [-o output.rs] [--recursion-limit N] [--verbose]
"""

from seqc.compiler import main

if __name__ == '__main__':
    main()
