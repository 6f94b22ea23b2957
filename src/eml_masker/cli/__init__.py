"""
CLI module for email masking.

Provides command-line tools for computing canonical masks of .eml files.
"""

from eml_masker.cli.mask import main as mask_main

__all__ = ["mask_main"]
