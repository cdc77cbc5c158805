"""
CodeCopier - Interactively pick project files and bundle them into Markdown.

This package scans a directory tree for source files matching configurable
include/exclude globs, lets the user choose which of them to keep through a
y/n/p/q prompt, and writes the chosen files as fenced code blocks into a
single (optionally gzip-compressed) document for use with large language
models.
"""

__version__ = "1.0.0"
__author__ = "CodeCopier Team"
