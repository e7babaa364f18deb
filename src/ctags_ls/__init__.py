"""
ctags-ls: a tag-index driven language server.

Answers goto definition, declaration and implementation requests by querying
a ctags tag file and locating the exact span of each hit in the current file
contents.
"""

__version__ = "0.1.0"
