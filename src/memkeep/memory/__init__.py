"""Flat-file memory store.

Layout (one directory per scope):
    <cwd>/.memkeep/memory/             # local scope (project-specific)
    ~/.config/memkeep/memory/          # global scope (user-wide)
    └── <category>.txt                 # one file per category

Each category file is a sequence of entries terminated by a blank line:

    # tag1 tag2
    data of a tagged entry

    data of an untagged entry

"""
