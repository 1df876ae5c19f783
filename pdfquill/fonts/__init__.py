"""Built-in font metrics and font-definition resources.

This directory is also the default location searched for ``<key>.json``
font definitions.
"""
