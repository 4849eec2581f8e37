"""Sphinx configuration for the contacts_api package documentation."""

import os
import sys

sys.path.insert(0, os.path.abspath(".."))

project = "contacts-api"
release = "0.1.0"
author = "Contacts Team"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
]

# Google-style Args/Returns/Raises sections in the package docstrings
napoleon_google_docstring = True
autodoc_member_order = "bysource"
autodoc_typehints = "description"

html_theme = "alabaster"
