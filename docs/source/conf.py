import os
import sys

# Put project root on sys.path so autoapi can import the package if needed
sys.path.insert(0, os.path.abspath("../.."))

project = "coinstats"
author = "coinstats contributors"

extensions = [
    "autoapi.extension",
    "sphinx.ext.doctest",
    "sphinx.ext.napoleon",
    "myst_nb",
    "sphinx_copybutton",
]
templates_path = []
exclude_patterns = []

nb_execution_mode = "off"

html_theme = "alabaster"

myst_enable_extensions = [
    "deflist",
    "colon_fence",
    "dollarmath",
]

master_doc = "index"

# -- AutoAPI configuration -------------------------------------------------
autoapi_type = "python"
autoapi_dirs = ["../../coinstats"]
autoapi_ignore = [
    "**/docs/**",
    "**/tests/**",
    "**/__pycache__/**",
]
autodoc_typehints = "description"
autoapi_options = [
    "members",
    "undoc-members",
    "show-inheritance",
    "show-module-summary",
]
autoapi_python_class_content = "both"
