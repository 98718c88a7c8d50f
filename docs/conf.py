# Configuration file for the Sphinx documentation builder.
#
# For the full list of built-in configuration values, see the documentation:
# https://www.sphinx-doc.org/en/master/usage/configuration.html

import os
import sys

# Add the python package to the path
sys.path.insert(0, os.path.abspath('../python'))

# -- Project information -----------------------------------------------------

project = 'PixelSleuth'
copyright = '2026, PixelSleuth Contributors'
author = 'PixelSleuth Contributors'
release = '0.1.0'

# -- General configuration ---------------------------------------------------

extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.napoleon',
    'sphinx.ext.viewcode',
    'sphinx.ext.mathjax',
    'sphinx_copybutton',
    'sphinxcontrib.mermaid',
]

exclude_patterns = ['_build']
html_theme = 'furo'

# -- Extension configuration -------------------------------------------------

# index.rst pulls whole modules in with automodule
autodoc_default_options = {
    'members': True,
    'member-order': 'bysource',
}
autodoc_mock_imports = ['cv2', 'scipy']

# Docstrings use Google-style Args/Returns/Raises sections
napoleon_google_docstring = True
napoleon_numpy_docstring = False

# Strip the console and doctest prompts from the quick-start blocks
copybutton_prompt_text = r'>>> |\.\.\. |\$ '
copybutton_prompt_is_regexp = True
