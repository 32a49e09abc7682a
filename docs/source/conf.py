# -*- coding: utf-8 -*-
#
# Sphinx configuration of the optiscene documentation
#
# Only the settings differing from the sphinx-quickstart defaults are given.

import os
import sys
import inspect

__location__ = os.path.join(os.getcwd(), os.path.dirname(
    inspect.getfile(inspect.currentframe())))

# make the package importable for autodoc without installing it
sys.path.insert(0, os.path.join(__location__, '../../src'))

# -- Project information -----------------------------------------------------

project = u'optiscene'
copyright = u'2024, The optiscene developers'
author = u'The optiscene developers'

version = ''
release = ''
try:
    from optiscene import __version__ as version
except ImportError:
    pass
else:
    release = version

# -- General configuration ---------------------------------------------------

extensions = ['sphinx.ext.autodoc', 'sphinx.ext.intersphinx',
              'sphinx.ext.autosummary', 'sphinx.ext.viewcode',
              'sphinx.ext.mathjax', 'sphinx.ext.napoleon']

napoleon_google_docstring = True
napoleon_numpy_docstring = False

templates_path = ['_templates']
exclude_patterns = ['Thumbs.db', '.DS_Store', 'tests']
master_doc = 'index'
add_module_names = False
autodoc_member_order = 'bysource'
pygments_style = 'friendly'

# substitutions used in the docstrings
rst_prolog = """
.. |Spectrum| replace:: :class:`~optiscene.util.spectrum.Spectrum`
.. |FluenceData| replace:: :class:`~optiscene.elem.fluence.FluenceData`
.. |DataFrame| replace:: :class:`pandas.DataFrame`
"""

modindex_common_prefix = ['optiscene.']

# -- Options for HTML output -------------------------------------------------

html_theme = 'sphinx_rtd_theme'
html_theme_options = {
    'navigation_depth': 4,
}
html_static_path = ['_static']

# -- Options for intersphinx extension ---------------------------------------

python_version = '.'.join(map(str, sys.version_info[0:2]))
intersphinx_mapping = {
    'python': ('https://docs.python.org/' + python_version, None),
    'numpy': ('https://numpy.org/doc/stable', None),
    'pandas': ('https://pandas.pydata.org/pandas-docs/stable', None),
    'scipy': ('https://docs.scipy.org/doc/scipy', None),
    'networkx': ('https://networkx.org/documentation/stable', None),
    'opticalglass': ('https://opticalglass.readthedocs.io/en/latest', None),
}
