# Sphinx configuration file

import os
import sys
sys.path.insert(0, os.path.abspath('../src'))

from standup_dashboard import __version__  # noqa: E402

project = 'Standup Dashboard'
copyright = '2025, Standup Dashboard contributors'
author = 'Standup Dashboard contributors'
release = __version__

extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.napoleon',
    'sphinx.ext.viewcode',
    'sphinx.ext.intersphinx',
    'sphinx_autodoc_typehints',
]

templates_path = ['_templates']
exclude_patterns = ['_build', 'Thumbs.db', '.DS_Store']

html_theme = 'sphinx_rtd_theme'

# Autodoc settings
autodoc_default_options = {
    'members': True,
    'member-order': 'bysource',
    'exclude-members': '__weakref__,model_config',
}
autodoc_typehints = 'description'

# Napoleon settings (the code base uses Google style only)
napoleon_google_docstring = True
napoleon_numpy_docstring = False

# Intersphinx mapping
intersphinx_mapping = {
    'python': ('https://docs.python.org/3', None),
    'requests': ('https://requests.readthedocs.io/en/latest', None),
    'pydantic': ('https://docs.pydantic.dev/latest', None),
    'cryptography': ('https://cryptography.io/en/latest', None),
}
