"""neur static site generator.

This package turns a directory of HTML templates, markdown documents and
stylesheets into a static site, using Jinja2 for templates, mistune for
markdown and csscompressor for stylesheet minification.

The main entry point is the CLI module; ``build_site`` in the build module
is the programmatic equivalent.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
