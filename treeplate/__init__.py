"""Treeplate - directory-tree template renderer.

Copies a staged template tree into a workspace, rendering file names and
file contents with Jinja2 using ``${{ }}`` placeholders.
"""

__version__ = "0.1.0"

# Configure logging for library use
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

from .actions.fetch_template import create_fetch_template_action
from .rendering.walker import copy_templated_contents

__all__ = ["copy_templated_contents", "create_fetch_template_action"]
