# provisioner/__init__.py
# -*- coding: utf-8 -*-
"""
Provisioning of a local development copy of a containerised CMS project.
"""

__version__ = "0.1.0"
