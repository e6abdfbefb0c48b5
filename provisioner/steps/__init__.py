# provisioner/steps/__init__.py
# -*- coding: utf-8 -*-
"""
The individual provisioning steps.

Each step is a plain function called as
``step(*args, app_settings=..., current_logger=...)`` by the orchestrator.
"""
