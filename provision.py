#!/usr/bin/env python3
# filename: provision.py
# -*- coding: utf-8 -*-
"""
Entry point for the site provisioner.
"""

from provisioner.cli import cli

if __name__ == "__main__":
    cli()
