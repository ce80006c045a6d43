# sc_platform/__init__.py
# Showcase - core persistence and reconciliation platform
# Copyright (c) 2025-2026 Showcase
