# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Retrofit test suite.

Unit tests per package under ``unit/`` and engine end-to-end runs under
``integration/``.
"""
