# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Integration tests for the retrofit engine.

Runs the six stages together against the in-memory record store.
"""
