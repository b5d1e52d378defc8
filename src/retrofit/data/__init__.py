# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""Packaged reference data (LL97 emissions limits)."""
