# SPDX-FileCopyrightText: 2025 Hugh Walsh
#
# SPDX-License-Identifier: MIT

# This file: src/cdc_fifo/tools/__init__.py

"""Command-line tools.

- cdc-fifo-sim: Run the self-checking bench for one or more YAML specs
"""
