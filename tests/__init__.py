"""Test suite for the testscript-plan package.

This package contains unit and integration tests validating capability
tables, setup resolution, plan compilation, error reporting, and the
command-line interface.
"""
