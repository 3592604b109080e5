"""Workstation bootstrap: download and install executables from a TOML package list."""

__version__ = "0.1.0"
