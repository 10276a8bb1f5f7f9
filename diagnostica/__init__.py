"""Diagnostics with codes, severities, help text, labelled source spans and span reading."""

__version__ = "0.1.0"

__all__ = ["miette_diagnostic", "protocol", "source_code", "source_impls"]