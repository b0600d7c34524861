"""Configuration constants.

Defaults for the risk rules. The rule functions accept overrides by keyword,
and ``AnalysisConfig`` exposes the same values to hosts.
"""

USAGE_PREVIEW_LIMIT = 10
"""Usage lines listed in a risk's details before collapsing into "+N more"."""

LARGE_TABLE_ROWS = 100_000
"""Row count above which deleting a relation escalates one step."""

CONFIG_DIR_NAME = ".schemaguard"
"""Per-project configuration directory."""

ENV_PREFIX = "SCHEMAGUARD__"
"""Prefix for environment variable overrides."""

MANY_CASCADE_FKS = 5
"""CASCADE foreign keys into a table above which deleting it is critical."""
