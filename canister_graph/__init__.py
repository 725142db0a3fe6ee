"""canister-graph: dependency analysis for multi-canister projects."""

__version__ = "0.2.0"
