"""Web API for canister-graph (requires the ``web`` extra)."""
