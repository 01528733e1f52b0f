"""Collaborators for the accounting engine: oracles, tokens, custody, admin."""

from cdp_engine.data.provider_factory import create_oracle

__all__ = ["create_oracle"]
