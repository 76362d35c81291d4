"""CLI module for rpcwire."""
