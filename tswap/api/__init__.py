"""HTTP API for the tswap exchange."""
