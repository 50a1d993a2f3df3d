"""HTTP API for the royalty AMM."""
