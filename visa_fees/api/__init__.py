"""HTTP routers for the visa fee service."""
