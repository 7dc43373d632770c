"""Core utilities: errors, logging, middleware, config loading."""
