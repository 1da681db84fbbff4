"""Configuration read from the environment at process start."""
