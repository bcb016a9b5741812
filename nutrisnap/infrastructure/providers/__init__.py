"""Provider adapters: stubs and the environment-driven factory."""
