"""EnviroLens: login, session, and credential-caching core."""

__version__ = "0.1.0"
