"""stackgen -- full-stack project generator driven by a JSON schema."""

__version__ = "0.1.0"
