"""An anonymous WSGI message board with expiring threads, throwaway identities and SQL storage."""

__version__ = "0.1.0"