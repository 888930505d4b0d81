"""FastAPI backend for taskdesk."""
