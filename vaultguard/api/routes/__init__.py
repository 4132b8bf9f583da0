"""Route modules: one file per resource, registered explicitly in main.py."""
