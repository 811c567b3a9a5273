"""Level content and loaders."""
