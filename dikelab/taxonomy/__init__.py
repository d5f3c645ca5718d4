"""Factor taxonomy: built-in default tree, fixed factor addressing, detection stub."""
