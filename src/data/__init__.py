"""Government dataset loaders, fallbacks and coordinate lookups."""
