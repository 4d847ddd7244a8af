"""Compare two published versions of a package: source tree and dependencies."""
