"""Board voting application - models, repositories and services."""
