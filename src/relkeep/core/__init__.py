"""relkeep core — errors, logging, settings, ORM, deletion policies and repositories."""
