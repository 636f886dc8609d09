"""PawFeed feeding-schedule backend."""
