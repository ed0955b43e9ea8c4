"""Domain Layer - Entities persisted through the active-record base."""
