"""Core types, enumerations and errors shared by every component."""
