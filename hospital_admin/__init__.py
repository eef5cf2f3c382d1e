"""Project package for the hospital scheduling and billing backend."""
