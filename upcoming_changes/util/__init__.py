"""
Utility functions and helpers.

Modules:
- files: Text file reading and writing
- merge: Non-destructive merging of breaking-change reports
- progress: Progress display with rich
"""
