"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Named constants (limits, defaults, file extensions)
- exceptions: Custom exception hierarchy
"""
