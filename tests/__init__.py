"""
ASL Learning Test Suite

- unit/: Unit tests for individual components
- integration/: Learning flow tests running the real polling threads
"""
