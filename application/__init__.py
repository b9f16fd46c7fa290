"""
Application layer for the plan service.

This package contains:
- ports/: Repository and transport interfaces (what the services need)
- exceptions: Typed failures shared with the infrastructure layer
"""
