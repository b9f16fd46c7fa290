"""Core shared utilities for the plan service."""
