"""Reporters — JSON for workflow steps, Rich for humans."""
