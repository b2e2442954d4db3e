"""Refresh orchestration and the shared holiday cache."""
