"""Shared service plumbing: errors, inference backends, models and service routes."""
