"""Deployment readiness and metrics validation orchestrator."""
