"""Invitation-based account provisioning."""
