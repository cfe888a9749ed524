"""Billing review portal for finalized dose records."""
