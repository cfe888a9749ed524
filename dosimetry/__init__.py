"""Shared dosimetry core used by the dose entry tool and the billing review portal."""
