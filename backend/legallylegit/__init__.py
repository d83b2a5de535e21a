"""Legally Legit AI - document generation, legal assistant and entitlements."""
