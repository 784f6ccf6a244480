"""Nainzaka Aesthetics storefront backend."""
