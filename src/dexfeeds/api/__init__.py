"""HTTP routes exposing feed status."""
