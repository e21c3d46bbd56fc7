"""HTTP host for the Grant Discovery pipeline."""
