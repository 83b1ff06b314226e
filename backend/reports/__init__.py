"""Report artifacts (quality and validation reports) and the runs index."""
