"""Testing – in-memory doubles for the export ports."""
