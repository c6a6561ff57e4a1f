"""Application layer – the export pipeline and its ports."""
