"""Record gateway and the single-active record lifecycle."""
