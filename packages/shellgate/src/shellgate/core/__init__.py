"""Runtime plumbing shared by the pipeline stages."""
