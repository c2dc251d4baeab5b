"""ResumeBoost backend: auto-apply status, checkout and content services."""
