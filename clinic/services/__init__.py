"""Services: orchestrate repositories and external stores."""
