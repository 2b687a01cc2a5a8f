"""Remote DevDocs access."""
