"""Business operations over the domain and the document store."""
