"""Output rendering for listings, matrices, and terminal messages."""
