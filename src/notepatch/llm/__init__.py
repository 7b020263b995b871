"""Assistant prompt assembly and reply parsing."""
