"""Session/auth gate: who is logged in, and what they may see."""
