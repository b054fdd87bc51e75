"""Stage handlers, collaborator contracts and deadline racing for CFP runs."""
