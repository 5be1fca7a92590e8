"""notestoself command-line interface."""
