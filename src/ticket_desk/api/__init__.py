"""HTTP API for buttons, screens and the desktop shell."""
