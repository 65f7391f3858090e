"""CustomTkinter front end."""
