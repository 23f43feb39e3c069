"""Output generators: CSV, Excel and text tables."""
