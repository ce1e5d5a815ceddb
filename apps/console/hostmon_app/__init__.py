"""Console front end for hostmon."""
