"""Command line front end for sapm."""
