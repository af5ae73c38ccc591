"""Command line front end for sparseae."""
