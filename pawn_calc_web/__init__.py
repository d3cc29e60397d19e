"""JSON API exposing the pawn calculator over stored loan records."""
