"""Components of the mixer protocol."""
