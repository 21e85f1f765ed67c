"""Reference model of a shielded-pool mixer client and program."""
