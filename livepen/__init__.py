"""LivePen: a live HTML/CSS/JS playground with an isolated preview."""
