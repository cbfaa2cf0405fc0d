"""Runtime services shared by every engine component."""
