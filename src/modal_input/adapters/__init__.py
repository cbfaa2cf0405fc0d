"""Host adapters that feed keystrokes into the dispatcher."""
