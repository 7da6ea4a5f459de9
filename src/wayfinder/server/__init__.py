"""Status handlers and the development server bridge."""
