"""HTTP primitives: request, writer-style response, headers and cookies."""
